"""
Pytest configuration and fixtures.
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.db.database import create_tables, ProfileDB, PostDB, PostCommentDB, PostLikeDB
from src.feed.repository import FeedRepository, to_profile


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def seed(session_factory):
    """Insert rows in a short-lived session."""
    def _seed(*rows):
        db = session_factory()
        try:
            db.add_all(rows)
            db.commit()
            return [row.id for row in rows]
        finally:
            db.close()
    return _seed


@pytest.fixture
def profiles(seed):
    rows = {
        "admin": ProfileDB(id="admin-1", full_name="Ana Admin", email="ana@iprsinop.org", role="admin"),
        "leader": ProfileDB(id="leader-1", full_name="Lucas Lider", email="lucas@iprsinop.org", role="leader"),
        "member": ProfileDB(id="member-1", full_name="Maria Membro", email="maria@iprsinop.org", role="member"),
        "other": ProfileDB(id="member-2", full_name="Otavio Membro", email="otavio@iprsinop.org", role="member"),
        "inactive": ProfileDB(id="member-3", full_name="Ines Inativa", email="ines@iprsinop.org",
                              role="member", status="inativo"),
    }
    seed(*rows.values())
    return {key: to_profile(row) for key, row in rows.items()}


@pytest.fixture
def add_post(seed):
    """Create a post authored `hours_ago` hours in the past."""
    def _add_post(author_id, content="Bom dia, igreja!", hours_ago=0, pinned=False, post_id=None):
        row = PostDB(
            author_id=author_id,
            content=content,
            is_pinned=pinned,
            created_at=datetime.utcnow() - timedelta(hours=hours_ago),
        )
        if post_id:
            row.id = post_id
        return seed(row)[0]
    return _add_post


@pytest.fixture
def add_comment(seed):
    def _add_comment(post_id, author_id, content, hours_ago=0):
        return seed(PostCommentDB(
            post_id=post_id,
            author_id=author_id,
            content=content,
            created_at=datetime.utcnow() - timedelta(hours=hours_ago),
        ))[0]
    return _add_comment


@pytest.fixture
def add_like(seed):
    def _add_like(post_id, user_id):
        return seed(PostLikeDB(post_id=post_id, user_id=user_id))[0]
    return _add_like


@pytest.fixture
def repository(session_factory):
    return FeedRepository(session_factory)


@pytest.fixture
def no_sleep():
    """Skip the Nominatim rate limit delay, but record it."""
    with patch("src.geocoding.nominatim.time.sleep") as sleep:
        yield sleep
