"""
Remote feed store backed by SQLAlchemy.

Each call opens its own session, commits on success and rolls back on failure.
Database errors are raised as RemoteFailure.
"""
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from src.db.database import SessionLocal, ProfileDB, PostDB, PostCommentDB, PostLikeDB
from src.errors import NotFoundError, RemoteFailure
from src.models.feed import AuthorSummary, Comment, Like, Post, Profile, ROLES, STATUSES

logger = logging.getLogger(__name__)


def _author(row):
    return AuthorSummary(full_name=row.full_name, photo_url=row.photo_url) if row else None


def to_post(row):
    return Post(
        id=row.id,
        author_id=row.author_id,
        content=row.content or "",
        image_url=row.image_url,
        created_at=row.created_at,
        is_pinned=bool(row.is_pinned),
        author=_author(row.author),
        comments=[
            Comment(
                id=c.id,
                post_id=c.post_id,
                author_id=c.author_id,
                content=c.content,
                created_at=c.created_at,
                author=_author(c.author),
            )
            for c in row.comments
        ],
        likes=[Like(user_id=l.user_id, author=_author(l.user)) for l in row.likes],
    )


def to_profile(row):
    """
    Build a Profile from its row. The role column is free text; a value outside
    the known roles is read as a plain member, and an unknown status as inactive.
    """
    role = row.role or "member"
    if role not in ROLES:
        logger.warning(f"Profile {row.id} has unknown role '{role}', treating it as member")
        role = "member"

    status = row.status or "ativo"
    if status not in STATUSES:
        logger.warning(f"Profile {row.id} has unknown status '{status}', treating it as inativo")
        status = "inativo"

    return Profile(
        id=row.id,
        full_name=row.full_name,
        email=row.email or "",
        role=role,
        photo_url=row.photo_url,
        status=status,
    )


class FeedRepository:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def _run(self, action, operation):
        db = self.session_factory()
        try:
            result = action(db)
            db.commit()
            return result
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error during '{operation}': {e}")
            raise RemoteFailure(f"Erro ao {operation}", str(e)) from e
        finally:
            db.close()

    def get_profile(self, user_id):
        def action(db):
            row = db.query(ProfileDB).filter(ProfileDB.id == user_id).first()
            if not row:
                raise NotFoundError("Perfil não encontrado", f"No profile with id {user_id}")
            return to_profile(row)
        return self._run(action, "carregar perfil")

    def fetch_page(self, index, page_size):
        def action(db):
            rows = (
                db.query(PostDB)
                .options(
                    selectinload(PostDB.author),
                    selectinload(PostDB.comments).selectinload(PostCommentDB.author),
                    selectinload(PostDB.likes).selectinload(PostLikeDB.user),
                )
                .order_by(PostDB.is_pinned.desc(), PostDB.created_at.desc())
                .offset(index * page_size)
                .limit(page_size)
                .all()
            )
            return [to_post(row) for row in rows]
        return self._run(action, "carregar feed")

    def get_post_author(self, post_id):
        def action(db):
            row = db.query(PostDB.author_id).filter(PostDB.id == post_id).first()
            if not row:
                raise NotFoundError("Post não encontrado", f"No post with id {post_id}")
            return row.author_id
        return self._run(action, "carregar post")

    def count_posts_since(self, author_id, since):
        def action(db):
            return (
                db.query(func.count(PostDB.id))
                .filter(PostDB.author_id == author_id, PostDB.created_at >= since)
                .scalar()
            ) or 0
        return self._run(action, "contar publicações")

    def insert_post(self, author_id, content, image_url=None):
        def action(db):
            row = PostDB(author_id=author_id, content=content, image_url=image_url,
                         created_at=datetime.utcnow())
            db.add(row)
            db.flush()
            return row.id
        return self._run(action, "publicar")

    def find_like(self, post_id, user_id):
        def action(db):
            row = (
                db.query(PostLikeDB.id)
                .filter(PostLikeDB.post_id == post_id, PostLikeDB.user_id == user_id)
                .first()
            )
            return row.id if row else None
        return self._run(action, "curtir/descurtir")

    def insert_like(self, post_id, user_id):
        def action(db):
            db.add(PostLikeDB(post_id=post_id, user_id=user_id))
        return self._run(action, "curtir/descurtir")

    def delete_like(self, like_id):
        def action(db):
            db.query(PostLikeDB).filter(PostLikeDB.id == like_id).delete()
        return self._run(action, "curtir/descurtir")

    def insert_comment(self, post_id, author_id, content):
        def action(db):
            db.add(PostCommentDB(post_id=post_id, author_id=author_id, content=content,
                                 created_at=datetime.utcnow()))
        return self._run(action, "comentar")

    def _get_comment(self, db, comment_id):
        row = db.query(PostCommentDB).filter(PostCommentDB.id == comment_id).first()
        if not row:
            raise NotFoundError("Comentário não encontrado", f"No comment with id {comment_id}")
        return row

    def get_comment_author(self, comment_id):
        def action(db):
            return self._get_comment(db, comment_id).author_id
        return self._run(action, "carregar comentário")

    def update_comment(self, comment_id, content):
        def action(db):
            self._get_comment(db, comment_id).content = content
        return self._run(action, "atualizar comentário")

    def delete_comment(self, comment_id):
        def action(db):
            db.delete(self._get_comment(db, comment_id))
        return self._run(action, "excluir comentário")

    def _get_post(self, db, post_id):
        row = db.query(PostDB).filter(PostDB.id == post_id).first()
        if not row:
            raise NotFoundError("Post não encontrado", f"No post with id {post_id}")
        return row

    def update_content(self, post_id, content):
        def action(db):
            self._get_post(db, post_id).content = content
        return self._run(action, "atualizar post")

    def set_pinned(self, post_id, pinned):
        def action(db):
            self._get_post(db, post_id).is_pinned = pinned
        return self._run(action, "atualizar mural")

    def delete_post(self, post_id):
        def action(db):
            db.delete(self._get_post(db, post_id))
        return self._run(action, "excluir post")
