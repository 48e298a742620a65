from sqlalchemy import (
    create_engine, Column, String, Float, Boolean, Date, DateTime, Text, ForeignKey, UniqueConstraint
)
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, relationship
from datetime import datetime
import os
import uuid
import logging

# Get logger
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DB_URL", "sqlite:///./ipr_sinop.db")
Base = declarative_base()


def new_id():
    return str(uuid.uuid4())


class ProfileDB(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, default=new_id)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(String, default="member")  # admin | leader | member
    photo_url = Column(String, nullable=True)
    status = Column(String, default="ativo")  # ativo | inativo
    created_at = Column(DateTime, default=datetime.utcnow)


class CellDB(Base):
    __tablename__ = "cells"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    leader_id = Column(String, ForeignKey("profiles.id"), nullable=True)
    address = Column(String, default="")
    number = Column(String, nullable=True)
    neighborhood = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CellMeetingDB(Base):
    __tablename__ = "cell_meetings"
    id = Column(String, primary_key=True, default=new_id)
    cell_id = Column(String, ForeignKey("cells.id", ondelete="CASCADE"), nullable=False, index=True)
    meeting_date = Column(Date, nullable=False)
    topic = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    attendance = relationship("CellAttendanceDB", cascade="all, delete-orphan")


class CellAttendanceDB(Base):
    __tablename__ = "cell_attendance"
    __table_args__ = (UniqueConstraint("meeting_id", "member_id", name="uq_cell_attendance_meeting_member"),)
    id = Column(String, primary_key=True, default=new_id)
    meeting_id = Column(String, ForeignKey("cell_meetings.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    present = Column(Boolean, nullable=False, default=False)


class PostDB(Base):
    __tablename__ = "posts"
    id = Column(String, primary_key=True, default=new_id)
    author_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    content = Column(Text, default="")
    image_url = Column(String, nullable=True)
    is_pinned = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    author = relationship("ProfileDB")
    comments = relationship(
        "PostCommentDB", order_by="PostCommentDB.created_at", cascade="all, delete-orphan"
    )
    likes = relationship("PostLikeDB", cascade="all, delete-orphan")


class PostCommentDB(Base):
    __tablename__ = "post_comments"
    id = Column(String, primary_key=True, default=new_id)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    author = relationship("ProfileDB")


class PostLikeDB(Base):
    __tablename__ = "post_likes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),)
    id = Column(String, primary_key=True, default=new_id)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("ProfileDB")


class MinuteDB(Base):
    __tablename__ = "minutes"
    id = Column(String, primary_key=True, default=new_id)
    number = Column(String, nullable=False)
    title = Column(String, nullable=False)
    pdf_url = Column(String, nullable=True)
    summary = Column(Text, nullable=True)  # JSON written by the AI summary webhook
    created_at = Column(DateTime, default=datetime.utcnow)


engine = create_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind=None):
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables created (if they didn't exist previously).")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
