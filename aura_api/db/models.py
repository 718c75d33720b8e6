"""SQLAlchemy models for the tables this service reads and writes."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Table,
    Text,
    JSON,
    func,
)

from aura_api.domain.courses import COURSE_LESSON_TABLES, lesson_table_name

from .session import Base


class Profile(Base):
    __tablename__ = "profiles"

    email = Column(String(255), primary_key=True)
    user_id = Column(String(64), nullable=True, index=True)
    available_courses = Column(JSON, nullable=False, default=list)
    has_sub = Column("hasSub", Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class EmailConfirmation(Base):
    __tablename__ = "confirmEmail"

    email = Column(String(255), primary_key=True)
    code = Column(String(8), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ResetPasswordToken(Base):
    __tablename__ = "resetPassword"

    email = Column(String(255), primary_key=True)
    token = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class HomeworkMessage(Base):
    __tablename__ = "homework_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    course_id = Column(String(16), nullable=True)
    lesson_id = Column(Integer, nullable=True)
    author = Column(String(255), nullable=True)
    text = Column(Text, nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


def _lesson_table(name: str) -> Table:
    return Table(
        name,
        Base.metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("title", String(255), nullable=False),
        Column("description", Text, nullable=True),
        Column("video_url", Text, nullable=True),
        Column("content", Text, nullable=True),
        Column("position", Integer, nullable=False, default=0),
    )


LESSON_TABLES = {name: _lesson_table(name) for name in COURSE_LESSON_TABLES.values()}


def lesson_table(course_id: object) -> Table:
    """Table holding the lessons of a course; raises CourseNotFoundError for unknown ids."""
    return LESSON_TABLES[lesson_table_name(course_id)]
