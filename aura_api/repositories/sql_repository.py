"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
import logging
from typing import Iterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aura_api.core.errors import NotFoundError
from aura_api.db.models import (
    EmailConfirmation,
    HomeworkMessage,
    Profile,
    ResetPasswordToken,
    lesson_table,
)
from aura_api.db.session import get_session

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert(session: Session, model, key: str, values: dict) -> None:
    """Insert ``values`` or overwrite the row sharing ``key`` in one statement."""
    insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
    if insert is None:
        session.merge(model(**values))
        return
    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[key],
        set_={name: getattr(stmt.excluded, name) for name in values if name != key},
    )
    session.execute(stmt)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- profiles --------------------------
    def get_profile(self, email: str) -> Optional[Profile]:
        with get_session() as session:
            return session.get(Profile, email)

    def list_courses(self, email: str) -> list[str]:
        profile = self.get_profile(email)
        if not profile:
            return []
        return [str(course) for course in (profile.available_courses or [])]

    def save_profile(self, email: str, courses: list[str], *, user_id: str | None = None, has_sub: bool = True) -> None:
        """Create the profile or overwrite its entitlement list."""
        now = datetime.now(timezone.utc)
        values = {
            "email": email,
            "available_courses": list(courses),
            "has_sub": has_sub,
            "created_at": now,
            "updated_at": now,
        }
        if user_id:
            values["user_id"] = user_id
        with get_session() as session:
            existing = session.get(Profile, email)
            if existing:
                existing.available_courses = list(courses)
                existing.has_sub = has_sub
                existing.updated_at = now
                if user_id:
                    existing.user_id = user_id
            else:
                session.add(Profile(**values))
            session.commit()

    def grant_course(self, email: str, course_id: str) -> bool:
        """
        Append ``course_id`` to the profile's entitlements unless it is already
        there. Returns True when the list changed.
        """
        with get_session() as session:
            profile = session.get(Profile, email, with_for_update=True)
            if profile is None:
                raise NotFoundError("Profile not found")
            courses = list(profile.available_courses or [])
            if course_id in {str(course) for course in courses}:
                return False
            profile.available_courses = courses + [course_id]
            profile.has_sub = True
            profile.updated_at = datetime.now(timezone.utc)
            session.commit()
            return True

    # -------------------------- email confirmation codes --------------------------
    def replace_confirmation_code(self, email: str, code: str) -> None:
        with get_session() as session:
            _upsert(
                session,
                EmailConfirmation,
                "email",
                {"email": email, "code": code, "created_at": datetime.now(timezone.utc)},
            )
            session.commit()

    def get_latest_confirmation(self, email: str) -> Optional[EmailConfirmation]:
        with get_session() as session:
            stmt = (
                select(EmailConfirmation)
                .where(EmailConfirmation.email == email)
                .order_by(EmailConfirmation.created_at.desc())
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def delete_confirmations(self, email: str) -> None:
        with get_session() as session:
            session.execute(delete(EmailConfirmation).where(EmailConfirmation.email == email))
            session.commit()

    # -------------------------- password reset tokens --------------------------
    def replace_reset_token(self, email: str, token: str) -> None:
        with get_session() as session:
            _upsert(
                session,
                ResetPasswordToken,
                "email",
                {"email": email, "token": token, "created_at": datetime.now(timezone.utc)},
            )
            session.commit()

    def get_reset_token(self, email: str, token: str) -> Optional[ResetPasswordToken]:
        with get_session() as session:
            stmt = select(ResetPasswordToken).where(
                ResetPasswordToken.email == email,
                ResetPasswordToken.token == token,
            )
            return session.execute(stmt).scalar_one_or_none()

    @contextmanager
    def claim_reset_token(self, email: str, token: str) -> Iterator[Optional[ResetPasswordToken]]:
        """
        Lock the matching token row and delete it when the ``with`` block exits
        cleanly. An exception inside the block rolls back and keeps the token.
        Yields None when no row matches.
        """
        with get_session() as session:
            stmt = (
                select(ResetPasswordToken)
                .where(ResetPasswordToken.email == email, ResetPasswordToken.token == token)
                .with_for_update()
            )
            entity = session.execute(stmt).scalar_one_or_none()
            if entity is None:
                yield None
                return
            yield entity
            session.delete(entity)
            try:
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("[reset] Password updated but the reset token for %s was not consumed", email)

    # -------------------------- lessons --------------------------
    def list_lessons(self, course_id: str) -> list[dict]:
        table = lesson_table(course_id)
        stmt = (
            select(table.c.id, table.c.title, table.c.description, table.c.position)
            .order_by(table.c.position, table.c.id)
        )
        with get_session() as session:
            return [dict(row._mapping) for row in session.execute(stmt)]

    def get_lesson(self, course_id: str, lesson_id: int) -> Optional[dict]:
        table = lesson_table(course_id)
        with get_session() as session:
            row = session.execute(select(table).where(table.c.id == lesson_id)).first()
            return dict(row._mapping) if row else None

    # -------------------------- homework notifications --------------------------
    def list_unread_messages(self, user_id: str) -> list[HomeworkMessage]:
        with get_session() as session:
            stmt = (
                select(HomeworkMessage)
                .where(HomeworkMessage.user_id == user_id, HomeworkMessage.is_read.is_(False))
                .order_by(HomeworkMessage.created_at.desc(), HomeworkMessage.id.desc())
            )
            return session.execute(stmt).scalars().all()

    def count_unread_messages(self, user_id: str) -> int:
        with get_session() as session:
            stmt = (
                select(func.count())
                .select_from(HomeworkMessage)
                .where(HomeworkMessage.user_id == user_id, HomeworkMessage.is_read.is_(False))
            )
            return int(session.execute(stmt).scalar_one())
