"""SQL store: engine/session helpers and the ORM models."""

from .session import Base, get_engine, get_session
from .models import EmailConfirmation, HomeworkMessage, Profile, ResetPasswordToken, lesson_table

__all__ = [
    "Base",
    "EmailConfirmation",
    "HomeworkMessage",
    "Profile",
    "ResetPasswordToken",
    "get_engine",
    "get_session",
    "lesson_table",
]
