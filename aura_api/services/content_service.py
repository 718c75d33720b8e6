"""
Lesson lookups gated by the caller's entitlements, and homework notifications.
"""

from __future__ import annotations

from dataclasses import dataclass

from aura_api.core.errors import ForbiddenError, NotFoundError
from aura_api.core.identity import SupabaseIdentity
from aura_api.db.models import HomeworkMessage
from aura_api.domain.courses import lesson_table_name, normalize_course_id
from aura_api.repositories.sql_repository import SQLRepository


def _message_to_dict(message: HomeworkMessage) -> dict:
    return {
        "id": message.id,
        "user_id": message.user_id,
        "course_id": message.course_id,
        "lesson_id": message.lesson_id,
        "author": message.author,
        "text": message.text,
        "created_at": message.created_at.isoformat() if message.created_at else None,
    }


@dataclass
class ContentService:
    repository: SQLRepository
    identity: SupabaseIdentity

    def list_lessons(self, course_id: object) -> list[dict]:
        return self.repository.list_lessons(normalize_course_id(course_id))

    def get_lesson(self, access_token: str, course_id: object, lesson_id: int) -> dict:
        course = normalize_course_id(course_id)
        lesson_table_name(course)  # unknown course fails before the token round-trip
        user = self.identity.get_user(access_token)
        if course not in self.repository.list_courses(user.email):
            raise ForbiddenError("Course not purchased")
        lesson = self.repository.get_lesson(course, lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found", status_code=404)
        return lesson

    def list_notifications(self, user_id: str) -> list[dict]:
        return [_message_to_dict(m) for m in self.repository.list_unread_messages(user_id)]

    def count_notifications(self, user_id: str) -> int:
        return self.repository.count_unread_messages(user_id)
