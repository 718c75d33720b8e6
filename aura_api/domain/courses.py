"""Course ids and the lesson table each course lives in."""
from __future__ import annotations

from aura_api.core.errors import NotFoundError

COURSE_LESSON_TABLES = {
    "1": "lessons_course_1",
    "2": "lessons_course_2",
}


class CourseNotFoundError(NotFoundError):
    def __init__(self, course_id: str):
        super().__init__("Course not found")
        self.course_id = course_id


def normalize_course_id(value: object) -> str:
    return str(value if value is not None else "").strip()


def lesson_table_name(course_id: object) -> str:
    key = normalize_course_id(course_id)
    try:
        return COURSE_LESSON_TABLES[key]
    except KeyError:
        raise CourseNotFoundError(key) from None
