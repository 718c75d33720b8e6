from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class LessonsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: Union[str, int] = Field(..., alias="courseId")


class LessonRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    course_id: Union[str, int] = Field(..., alias="courseId")
    lesson_id: int = Field(..., alias="lessonId")


class NotificationsRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
