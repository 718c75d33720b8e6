from __future__ import annotations

from fastapi import APIRouter, Depends

from aura_api.routers.deps import get_content_service
from aura_api.schemas.content import LessonRequest, LessonsRequest, NotificationsRequest
from aura_api.services.content_service import ContentService

router = APIRouter(tags=["content"])


@router.post("/get-lessons")
def get_lessons(body: LessonsRequest, content: ContentService = Depends(get_content_service)):
    return {"success": True, "data": content.list_lessons(body.course_id)}


@router.post("/get-lesson")
def get_lesson(body: LessonRequest, content: ContentService = Depends(get_content_service)):
    lesson = content.get_lesson(body.token, body.course_id, body.lesson_id)
    return {"success": True, "data": lesson}


@router.post("/notifications")
def notifications(body: NotificationsRequest, content: ContentService = Depends(get_content_service)):
    return {"success": True, "data": content.list_notifications(body.user_id)}


@router.post("/notifications-count")
def notifications_count(body: NotificationsRequest, content: ContentService = Depends(get_content_service)):
    return {"success": True, "count": content.count_notifications(body.user_id)}
