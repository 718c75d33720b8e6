from __future__ import annotations

import pytest

from aura_api.db.models import HomeworkMessage, lesson_table
from aura_api.db.session import get_session


@pytest.fixture()
def lessons(db_env):
    with get_session() as session:
        session.execute(
            lesson_table("1").insert(),
            [
                {"id": 1, "title": "Intro", "description": "Start here", "position": 1, "video_url": "https://v/1"},
                {"id": 2, "title": "Breathing", "description": None, "position": 2, "video_url": "https://v/2"},
            ],
        )
        session.commit()


def test_get_lessons_lists_course(client, lessons):
    response = client.post("/get-lessons", json={"courseId": 1})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [lesson["title"] for lesson in data] == ["Intro", "Breathing"]


def test_get_lessons_unknown_course(client):
    response = client.post("/get-lessons", json={"courseId": "9"})

    assert response.status_code == 400
    assert response.json()["error"] == "Course not found"


def test_get_lesson_requires_entitlement(client, repo, supabase, lessons):
    supabase.add_user("owner@example.com", token="owner-token")
    supabase.add_user("visitor@example.com", token="visitor-token")
    repo.save_profile("owner@example.com", ["1"])
    repo.save_profile("visitor@example.com", ["2"])

    owned = client.post("/get-lesson", json={"token": "owner-token", "courseId": "1", "lessonId": 2})
    denied = client.post("/get-lesson", json={"token": "visitor-token", "courseId": "1", "lessonId": 2})
    invalid = client.post("/get-lesson", json={"token": "forged", "courseId": "1", "lessonId": 2})
    missing = client.post("/get-lesson", json={"token": "owner-token", "courseId": "1", "lessonId": 42})

    assert owned.status_code == 200
    assert owned.json()["data"]["video_url"] == "https://v/2"
    assert denied.status_code == 403
    assert denied.json()["error"] == "Course not purchased"
    assert invalid.status_code == 401
    assert missing.status_code == 404


def test_notifications(client, db_env):
    with get_session() as session:
        session.add_all(
            [
                HomeworkMessage(user_id="user-1", course_id="1", lesson_id=1, author="Mentor", text="Nice work"),
                HomeworkMessage(user_id="user-1", text="Old", is_read=True),
            ]
        )
        session.commit()

    listed = client.post("/notifications", json={"user_id": "user-1"})
    counted = client.post("/notifications-count", json={"user_id": "user-1"})

    assert listed.status_code == 200
    assert [item["text"] for item in listed.json()["data"]] == ["Nice work"]
    assert listed.json()["data"][0]["author"] == "Mentor"
    assert counted.json() == {"success": True, "count": 1}
