"""Tests for course plan listing and topic progress."""

from uuid import uuid4

import pytest

from app.api.deps import create_access_token
from app.api.routes.course_plans import toggle_topic
from app.db.models import CoursePlan

from tests.fakes import course_plan_payload


@pytest.fixture
async def plan(db, user) -> CoursePlan:
    payload = course_plan_payload()
    plan = CoursePlan(
        user_id=user.id,
        title=payload["title"],
        description=payload["description"],
        learning_objectives=payload["learning_objectives"],
        total_estimated_time=payload["total_estimated_time"],
        modules=payload["modules"],
    )
    db.add(plan)
    await db.commit()
    return plan


def progress(plan_id, topic_id="topic-1-1", completed=True, module_id="module-1") -> dict:
    return {"id": str(plan_id), "module_id": module_id, "topic_id": topic_id, "completed": completed}


def test_toggle_topic_leaves_other_topics_alone():
    modules = course_plan_payload()["modules"]

    toggled = toggle_topic(modules, "module-1", "topic-1-2", True)

    assert toggled[0]["topics"][1]["completed"] is True
    assert "completed" not in toggled[0]["topics"][0]
    assert toggled[1] == modules[1]
    assert "completed" not in modules[0]["topics"][1]


async def test_list_course_plans(client, auth_headers, plan):
    response = await client.get("/api/course-plans", headers=auth_headers)

    assert response.status_code == 200
    plans = response.json()["course_plans"]
    assert [p["id"] for p in plans] == [str(plan.id)]
    assert plans[0]["modules"][0]["topics"][0]["completed"] is False


async def test_list_is_empty_for_new_user(client, auth_headers):
    response = await client.get("/api/course-plans", headers=auth_headers)

    assert response.json() == {"course_plans": []}


async def test_mark_topic_completed(client, auth_headers, plan):
    response = await client.put("/api/course-plans", json=progress(plan.id), headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True

    plans = (await client.get("/api/course-plans", headers=auth_headers)).json()["course_plans"]
    topics = plans[0]["modules"][0]["topics"]
    assert [t["completed"] for t in topics] == [True, False]


async def test_unknown_topic_changes_nothing(client, auth_headers, plan):
    response = await client.put(
        "/api/course-plans", json=progress(plan.id, topic_id="nope"), headers=auth_headers
    )

    assert response.status_code == 200
    plans = (await client.get("/api/course-plans", headers=auth_headers)).json()["course_plans"]
    assert not any(t["completed"] for m in plans[0]["modules"] for t in m["topics"])


async def test_missing_plan_is_404(client, auth_headers):
    response = await client.put("/api/course-plans", json=progress(uuid4()), headers=auth_headers)

    assert response.status_code == 404


async def test_other_users_plan_is_403(client, db, other_user, plan):
    headers = {"Authorization": f"Bearer {create_access_token(other_user.id)}"}
    response = await client.put("/api/course-plans", json=progress(plan.id), headers=headers)

    assert response.status_code == 403


async def test_plan_without_modules_is_400(client, auth_headers, db, plan):
    plan.modules = None
    await db.commit()

    response = await client.put("/api/course-plans", json=progress(plan.id), headers=auth_headers)

    assert response.status_code == 400
