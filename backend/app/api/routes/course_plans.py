"""Course plans saved from chat, and topic progress tracking."""

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, DbSession, require_owner
from app.db import queries
from app.schemas.course_plans import (
    CoursePlanListResponse,
    CoursePlanRead,
    TopicProgressResponse,
    TopicProgressUpdate,
)

router = APIRouter(prefix="/api/course-plans", tags=["course-plans"])


def toggle_topic(modules: list[dict], module_id: str, topic_id: str, completed: bool) -> list[dict]:
    """Copy of ``modules`` with one topic's ``completed`` flag set; unknown ids change nothing."""
    return [
        {
            **module,
            "topics": [
                {**topic, "completed": completed} if topic.get("id") == topic_id else topic
                for topic in module.get("topics", [])
            ],
        }
        if module.get("id") == module_id
        else module
        for module in modules
    ]


@router.get("", response_model=CoursePlanListResponse)
async def list_course_plans(db: DbSession, user: CurrentUser):
    """List the user's plans, most recently updated first."""
    plans = await queries.get_course_plans_by_user_id(db, user.id)
    return CoursePlanListResponse(course_plans=[CoursePlanRead.model_validate(p) for p in plans])


@router.put("", response_model=TopicProgressResponse)
async def update_topic_progress(request: TopicProgressUpdate, db: DbSession, user: CurrentUser):
    """Mark one topic of a plan completed or not."""
    plan = await queries.get_course_plan_by_id(db, request.id)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course plan not found")

    require_owner(plan.user_id, user)

    if plan.modules is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid course plan structure"
        )

    modules = toggle_topic(plan.modules, request.module_id, request.topic_id, request.completed)
    await queries.update_course_plan_modules(db, plan, modules)
    await db.commit()
    return TopicProgressResponse()
