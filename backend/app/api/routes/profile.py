"""Learner profile shown on the dashboard."""

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, DbSession
from app.db import queries
from app.schemas.profile import ProfileRead, ProfileResponse, avatar_fallback_for

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(db: DbSession, user: CurrentUser):
    """The user's profile, with empty strings for fields never collected."""
    profile = await queries.get_user_profile_by_user_id(db, user.id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    return ProfileResponse(
        user_profile=ProfileRead(
            name=profile.name,
            education=profile.education or "",
            past_experience=profile.past_experience or "",
            learning_goals=profile.learning_goals or "",
            daily_time_commitment=profile.daily_time_commitment or "",
            prior_knowledge=profile.prior_knowledge or "",
            current_goal=profile.current_goal or "",
            avatar_fallback=profile.avatar_fallback or avatar_fallback_for(profile.name),
            updated_at=profile.updated_at,
        )
    )
