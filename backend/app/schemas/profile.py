"""Learner profile schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.base import BaseSchema


def avatar_fallback_for(name: str) -> str:
    """Upper-cased first letter of the name."""
    return name[:1].upper()


class ProfileInput(BaseModel):
    """Profile fields gathered in conversation."""

    name: str = Field(..., min_length=1, description="The name of the user.")
    education: str | None = Field(
        None, description="User's educational background and qualifications."
    )
    past_experience: str | None = Field(
        None, description="User's past work or relevant experience."
    )
    learning_goals: str = Field(..., description="User's learning objectives and aspirations.")
    current_goal: str = Field(
        ..., description="The specific current learning goal for the user to focus on."
    )
    daily_time_commitment: str | None = Field(
        None, description="How much time the user can dedicate daily to learning."
    )
    prior_knowledge: str | None = Field(
        None, description="The user's prior knowledge level in the subject area."
    )


class ProfileCard(BaseSchema):
    """Profile as displayed on the dashboard; absent optional fields are empty strings."""

    name: str
    education: str = ""
    past_experience: str = ""
    learning_goals: str = ""
    daily_time_commitment: str = ""
    prior_knowledge: str = ""
    avatar_fallback: str = ""

    @classmethod
    def from_input(cls, data: ProfileInput) -> "ProfileCard":
        return cls(
            name=data.name,
            education=data.education or "",
            past_experience=data.past_experience or "",
            learning_goals=data.learning_goals or "",
            daily_time_commitment=data.daily_time_commitment or "",
            prior_knowledge=data.prior_knowledge or "",
            avatar_fallback=avatar_fallback_for(data.name),
        )


class ProfileRead(ProfileCard):
    current_goal: str = ""
    updated_at: datetime


class ProfileResponse(BaseModel):
    user_profile: ProfileRead
