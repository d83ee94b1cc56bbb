"""Course plan schemas.

The same models describe the structured output requested from the LLM,
the arguments of the course plan tools and the stored JSON document.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseSchema, IDMixin, OwnedMixin, TimestampMixin

# Enforced both in the generation prompt and in the output schema
MAX_COURSE_MODULES = 5

ResourceTypeType = Literal["video", "article", "quiz"]


class Topic(BaseModel):
    id: str = Field(..., description="Unique identifier for the topic")
    title: str = Field(..., description="Title of the topic")
    estimated_time: str = Field(..., description="Estimated time to complete this topic")
    completed: bool = Field(False, description="Whether this topic has been completed")


class Resource(BaseModel):
    type: ResourceTypeType = Field(..., description="Type of resource")
    title: str = Field(..., description="Title of the resource")
    url: str | None = Field(None, description="URL of the resource, if applicable")
    duration: str | None = Field(None, description="Duration of video resources")
    estimated_read_time: str | None = Field(
        None, description="Estimated time to read article resources"
    )
    questions: int | None = Field(None, description="Number of questions for quiz resources")


class Module(BaseModel):
    id: str = Field(..., description="Unique identifier for the module")
    title: str = Field(..., description="Title of the module")
    description: str = Field(..., description="Description of what the module covers")
    estimated_time: str = Field(..., description="Estimated time to complete this module")
    topics: list[Topic] = Field(default_factory=list)
    resources: list[Resource] = Field(default_factory=list)


class GeneratedCoursePlan(BaseModel):
    """Structured output of the course plan generator."""

    title: str = Field(..., description="The title of the course")
    description: str = Field(..., description="A detailed description of the course")
    learning_objectives: list[str] = Field(
        ..., description="Key learning objectives of the course"
    )
    total_estimated_time: str = Field(
        ..., description="Total estimated time to complete the course"
    )
    modules: list[Module] = Field(..., max_length=MAX_COURSE_MODULES)


class CoursePlanSave(BaseModel):
    """A reviewed course plan to persist for the current user."""

    title: str = Field(..., description="The title of the course")
    description: str = Field(..., description="A detailed description of the course")
    learning_objectives: list[str] | None = Field(
        None, description="Key learning objectives of the course"
    )
    total_estimated_time: str | None = Field(
        None, description="Total estimated time to complete the course"
    )
    modules: list[Module]


class CoursePlanRead(BaseSchema, IDMixin, OwnedMixin, TimestampMixin):
    """Stored course plan."""

    title: str
    description: str
    learning_objectives: list[str] | None
    total_estimated_time: str | None
    modules: list[Module] | None


class CoursePlanListResponse(BaseModel):
    course_plans: list[CoursePlanRead]


class TopicProgressUpdate(BaseModel):
    """Mark one topic of a plan completed or not."""

    id: UUID
    module_id: str
    topic_id: str
    completed: bool


class TopicProgressResponse(BaseModel):
    success: bool = True
    message: str = "Course progress updated successfully"
