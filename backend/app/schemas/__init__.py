"""Pydantic schemas for API request/response validation."""

from app.schemas.user import UserRead
from app.schemas.auth import (
    GoogleAuthRequest,
    TokenResponse,
)
from app.schemas.chat import (
    ChatModelResponse,
    ChatRequest,
    ChatResponse,
    ChatWithMessages,
    ToolInvocation,
    UIMessage,
    VisibilityUpdateRequest,
    VoteRequest,
    VoteResponse,
)
from app.schemas.documents import (
    DocumentRead,
    DocumentSave,
    DocumentVersionsDelete,
    SuggestionRead,
)
from app.schemas.course_plans import (
    CoursePlanRead,
    CoursePlanSave,
    GeneratedCoursePlan,
    TopicProgressUpdate,
)
from app.schemas.profile import ProfileCard, ProfileInput, ProfileRead

__all__ = [
    # User
    "UserRead",
    # Auth
    "GoogleAuthRequest",
    "TokenResponse",
    # Chat
    "ChatModelResponse",
    "ChatRequest",
    "ChatResponse",
    "ChatWithMessages",
    "ToolInvocation",
    "UIMessage",
    "VisibilityUpdateRequest",
    "VoteRequest",
    "VoteResponse",
    # Documents
    "DocumentRead",
    "DocumentSave",
    "DocumentVersionsDelete",
    "SuggestionRead",
    # Course plans
    "CoursePlanRead",
    "CoursePlanSave",
    "GeneratedCoursePlan",
    "TopicProgressUpdate",
    # Profile
    "ProfileCard",
    "ProfileInput",
    "ProfileRead",
]
