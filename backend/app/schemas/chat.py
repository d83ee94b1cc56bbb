"""Pydantic schemas for chat operations."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseSchema, IDMixin, OwnedMixin

VisibilityType = Literal["private", "public"]


class ToolInvocation(BaseModel):
    """Tool call as shown in the UI, with its result once available."""

    state: Literal["partial-call", "call", "result"] = "call"
    tool_call_id: str
    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    result: Any = None


class UIMessage(BaseModel):
    """Message as exchanged with the browser."""

    id: str | None = None
    role: Literal["system", "user", "assistant", "data"]
    content: str = ""
    tool_invocations: list[ToolInvocation] | None = None
    annotations: list[dict[str, Any]] | None = None


# Request schemas
class ChatRequest(BaseModel):
    """One chat turn: the full UI history plus the selected model."""

    id: UUID
    messages: list[UIMessage]
    model_id: str


class VisibilityUpdateRequest(BaseModel):
    """Request to change who can read a chat."""

    visibility: VisibilityType


class VoteRequest(BaseModel):
    """Up or down vote on an assistant message."""

    chat_id: UUID
    message_id: UUID
    type: Literal["up", "down"]


# Response schemas
class ChatModelResponse(BaseModel):
    """Selectable chat model."""

    id: str
    label: str
    api_identifier: str
    description: str


class ChatResponse(BaseSchema, IDMixin, OwnedMixin):
    """Chat response."""

    title: str
    visibility: VisibilityType
    created_at: datetime


class ChatWithMessages(ChatResponse):
    """Chat with its history converted for the UI."""

    messages: list[UIMessage]


class VoteResponse(BaseSchema):
    """Vote response."""

    chat_id: UUID
    message_id: UUID
    is_upvoted: bool
