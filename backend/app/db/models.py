"""
SQLAlchemy 2.0 Models for Learner's Amigo.

Uses modern declarative syntax with Mapped[] type annotations.
Column types are portable: JSON becomes JSONB and emails become CITEXT on
PostgreSQL, while the same models run on SQLite for tests.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import CITEXT, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")
EmailType = String(255).with_variant(CITEXT(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================


class Visibility(str, PyEnum):
    """Who can read a chat."""

    PRIVATE = "private"
    PUBLIC = "public"


class MessageRole(str, PyEnum):
    """Role of a persisted chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class DocumentKind(str, PyEnum):
    """Kind of generated artifact."""

    TEXT = "text"
    CODE = "code"
    IMAGE = "image"


# =============================================================================
# MODELS
# =============================================================================


class User(Base):
    """
    Core user account.

    Decoupled from auth providers - users can have multiple auth_identities
    linked to one account.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[Optional[str]] = mapped_column(EmailType, unique=True, index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    auth_identities: Mapped[list["AuthIdentity"]] = relationship(
        "AuthIdentity", back_populates="user", cascade="all, delete-orphan"
    )
    profile: Mapped[Optional["UserProfile"]] = relationship(
        "UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class AuthIdentity(Base):
    """OAuth provider identity linked to a user."""

    __tablename__ = "auth_identities"
    __table_args__ = (
        Index("idx_auth_identities_provider_lookup", "provider", "provider_user_id", unique=True),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(50), nullable=False)  # 'google'
    provider_user_id: Mapped[str] = mapped_column(String(255), nullable=False)  # Provider's 'sub' claim
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_login_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="auth_identities")


class Chat(Base):
    """
    One conversation with the assistant.

    Created on the first turn of a conversation, with a generated title.
    """

    __tablename__ = "chats"
    __table_args__ = (Index("idx_chats_user_created", "user_id", "created_at"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Visibility.PRIVATE.value
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    messages: Mapped[list["ChatMessage"]] = relationship(
        "ChatMessage", back_populates="chat", passive_deletes=True
    )


class ChatMessage(Base):
    """
    Individual message in a chat.

    Content is either a plain string or a list of parts
    (``text``, ``tool-call``, ``tool-result``).
    """

    __tablename__ = "chat_messages"
    __table_args__ = (Index("idx_chat_messages_chat_created", "chat_id", "created_at"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    chat_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[Any] = mapped_column(JSONType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    chat: Mapped["Chat"] = relationship("Chat", back_populates="messages")


class Vote(Base):
    """Up/down vote on an assistant message."""

    __tablename__ = "votes"

    chat_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True
    )
    message_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("chat_messages.id", ondelete="CASCADE"), primary_key=True
    )
    is_upvoted: Mapped[bool] = mapped_column(nullable=False)


class Document(Base):
    """
    Versioned artifact (text, code or image).

    Every save inserts a new row sharing the id; the version is identified
    by (id, created_at) and the latest version has the greatest created_at.
    """

    __tablename__ = "documents"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True, default=utcnow)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default=DocumentKind.TEXT.value)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )


class Suggestion(Base):
    """Proposed edit tied to a specific document version."""

    __tablename__ = "suggestions"
    __table_args__ = (
        ForeignKeyConstraint(
            ["document_id", "document_created_at"],
            ["documents.id", "documents.created_at"],
            ondelete="CASCADE",
        ),
        Index("idx_suggestions_document", "document_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    document_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    document_created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    suggested_text: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_resolved: Mapped[bool] = mapped_column(nullable=False, default=False)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class UserProfile(Base):
    """Learning profile gathered through chat (1:1 with users)."""

    __tablename__ = "user_profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    education: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    past_experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    learning_goals: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    daily_time_commitment: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    prior_knowledge: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    current_goal: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_fallback: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="profile")


class CoursePlan(Base):
    """
    Structured course plan.

    Modules are stored as a JSON document:
    ``[{id, title, description, estimated_time, topics[], resources[]}]``.
    """

    __tablename__ = "course_plans"
    __table_args__ = (Index("idx_course_plans_user_updated", "user_id", "updated_at"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    learning_objectives: Mapped[Optional[list[str]]] = mapped_column(JSONType, nullable=True)
    total_estimated_time: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    modules: Mapped[Optional[list[dict]]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
