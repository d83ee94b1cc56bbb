"""
Storage operations shared by the routes and the tool executors.

Functions here only flush; the caller decides when to commit. Tools that
write storage commit before returning their result.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import (
    Chat,
    ChatMessage,
    CoursePlan,
    Document,
    Suggestion,
    UserProfile,
    Vote,
    utcnow,
)


# =============================================================================
# CHATS AND MESSAGES
# =============================================================================


async def get_chat_by_id(db: AsyncSession, chat_id: UUID) -> Chat | None:
    result = await db.execute(select(Chat).where(Chat.id == chat_id))
    return result.scalar_one_or_none()


async def save_chat(db: AsyncSession, *, chat_id: UUID, user_id: UUID, title: str) -> Chat:
    chat = Chat(id=chat_id, user_id=user_id, title=title)
    db.add(chat)
    await db.flush()
    return chat


async def get_chats_by_user_id(db: AsyncSession, user_id: UUID) -> list[Chat]:
    result = await db.execute(
        select(Chat).where(Chat.user_id == user_id).order_by(Chat.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_chat_by_id(db: AsyncSession, chat_id: UUID) -> None:
    """Delete a chat with its votes and messages."""
    await db.execute(delete(Vote).where(Vote.chat_id == chat_id))
    await db.execute(delete(ChatMessage).where(ChatMessage.chat_id == chat_id))
    await db.execute(delete(Chat).where(Chat.id == chat_id))


async def save_messages(db: AsyncSession, messages: list[ChatMessage]) -> None:
    db.add_all(messages)
    await db.flush()


async def get_messages_by_chat_id(db: AsyncSession, chat_id: UUID) -> list[ChatMessage]:
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.chat_id == chat_id)
        .order_by(ChatMessage.created_at.asc())
    )
    return list(result.scalars().all())


async def delete_messages_by_chat_id_after_timestamp(
    db: AsyncSession, chat_id: UUID, timestamp: datetime
) -> int:
    """Delete messages created at or after ``timestamp`` along with their votes."""
    result = await db.execute(
        select(ChatMessage.id).where(
            ChatMessage.chat_id == chat_id, ChatMessage.created_at >= timestamp
        )
    )
    message_ids = list(result.scalars().all())
    if not message_ids:
        return 0

    await db.execute(
        delete(Vote).where(Vote.chat_id == chat_id, Vote.message_id.in_(message_ids))
    )
    await db.execute(delete(ChatMessage).where(ChatMessage.id.in_(message_ids)))
    return len(message_ids)


async def update_chat_visibility(db: AsyncSession, chat: Chat, visibility: str) -> Chat:
    chat.visibility = visibility
    await db.flush()
    return chat


# =============================================================================
# VOTES
# =============================================================================


async def vote_message(
    db: AsyncSession, *, chat_id: UUID, message_id: UUID, is_upvoted: bool
) -> Vote:
    """Update the existing vote on a message, else insert one."""
    result = await db.execute(
        select(Vote).where(Vote.chat_id == chat_id, Vote.message_id == message_id)
    )
    vote = result.scalar_one_or_none()
    if vote is None:
        vote = Vote(chat_id=chat_id, message_id=message_id, is_upvoted=is_upvoted)
        db.add(vote)
    else:
        vote.is_upvoted = is_upvoted
    await db.flush()
    return vote


async def get_votes_by_chat_id(db: AsyncSession, chat_id: UUID) -> list[Vote]:
    result = await db.execute(select(Vote).where(Vote.chat_id == chat_id))
    return list(result.scalars().all())


# =============================================================================
# DOCUMENTS AND SUGGESTIONS
# =============================================================================


async def save_document(
    db: AsyncSession,
    *,
    document_id: UUID,
    title: str,
    kind: str,
    content: str | None,
    user_id: UUID,
) -> Document:
    """Insert a new version of a document."""
    document = Document(
        id=document_id,
        created_at=utcnow(),
        title=title,
        kind=kind,
        content=content,
        user_id=user_id,
    )
    db.add(document)
    await db.flush()
    return document


async def get_documents_by_id(db: AsyncSession, document_id: UUID) -> list[Document]:
    """All versions of a document, oldest first."""
    result = await db.execute(
        select(Document).where(Document.id == document_id).order_by(Document.created_at.asc())
    )
    return list(result.scalars().all())


async def get_document_by_id(db: AsyncSession, document_id: UUID) -> Document | None:
    """Latest version of a document."""
    result = await db.execute(
        select(Document)
        .where(Document.id == document_id)
        .order_by(Document.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def delete_documents_by_id_after_timestamp(
    db: AsyncSession, document_id: UUID, timestamp: datetime
) -> None:
    """Drop versions created after ``timestamp`` and the suggestions made on them."""
    await db.execute(
        delete(Suggestion).where(
            Suggestion.document_id == document_id,
            Suggestion.document_created_at > timestamp,
        ).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Document)
        .where(Document.id == document_id, Document.created_at > timestamp)
        .execution_options(synchronize_session=False)
    )


async def save_suggestions(db: AsyncSession, suggestions: list[Suggestion]) -> None:
    db.add_all(suggestions)
    await db.flush()


async def get_suggestions_by_document_id(db: AsyncSession, document_id: UUID) -> list[Suggestion]:
    result = await db.execute(
        select(Suggestion)
        .where(Suggestion.document_id == document_id)
        .order_by(Suggestion.created_at.asc())
    )
    return list(result.scalars().all())


# =============================================================================
# PROFILES
# =============================================================================


async def get_user_profile_by_user_id(db: AsyncSession, user_id: UUID) -> UserProfile | None:
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    return result.scalar_one_or_none()


async def upsert_user_profile(db: AsyncSession, user_id: UUID, **fields: Any) -> UserProfile:
    """Update the user's profile in place, else insert it."""
    profile = await get_user_profile_by_user_id(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id, **fields)
        db.add(profile)
    else:
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = utcnow()
    await db.flush()
    return profile


# =============================================================================
# COURSE PLANS
# =============================================================================


async def get_course_plans_by_user_id(db: AsyncSession, user_id: UUID) -> list[CoursePlan]:
    """The user's plans, most recently updated first."""
    result = await db.execute(
        select(CoursePlan)
        .where(CoursePlan.user_id == user_id)
        .order_by(CoursePlan.updated_at.desc())
    )
    return list(result.scalars().all())


async def get_course_plan_by_id(db: AsyncSession, plan_id: UUID) -> CoursePlan | None:
    result = await db.execute(select(CoursePlan).where(CoursePlan.id == plan_id))
    return result.scalar_one_or_none()


async def save_course_plan(db: AsyncSession, user_id: UUID, **fields: Any) -> CoursePlan:
    """
    Overwrite the user's most recently updated plan, else insert one.

    Concurrent saves are not serialized; the last write wins.
    """
    plans = await get_course_plans_by_user_id(db, user_id)
    if plans:
        plan = plans[0]
        for key, value in fields.items():
            setattr(plan, key, value)
        plan.updated_at = utcnow()
    else:
        plan = CoursePlan(user_id=user_id, **fields)
        db.add(plan)
    await db.flush()
    return plan


async def update_course_plan_modules(
    db: AsyncSession, plan: CoursePlan, modules: list[dict]
) -> CoursePlan:
    plan.modules = modules
    plan.updated_at = utcnow()
    await db.flush()
    return plan
