"""API routes for chat turns with streaming tool orchestration."""

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from app.api.deps import (
    CurrentUser,
    DbSession,
    Gateway,
    ProfileCache,
    Registry,
    SessionFactory,
)
from app.config import get_settings
from app.db import queries
from app.db.models import ChatMessage, MessageRole, Visibility, utcnow
from app.schemas.chat import (
    ChatModelResponse,
    ChatRequest,
    ChatResponse,
    ChatWithMessages,
    VisibilityUpdateRequest,
)
from app.services import prompts
from app.services.llm import LLMGateway
from app.services.messages import (
    convert_to_core_messages,
    convert_to_ui_messages,
    get_most_recent_user_message,
    message_text,
    sanitize_response_messages,
)
from app.services.model_catalog import MODELS, ChatModel, get_model
from app.streaming.data_stream import DataStreamWriter, create_data_stream
from app.streaming.protocol import MESSAGE_ID_ANNOTATION, DataType
from app.streaming.turn import run_chat_turn
from app.tools.base import ToolContext

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/chat", tags=["chat"])


# =============================================================================
# HELPERS
# =============================================================================


async def generate_title(gateway: LLMGateway, model: ChatModel, message: dict[str, Any]) -> str:
    """Short title for a new chat; falls back to the message text when generation fails."""
    text = message_text(message).strip()
    max_chars = settings.chat_title_max_chars
    try:
        title = await gateway.generate_text(
            model=model.api_identifier,
            system=prompts.TITLE_PROMPT.format(max_chars=max_chars),
            prompt=text,
            max_tokens=settings.llm_title_max_tokens,
        )
    except Exception:
        logger.exception("Title generation failed, using the message text")
        title = ""

    title = title.strip().strip('"').strip() or text
    return title[:max_chars] or "New Chat"


async def save_response_messages(
    db: AsyncSession,
    writer: DataStreamWriter,
    chat_id: UUID,
    messages: list[dict[str, Any]],
) -> None:
    """
    Persist the sanitized response messages of a turn.

    Each stored assistant message is announced to the client with a
    ``messageIdFromServer`` annotation once the write is committed.
    """
    sanitized = sanitize_response_messages(messages)
    if not sanitized:
        return

    started_at = utcnow()
    rows = [
        ChatMessage(
            id=uuid4(),
            chat_id=chat_id,
            role=message["role"],
            content=message["content"],
            # Keep the turn's order when listing by created_at
            created_at=started_at + timedelta(milliseconds=index),
        )
        for index, message in enumerate(sanitized)
    ]

    try:
        await queries.save_messages(db, rows)
        await db.commit()
    except Exception:
        logger.exception("Failed to save chat %s", chat_id)
        await db.rollback()
        return

    for row in rows:
        if row.role == MessageRole.ASSISTANT.value:
            writer.write_message_annotation({MESSAGE_ID_ANNOTATION: str(row.id)})


async def get_owned_chat_or_404(db: AsyncSession, chat_id: UUID, user_id: UUID):
    chat = await queries.get_chat_by_id(db, chat_id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    if chat.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return chat


# =============================================================================
# CHAT TURN
# =============================================================================


@router.post("")
async def chat(
    request: ChatRequest,
    db: DbSession,
    user: CurrentUser,
    gateway: Gateway,
    registry: Registry,
    profile_cache: ProfileCache,
    session_factory: SessionFactory,
):
    """
    Run one chat turn and stream it back as server-sent events.

    Event names are the stream part types (``text``, ``data``, ``tool-call``,
    ``tool-result``, ``message-annotation``, ``finish-step``,
    ``finish-message``, ``error``); payloads are JSON.
    """
    model = get_model(request.model_id)
    if model is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Model not found")

    core_messages = convert_to_core_messages(request.messages)
    user_message = get_most_recent_user_message(core_messages)
    if user_message is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No user message found")

    chat_id = request.id
    existing = await queries.get_chat_by_id(db, chat_id)
    if existing is None:
        title = await generate_title(gateway, model, user_message)
        await queries.save_chat(db, chat_id=chat_id, user_id=user.id, title=title)
    elif existing.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user_message_id = uuid4()
    await queries.save_messages(
        db,
        [
            ChatMessage(
                id=user_message_id,
                chat_id=chat_id,
                role=MessageRole.USER.value,
                content=user_message["content"],
                created_at=utcnow(),
            )
        ],
    )
    await db.commit()
    user_id = user.id

    async def execute(writer: DataStreamWriter) -> None:
        writer.write_data(DataType.USER_MESSAGE_ID, str(user_message_id))

        async with session_factory() as turn_db:
            ctx = ToolContext(
                db=turn_db,
                writer=writer,
                gateway=gateway,
                model=model.api_identifier,
                user_id=user_id,
                profile_cache=profile_cache,
                settings=settings,
            )
            response_messages, finish_reason = await run_chat_turn(
                ctx=ctx,
                registry=registry,
                system=prompts.SYSTEM_PROMPT,
                messages=core_messages,
                max_steps=settings.chat_max_steps,
            )
            await save_response_messages(turn_db, writer, chat_id, response_messages)

        writer.write_finish_message(finish_reason)

    async def event_generator():
        async for part in create_data_stream(execute):
            yield part.to_sse()

    return EventSourceResponse(event_generator())


@router.delete("")
async def delete_chat(
    db: DbSession,
    user: CurrentUser,
    id: UUID | None = None,
) -> Response:
    """Delete a chat the caller owns, with its messages and votes."""
    if id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    await get_owned_chat_or_404(db, id, user.id)

    try:
        await queries.delete_chat_by_id(db, id)
        await db.commit()
    except Exception:
        logger.exception("Failed to delete chat %s", id)
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing your request",
        )

    return Response(content="Chat deleted", status_code=status.HTTP_200_OK)


# =============================================================================
# MODELS AND HISTORY
# =============================================================================


@router.get("/models", response_model=list[ChatModelResponse])
async def list_models():
    """Models the client can pick for a turn."""
    return [model.to_dict() for model in MODELS]


@router.get("/{chat_id}", response_model=ChatWithMessages)
async def get_chat(chat_id: UUID, db: DbSession, user: CurrentUser):
    """Get a chat with its messages. Private chats are visible to their owner only."""
    chat = await queries.get_chat_by_id(db, chat_id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    if chat.visibility == Visibility.PRIVATE.value and chat.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")

    messages = await queries.get_messages_by_chat_id(db, chat_id)
    return ChatWithMessages(
        **ChatResponse.model_validate(chat).model_dump(),
        messages=convert_to_ui_messages(messages),
    )


@router.patch("/{chat_id}/visibility", response_model=ChatResponse)
async def update_visibility(
    chat_id: UUID,
    request: VisibilityUpdateRequest,
    db: DbSession,
    user: CurrentUser,
):
    chat = await get_owned_chat_or_404(db, chat_id, user.id)
    await queries.update_chat_visibility(db, chat, request.visibility)
    await db.commit()
    return ChatResponse.model_validate(chat)


@router.delete("/{chat_id}/messages", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trailing_messages(
    chat_id: UUID,
    after: datetime,
    db: DbSession,
    user: CurrentUser,
) -> None:
    """Delete the chat's messages created at or after ``after``."""
    await get_owned_chat_or_404(db, chat_id, user.id)
    deleted = await queries.delete_messages_by_chat_id_after_timestamp(db, chat_id, after)
    await db.commit()
    logger.info("Deleted %d trailing message(s) from chat %s", deleted, chat_id)
