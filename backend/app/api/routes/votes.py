"""Votes on assistant messages."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, DbSession
from app.db import queries
from app.schemas.chat import VoteRequest, VoteResponse

router = APIRouter(prefix="/api/vote", tags=["chat"])


async def _require_chat_owner(db, chat_id: UUID, user_id: UUID) -> None:
    chat = await queries.get_chat_by_id(db, chat_id)
    if chat is None or chat.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")


@router.get("", response_model=list[VoteResponse])
async def list_votes(chat_id: UUID, db: DbSession, user: CurrentUser):
    await _require_chat_owner(db, chat_id, user.id)
    votes = await queries.get_votes_by_chat_id(db, chat_id)
    return [VoteResponse.model_validate(vote) for vote in votes]


@router.patch("", response_model=VoteResponse)
async def vote(request: VoteRequest, db: DbSession, user: CurrentUser):
    """Vote a message up or down; voting again replaces the previous vote."""
    await _require_chat_owner(db, request.chat_id, user.id)
    vote = await queries.vote_message(
        db,
        chat_id=request.chat_id,
        message_id=request.message_id,
        is_upvoted=request.type == "up",
    )
    await db.commit()
    return VoteResponse.model_validate(vote)
