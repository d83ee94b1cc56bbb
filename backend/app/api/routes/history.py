"""Chat history of the current user."""

from fastapi import APIRouter

from app.api.deps import CurrentUser, DbSession
from app.db import queries
from app.schemas.chat import ChatResponse

router = APIRouter(prefix="/api/history", tags=["chat"])


@router.get("", response_model=list[ChatResponse])
async def list_history(db: DbSession, user: CurrentUser):
    """List the user's chats, newest first."""
    chats = await queries.get_chats_by_user_id(db, user.id)
    return [ChatResponse.model_validate(chat) for chat in chats]
