"""Versioned documents and their suggestions."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, DbSession, require_owner, verify_ownership_or_404
from app.db import queries
from app.schemas.documents import (
    DocumentRead,
    DocumentSave,
    DocumentVersionsDelete,
    SuggestionRead,
)

router = APIRouter(prefix="/api", tags=["documents"])


@router.get("/document", response_model=list[DocumentRead])
async def list_document_versions(id: UUID, db: DbSession, user: CurrentUser):
    """All versions of a document, oldest first."""
    documents = await queries.get_documents_by_id(db, id)
    verify_ownership_or_404(documents[0] if documents else None, user)
    return [DocumentRead.model_validate(document) for document in documents]


@router.post("/document", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def save_document_version(
    id: UUID,
    request: DocumentSave,
    db: DbSession,
    user: CurrentUser,
):
    """Save a new version of a document (or its first one)."""
    latest = await queries.get_document_by_id(db, id)
    if latest is not None:
        require_owner(latest.user_id, user)

    document = await queries.save_document(
        db,
        document_id=id,
        title=request.title,
        kind=request.kind,
        content=request.content,
        user_id=user.id,
    )
    await db.commit()
    return DocumentRead.model_validate(document)


@router.patch("/document", status_code=status.HTTP_204_NO_CONTENT)
async def delete_versions_after(
    id: UUID,
    request: DocumentVersionsDelete,
    db: DbSession,
    user: CurrentUser,
) -> None:
    """Drop every version created after the given timestamp."""
    documents = await queries.get_documents_by_id(db, id)
    verify_ownership_or_404(documents[0] if documents else None, user)
    await queries.delete_documents_by_id_after_timestamp(db, id, request.timestamp)
    await db.commit()


@router.get("/suggestions", response_model=list[SuggestionRead])
async def list_suggestions(document_id: UUID, db: DbSession, user: CurrentUser):
    suggestions = await queries.get_suggestions_by_document_id(db, document_id)
    if suggestions and suggestions[0].user_id != user.id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return [SuggestionRead.model_validate(suggestion) for suggestion in suggestions]
