"""Document and suggestion schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseSchema, IDMixin, OwnedMixin

DocumentKindType = Literal["text", "code", "image"]


class DocumentSave(BaseModel):
    """Request to save a new version of a document."""

    title: str = Field(..., min_length=1)
    content: str | None = None
    kind: DocumentKindType = "text"


class DocumentVersionsDelete(BaseModel):
    """Request to drop every version created after ``timestamp``."""

    timestamp: datetime


class DocumentRead(BaseSchema, IDMixin, OwnedMixin):
    """One version of a document."""

    title: str
    content: str | None
    kind: DocumentKindType
    created_at: datetime


class SuggestionRead(BaseSchema, IDMixin, OwnedMixin):
    """Suggested edit for a document version."""

    document_id: UUID
    document_created_at: datetime
    original_text: str
    suggested_text: str
    description: str | None
    is_resolved: bool
    created_at: datetime
