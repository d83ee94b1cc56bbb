"""Shared pydantic bases for API responses built from ORM rows."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Readable from ORM attributes; strings are stripped on input."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True, validate_assignment=True)


class IDMixin(BaseModel):
    id: UUID


class OwnedMixin(BaseModel):
    """Row scoped to one learner."""

    user_id: UUID


class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: datetime
