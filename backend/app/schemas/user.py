"""Signed-in account."""

from datetime import datetime

from app.schemas.base import BaseSchema, IDMixin


class UserRead(BaseSchema, IDMixin):
    """Returned by ``/auth/me``; email is absent when Google did not verify it."""

    email: str | None
    name: str
    created_at: datetime
