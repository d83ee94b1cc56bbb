"""API routes package."""

from app.api.routes import (
    auth,
    chat,
    course_plans,
    documents,
    history,
    profile,
    votes,
)

__all__ = [
    "auth",
    "chat",
    "course_plans",
    "documents",
    "history",
    "profile",
    "votes",
]
