"""
Request dependencies for the API.

- Authentication: a JWT from the ``access_token`` cookie or a bearer header
  resolves to the ``User`` row; anything else is a 401.
- Ownership: chats, documents and course plans carry ``user_id`` and the
  routes compare it with the caller explicitly.
- Shared services (LLM gateway, profile cache, tool registry, the session
  factory used by chat turns) are built once per process and can be swapped
  with ``app.dependency_overrides``.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.db.models import User
from app.db.session import AsyncSessionLocal, get_db
from app.services.llm import LLMGateway
from app.services.profile_cache import LocalProfileCache
from app.tools import ToolRegistry, default_registry

settings = get_settings()

_BEARER = {"WWW-Authenticate": "Bearer"}


# =============================================================================
# JWT UTILITIES
# =============================================================================


def create_access_token(user_id: UUID) -> str:
    """Signed token whose ``sub`` is the user id; nothing else about the user is embedded."""
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    return jwt.encode(
        {"sub": str(user_id), "exp": expires_at},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> UUID | None:
    """User id from a valid token, ``None`` for a bad signature, expiry or subject."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return UUID(claims["sub"])
    except (JWTError, KeyError, ValueError):
        return None


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """The session cookie wins over an ``Authorization: Bearer`` header."""
    if access_token:
        return access_token

    scheme, _, credentials = (authorization or "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated", headers=_BEARER
    )


async def get_current_user(
    token: Annotated[str, Depends(get_token_from_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """The signed-in learner; 401 when the token is invalid or the user was deleted."""
    user_id = decode_access_token(token)
    user = await db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers=_BEARER,
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


# =============================================================================
# SHARED SERVICES
# =============================================================================


@lru_cache
def get_llm_gateway() -> LLMGateway:
    return LLMGateway(settings)


@lru_cache
def get_profile_cache() -> LocalProfileCache:
    return LocalProfileCache(settings.profile_cache_dir)


@lru_cache
def get_tool_registry() -> ToolRegistry:
    return default_registry()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory for work that outlives the request scope.

    The chat stream keeps writing after the route returns, so it opens its
    own session instead of using the request's.
    """
    return AsyncSessionLocal


Gateway = Annotated[LLMGateway, Depends(get_llm_gateway)]
ProfileCache = Annotated[LocalProfileCache, Depends(get_profile_cache)]
Registry = Annotated[ToolRegistry, Depends(get_tool_registry)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


# =============================================================================
# AUTHORIZATION HELPERS
# =============================================================================


def require_owner(resource_user_id: UUID, current_user: User) -> None:
    """403 unless the caller owns the row; use where existence is not a secret."""
    if resource_user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to access this resource",
        )


def verify_ownership_or_404(resource: object | None, current_user: User) -> None:
    """404 when the row is missing or belongs to someone else."""
    if resource is None or resource.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
