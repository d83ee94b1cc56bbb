"""
Authentication Routes

Endpoints:
- POST /auth/google - Exchange Google id_token for session
- POST /auth/logout - Clear session
- GET /auth/me - Get the signed-in account

The resulting JWT identifies the learner on every chat turn; tools that
write storage (documents, suggestions, profile, course plans) scope their
rows to it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Response, status
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import CurrentUser, DbSession, create_access_token
from app.config import get_settings
from app.db.models import AuthIdentity, User
from app.schemas.auth import GoogleAuthRequest, TokenResponse
from app.schemas.user import UserRead

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


@dataclass(frozen=True)
class GoogleClaims:
    subject: str
    email: str | None
    name: str


def verify_google_token(token: str) -> GoogleClaims:
    """
    Verify a Google id_token (signature, expiry, audience, issuer).

    Unverified emails are discarded so they can't be used to link accounts.
    """
    idinfo = google_id_token.verify_oauth2_token(
        token, google_requests.Request(), settings.google_client_id
    )
    if idinfo.get("iss") not in GOOGLE_ISSUERS:
        raise ValueError("Invalid issuer")

    email = idinfo.get("email")
    name = idinfo.get("name", email or "Unknown User")
    if email and not idinfo.get("email_verified", False):
        email = None
    return GoogleClaims(subject=idinfo["sub"], email=email, name=name)


async def upsert_google_user(db: AsyncSession, claims: GoogleClaims) -> User:
    """Find the user behind a Google identity, creating or linking one on first login."""
    result = await db.execute(
        select(AuthIdentity)
        .options(selectinload(AuthIdentity.user))
        .where(
            AuthIdentity.provider == "google",
            AuthIdentity.provider_user_id == claims.subject,
        )
    )
    identity = result.scalar_one_or_none()

    if identity is not None:
        identity.last_login_at = datetime.now(timezone.utc)
        if claims.email:
            identity.email = claims.email
        return identity.user

    user = None
    if claims.email:
        result = await db.execute(select(User).where(User.email == claims.email.lower()))
        user = result.scalar_one_or_none()

    if user is None:
        user = User(email=claims.email.lower() if claims.email else None, name=claims.name)
        db.add(user)
        await db.flush()

    db.add(
        AuthIdentity(
            user_id=user.id,
            provider="google",
            provider_user_id=claims.subject,
            email=claims.email,
        )
    )
    return user


def cookie_options() -> dict[str, Any]:
    # Cross-domain deployments need SameSite=None, which browsers only accept with Secure
    return {
        "httponly": True,
        "secure": settings.cookie_cross_domain or settings.environment != "development",
        "samesite": "none" if settings.cookie_cross_domain else "lax",
    }


@router.post("/google", response_model=TokenResponse)
async def google_login(
    request: GoogleAuthRequest,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """Exchange a Google id_token for a session JWT (cookie and response body)."""
    try:
        claims = verify_google_token(request.id_token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid Google id_token: {e}",
        )

    user = await upsert_google_user(db, claims)
    await db.commit()

    access_token = create_access_token(user.id)
    expires_in = settings.jwt_expire_minutes * 60
    response.set_cookie(
        key="access_token", value=access_token, max_age=expires_in, **cookie_options()
    )
    return TokenResponse(access_token=access_token, expires_in=expires_in)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """Clear the session cookie. A JWT held elsewhere stays valid until it expires."""
    response.delete_cookie(key="access_token", **cookie_options())


@router.get("/me", response_model=UserRead)
async def get_me(current_user: CurrentUser) -> UserRead:
    return UserRead.model_validate(current_user)
