"""Google sign-in request and the issued session token."""

from pydantic import BaseModel, Field


class GoogleAuthRequest(BaseModel):
    id_token: str = Field(..., min_length=1, description="Google id_token obtained by the browser")


class TokenResponse(BaseModel):
    """Session token; the same value is set as the ``access_token`` cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Seconds until the token expires")
