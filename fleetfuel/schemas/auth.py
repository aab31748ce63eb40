"""Schémas d'authentification / Authentication schemas."""

from pydantic import BaseModel, Field

from fleetfuel.config import settings


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=200)


class TokenResponse(BaseModel):
    """Paire de tokens JWT / JWT token pair. expires_in en secondes / in seconds."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


class RefreshRequest(BaseModel):
    refresh_token: str
