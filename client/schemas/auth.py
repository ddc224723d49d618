"""Pydantic schemas for authentication endpoints."""

from typing import Optional

from pydantic import Field

from client.schemas.common import CamelModel


class User(CamelModel):
    """The signed-in user."""
    id: str
    steam_id64: str = Field(alias="steamId64")
    username: str
    avatar_url: Optional[str] = None
    is_admin: bool = False


class AuthResponse(CamelModel):
    """Response model for /auth/me."""
    user: Optional[User] = None
