"""Pydantic schemas for admin endpoints."""

from typing import List, Literal, Optional

from pydantic import Field

from client.schemas.common import CamelModel

UserFilter = Literal["all", "admins", "banned"]
SortColumn = Literal["username", "createdAt", "soundCount"]
SortOrder = Literal["asc", "desc"]


class AdminUser(CamelModel):
    """A user as seen from the admin directory."""
    id: str
    steam_id64: str = Field(alias="steamId64")
    username: str
    avatar_url: Optional[str] = None
    is_admin: bool = False
    is_banned: bool = False
    created_at: str
    sound_count: int = 0


class AdminUsersPage(CamelModel):
    """One page of the user directory."""
    users: List[AdminUser] = []
    count: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 1


class AdminUserResponse(CamelModel):
    """Response model for a single user."""
    user: AdminUser


class DeleteUserResponse(CamelModel):
    """Response model for user deletion."""
    success: bool
    deleted_sounds_count: int = 0


class Settings(CamelModel):
    """Global upload limits."""
    max_sounds_per_user: int = Field(ge=1)
    max_file_size: int = Field(ge=1)
    max_duration: int = Field(ge=1)
    cooldown_seconds: int = Field(ge=0)
    allowed_formats: List[str] = Field(min_length=1)


class SettingsResponse(CamelModel):
    """Response model for settings reads and writes."""
    settings: Settings
