"""Pydantic schemas for API requests and responses."""

from client.schemas.auth import AuthResponse, User
from client.schemas.sound import Sound, SoundListing, SoundResponse
from client.schemas.admin import (
    AdminUser,
    AdminUserResponse,
    AdminUsersPage,
    DeleteUserResponse,
    Settings,
    SettingsResponse,
    SortColumn,
    SortOrder,
    UserFilter,
)
from client.schemas.common import ErrorDetail, ErrorResponse, SuccessResponse

__all__ = [
    "AuthResponse",
    "User",
    "Sound",
    "SoundListing",
    "SoundResponse",
    "AdminUser",
    "AdminUserResponse",
    "AdminUsersPage",
    "DeleteUserResponse",
    "Settings",
    "SettingsResponse",
    "SortColumn",
    "SortOrder",
    "UserFilter",
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
]
