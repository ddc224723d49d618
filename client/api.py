"""Typed endpoint helpers on top of the transport."""

from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as SchemaError

from common.logging_config import get_logger
from client.exceptions import NetworkError
from client.schemas import (
    AdminUser,
    AdminUserResponse,
    AdminUsersPage,
    AuthResponse,
    DeleteUserResponse,
    Settings,
    SettingsResponse,
    Sound,
    SoundListing,
    SortColumn,
    SortOrder,
    SoundResponse,
    SuccessResponse,
    User,
    UserFilter,
)
from client.transport import ProgressCallback, Transport

logger = get_logger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)


def _parse(model: Type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except SchemaError as e:
        logger.error(f"Unexpected response shape for {model.__name__}: {e}")
        raise NetworkError(f"Invalid response from server ({model.__name__})") from e


def _query(**params) -> dict:
    """Drop unset or empty parameters so they are not sent."""
    return {key: str(value) for key, value in params.items() if value}


class SoundboardApi:
    """One method per backend endpoint consumed by the client."""

    def __init__(self, transport: Transport):
        self.transport = transport

    # Auth

    async def get_me(self) -> Optional[User]:
        data = await self.transport.request('GET', '/auth/me')
        return _parse(AuthResponse, data).user

    async def logout(self) -> bool:
        data = await self.transport.request('POST', '/auth/logout')
        return _parse(SuccessResponse, data).success

    def steam_login_url(self) -> str:
        return self.transport.url_for('/auth/steam')

    # Sounds

    async def get_sounds(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> SoundListing:
        """
        Fetch one page of the current user's sounds.

        Args:
            page: 1-based page number
            limit: Page size
            search: Name filter (sent as ``q``)

        Returns:
            SoundListing for the requested page
        """
        data = await self.transport.request(
            'GET', '/sounds', params=_query(page=page, limit=limit, q=search)
        )
        return _parse(SoundListing, data)

    async def upload_sound(
        self,
        file_path: Path,
        name: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Sound:
        data = await self.transport.submit_with_progress(
            '/sounds', file_path, {'name': name}, on_progress
        )
        return _parse(SoundResponse, data).sound

    async def rename_sound(self, sound_id: str, name: str) -> Sound:
        data = await self.transport.request('PATCH', f'/sounds/{sound_id}', json={'name': name})
        return _parse(SoundResponse, data).sound

    async def delete_sound(self, sound_id: str) -> bool:
        data = await self.transport.request('DELETE', f'/sounds/{sound_id}')
        return _parse(SuccessResponse, data).success

    def sound_stream_url(self, sound_id: str) -> str:
        return self.transport.url_for(f'/sounds/{sound_id}/stream')

    # Admin

    async def admin_get_users(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: Optional[SortColumn] = None,
        sort_order: Optional[SortOrder] = None,
        filter: Optional[UserFilter] = None,
    ) -> AdminUsersPage:
        params = _query(
            page=page, limit=limit, q=search, sortBy=sort_by, sortOrder=sort_order, filter=filter
        )
        data = await self.transport.request('GET', '/admin/users', params=params)
        return _parse(AdminUsersPage, data)

    async def admin_get_user(self, user_id: str) -> AdminUser:
        data = await self.transport.request('GET', f'/admin/users/{user_id}')
        return _parse(AdminUserResponse, data).user

    async def admin_update_user(
        self,
        user_id: str,
        is_admin: Optional[bool] = None,
        is_banned: Optional[bool] = None,
    ) -> AdminUser:
        payload = {}
        if is_admin is not None:
            payload['isAdmin'] = is_admin
        if is_banned is not None:
            payload['isBanned'] = is_banned
        data = await self.transport.request('PATCH', f'/admin/users/{user_id}', json=payload)
        return _parse(AdminUserResponse, data).user

    async def admin_delete_user(self, user_id: str) -> DeleteUserResponse:
        data = await self.transport.request('DELETE', f'/admin/users/{user_id}')
        return _parse(DeleteUserResponse, data)

    async def admin_delete_sound(self, sound_id: str) -> bool:
        data = await self.transport.request('DELETE', f'/admin/sounds/{sound_id}')
        return _parse(SuccessResponse, data).success

    async def admin_get_settings(self) -> Settings:
        data = await self.transport.request('GET', '/admin/settings')
        return _parse(SettingsResponse, data).settings

    async def admin_update_settings(self, settings: Settings) -> Settings:
        data = await self.transport.request(
            'PUT', '/admin/settings', json=settings.model_dump(by_alias=True)
        )
        return _parse(SettingsResponse, data).settings
