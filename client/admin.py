"""View models for the admin user directory and the global settings form."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, get_args

from pydantic import ValidationError as SchemaError

from common.constants import (
    ADMIN_SETTINGS_KIND,
    ADMIN_USERS_KIND,
    AVAILABLE_FORMATS,
    DEFAULT_PAGE_SIZE,
    SEARCH_DEBOUNCE_SECONDS,
    SOUNDS_KIND,
)
from common.logging_config import get_logger
from client.api import SoundboardApi
from client.debounce import Debouncer
from client.exceptions import SoundboardError, ValidationError
from client.library import previous_page_after_delete
from client.query_cache import QueryCache, QueryKey
from client.schemas import (
    AdminUser,
    AdminUsersPage,
    DeleteUserResponse,
    Settings,
    SortColumn,
    SortOrder,
    UserFilter,
)

logger = get_logger(__name__)

USER_FILTERS: tuple[str, ...] = get_args(UserFilter)
SORTABLE_COLUMNS: tuple[str, ...] = get_args(SortColumn)


@dataclass(frozen=True)
class SortState:
    """Single active sort column; the server performs the ordering."""
    column: SortColumn
    descending: bool

    @property
    def order(self) -> SortOrder:
        return "desc" if self.descending else "asc"


DEFAULT_SORT = SortState("createdAt", descending=True)


def next_sort(current: Optional[SortState], column: str) -> Optional[SortState]:
    """
    Sort state after toggling ``column``.

    A new column starts ascending, then flips to descending, then the sort is
    removed.
    """
    if current is None or current.column != column:
        return SortState(column, descending=False)
    if not current.descending:
        return SortState(column, descending=True)
    return None


class AdminDirectory:
    """Filterable, sortable, searchable, paginated user directory."""

    def __init__(
        self,
        api: SoundboardApi,
        cache: QueryCache,
        current_user_id: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], float] = time.monotonic,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        self.api = api
        self.cache = cache
        self.current_user_id = current_user_id
        self.page_size = page_size
        self.page = 1
        self.filter: UserFilter = "all"
        self.sort: Optional[SortState] = DEFAULT_SORT
        self.search = Debouncer(delay=debounce_seconds, clock=clock)
        self.users_page: Optional[AdminUsersPage] = None
        self.error: Optional[SoundboardError] = None

    def set_search(self, text: str) -> None:
        self.search.push(text)
        self.page = 1

    def set_filter(self, value: str) -> None:
        if value not in USER_FILTERS:
            raise ValidationError(f"Unknown filter '{value}'. Expected one of: {', '.join(USER_FILTERS)}")
        self.filter = value
        self.page = 1

    def toggle_sort(self, column: str) -> Optional[SortState]:
        if column not in SORTABLE_COLUMNS:
            raise ValidationError(f"Cannot sort by '{column}'. Expected one of: {', '.join(SORTABLE_COLUMNS)}")
        self.sort = next_sort(self.sort, column)
        self.page = 1
        return self.sort

    def set_page(self, page: int) -> None:
        self.page = max(1, page)

    def query_key(self) -> QueryKey:
        search = self.search.value().strip() or None
        return QueryKey(
            ADMIN_USERS_KIND,
            page=self.page,
            limit=self.page_size,
            search=search,
            sort_by=self.sort.column if self.sort else None,
            sort_order=self.sort.order if self.sort else None,
            filter=self.filter,
        )

    async def refresh(self) -> Optional[AdminUsersPage]:
        """
        Load the directory page for the current parameters.

        Raises:
            SoundboardError: The fetch failed (previous page is kept)
        """
        key = self.query_key()
        try:
            users_page = await self.cache.fetch(
                key,
                lambda: self.api.admin_get_users(
                    page=key.page,
                    limit=key.limit,
                    search=key.search,
                    sort_by=key.sort_by,
                    sort_order=key.sort_order,
                    filter=key.filter,
                ),
            )
        except SoundboardError as e:
            if key == self.query_key():
                self.error = e
            raise

        if key != self.query_key():
            logger.debug(f"Ignoring directory page for outdated parameters {key}")
            return self.users_page

        self.users_page = users_page
        self.error = None
        return users_page

    def find(self, user_id: str) -> Optional[AdminUser]:
        if self.users_page is None:
            return None
        for user in self.users_page.users:
            if user.id == user_id:
                return user
        return None

    def _guard_self(self, user: AdminUser) -> None:
        if self.current_user_id is not None and user.id == self.current_user_id:
            raise ValidationError("You cannot change your own account from the admin panel")

    async def _mutate(self, description: str, call) -> Any:
        try:
            result = await call
        except SoundboardError as e:
            self.error = e
            logger.warning(f"Admin action failed ({description}): {e}")
            raise
        self.cache.invalidate(ADMIN_USERS_KIND)
        self.error = None
        logger.info(f"Admin action done: {description}")
        return result

    async def ban(self, user: AdminUser) -> AdminUser:
        self._guard_self(user)
        return await self._mutate(f"ban {user.id}", self.api.admin_update_user(user.id, is_banned=True))

    async def unban(self, user: AdminUser) -> AdminUser:
        self._guard_self(user)
        return await self._mutate(f"unban {user.id}", self.api.admin_update_user(user.id, is_banned=False))

    async def toggle_admin(self, user: AdminUser) -> AdminUser:
        self._guard_self(user)
        return await self._mutate(
            f"set admin={not user.is_admin} on {user.id}",
            self.api.admin_update_user(user.id, is_admin=not user.is_admin),
        )

    async def delete_user(self, user: AdminUser) -> DeleteUserResponse:
        """
        Delete a user and all their sounds.

        Steps back one page when the user was the only row of a later page.
        """
        self._guard_self(user)
        item_count = len(self.users_page.users) if self.users_page else 0
        page = self.page
        result = await self._mutate(f"delete {user.id}", self.api.admin_delete_user(user.id))
        if self.page == page:
            self.page = previous_page_after_delete(item_count, page)
        return result

    async def delete_sound(self, sound_id: str) -> bool:
        result = await self._mutate(f"delete sound {sound_id}", self.api.admin_delete_sound(sound_id))
        self.cache.invalidate(SOUNDS_KIND)
        return result


class SettingsEditor:
    """Draft editing of the global settings record; last writer wins."""

    EDITABLE_FIELDS = ("max_sounds_per_user", "max_file_size", "max_duration", "cooldown_seconds")

    def __init__(self, api: SoundboardApi, cache: QueryCache):
        self.api = api
        self.cache = cache
        self.saved: Optional[Settings] = None
        self.draft: Optional[Settings] = None
        self.error: Optional[SoundboardError] = None

    def _key(self) -> QueryKey:
        return QueryKey(ADMIN_SETTINGS_KIND)

    async def load(self) -> Settings:
        """Fetch the settings and reset the draft to them."""
        settings = await self.cache.fetch(self._key(), self.api.admin_get_settings)
        self.saved = settings
        self.draft = settings.model_copy(deep=True)
        return settings

    def _require_draft(self) -> Settings:
        if self.draft is None:
            raise ValidationError("Settings are not loaded")
        return self.draft

    @property
    def is_dirty(self) -> bool:
        return self.draft is not None and self.draft != self.saved

    def reset(self) -> None:
        if self.saved is not None:
            self.draft = self.saved.model_copy(deep=True)

    def set_value(self, field: str, value) -> None:
        """Set one numeric limit on the draft."""
        draft = self._require_draft()
        if field not in self.EDITABLE_FIELDS:
            raise ValidationError(f"Unknown setting '{field}'")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a whole number")
        setattr(draft, field, number)

    def set_max_file_size_mb(self, megabytes: float) -> int:
        """Set the file size limit from a MiB value, rounded to bytes."""
        draft = self._require_draft()
        draft.max_file_size = round(float(megabytes) * 1024 * 1024)
        return draft.max_file_size

    def toggle_format(self, mime_type: str) -> bool:
        """
        Add or remove an allowed format.

        Removing the last remaining format is a no-op.

        Returns:
            True if the draft changed
        """
        draft = self._require_draft()
        if mime_type not in AVAILABLE_FORMATS:
            raise ValidationError(f"Unknown format '{mime_type}'")

        current = list(draft.allowed_formats)
        if mime_type in current:
            if len(current) <= 1:
                return False
            draft.allowed_formats = [fmt for fmt in current if fmt != mime_type]
        else:
            draft.allowed_formats = current + [mime_type]
        return True

    async def save(self) -> Settings:
        """
        Validate the draft and write it.

        Raises:
            ValidationError: A limit is out of range or no format is allowed
            SoundboardError: The server rejected the update
        """
        draft = self._require_draft()
        try:
            settings = Settings.model_validate(draft.model_dump())
        except SchemaError as e:
            messages = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(f"Invalid settings: {messages}") from e

        try:
            updated = await self.api.admin_update_settings(settings)
        except SoundboardError as e:
            self.error = e
            raise

        self.cache.invalidate(ADMIN_SETTINGS_KIND)
        self.saved = updated
        self.draft = updated.model_copy(deep=True)
        self.error = None
        logger.info("Settings updated")
        return updated
