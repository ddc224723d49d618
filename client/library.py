"""View model for the current user's paginated, searchable sound library."""

import time
from typing import Callable, Optional

from common.constants import DEFAULT_PAGE_SIZE, SEARCH_DEBOUNCE_SECONDS, SOUNDS_KIND
from common.logging_config import get_logger
from client.api import SoundboardApi
from client.debounce import Debouncer
from client.exceptions import SoundboardError, ValidationError
from client.query_cache import QueryCache, QueryKey
from client.schemas import Sound, SoundListing
from client.upload import clamp_name

logger = get_logger(__name__)


def previous_page_after_delete(item_count: int, page: int) -> int:
    """
    Page to show once a delete settles.

    Removing the only item of a page past the first leaves that page empty,
    so the view steps back one page. Only the pre-delete item count and page
    number are needed.
    """
    if item_count == 1 and page > 1:
        return page - 1
    return page


class SoundLibrary:
    """
    Paginated, searchable view over the user's sounds.

    Holds only view parameters (page, search text, edit mode); listings come
    from the query cache and are refetched after every mutation.
    """

    def __init__(
        self,
        api: SoundboardApi,
        cache: QueryCache,
        page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], float] = time.monotonic,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        self.api = api
        self.cache = cache
        self.page_size = page_size
        self.page = 1
        self.search = Debouncer(delay=debounce_seconds, clock=clock)
        self.listing: Optional[SoundListing] = None
        self.error: Optional[SoundboardError] = None
        self.editing_id: Optional[str] = None
        self.rename_error: Optional[SoundboardError] = None

    def set_search(self, text: str) -> None:
        """Record search input and go back to the first page."""
        self.search.push(text)
        self.page = 1

    def set_page(self, page: int) -> None:
        self.page = max(1, page)

    def search_query(self) -> Optional[str]:
        text = self.search.value().strip()
        return text or None

    def query_key(self) -> QueryKey:
        return QueryKey(SOUNDS_KIND, page=self.page, limit=self.page_size, search=self.search_query())

    @property
    def quota_reached(self) -> bool:
        return self.listing is not None and self.listing.quota_reached

    async def refresh(self) -> Optional[SoundListing]:
        """
        Load the listing for the current parameters.

        A result whose key no longer matches the current parameters when it
        resolves is ignored.

        Returns:
            The listing now shown

        Raises:
            SoundboardError: The fetch failed (previous listing is kept)
        """
        key = self.query_key()
        try:
            listing = await self.cache.fetch(
                key,
                lambda: self.api.get_sounds(page=key.page, limit=key.limit, search=key.search),
            )
        except SoundboardError as e:
            if key == self.query_key():
                self.error = e
            logger.warning(f"Failed to load sounds for {key}: {e}")
            raise

        if key != self.query_key():
            logger.debug(f"Ignoring listing for outdated parameters {key}")
            return self.listing

        self.listing = listing
        self.error = None
        return listing

    async def delete(self, sound: Sound) -> None:
        """
        Delete a sound, then invalidate the listing and fix up the page.

        Raises:
            SoundboardError: The delete failed (listing and page untouched)
        """
        item_count = len(self.listing.sounds) if self.listing else 0
        page = self.page

        try:
            await self.api.delete_sound(sound.id)
        except SoundboardError as e:
            self.error = e
            logger.warning(f"Failed to delete sound {sound.id}: {e}")
            raise

        self.cache.invalidate(SOUNDS_KIND)
        self.error = None
        if self.page == page:
            self.page = previous_page_after_delete(item_count, page)
        logger.info(f"Deleted sound {sound.id} [page={self.page}]")

    def start_rename(self, sound: Sound) -> None:
        self.editing_id = sound.id
        self.rename_error = None

    def cancel_rename(self) -> None:
        self.editing_id = None
        self.rename_error = None

    async def rename(self, sound: Sound, name: str) -> Sound:
        """
        Rename a sound.

        The name is clamped to 32 characters and trimmed. An unchanged name
        leaves edit mode without a request.

        Returns:
            The renamed sound (or the original one for a no-op)

        Raises:
            ValidationError: The trimmed name is empty
            SoundboardError: The server rejected the rename (edit mode is kept)
        """
        name = clamp_name(name).strip()
        if name == sound.name:
            self.editing_id = None
            return sound
        if not name:
            raise ValidationError("Name must contain at least 1 character")

        try:
            renamed = await self.api.rename_sound(sound.id, name)
        except SoundboardError as e:
            self.rename_error = e
            logger.warning(f"Failed to rename sound {sound.id}: {e}")
            raise

        self.cache.invalidate(SOUNDS_KIND)
        self.editing_id = None
        self.rename_error = None
        return renamed

    def find(self, sound_id: str) -> Optional[Sound]:
        """Look a sound up on the current page."""
        if self.listing is None:
            return None
        for sound in self.listing.sounds:
            if sound.id == sound_id:
                return sound
        return None
