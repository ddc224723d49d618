"""
Keyed query cache with invalidate-and-refetch semantics.

Results are stored per QueryKey. A mutation invalidates a whole entity kind:
every entry of that kind becomes stale and the kind's generation is bumped, so
the next read goes back to the server. Results of fetches that started before
an invalidation are still stored, but already marked stale.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from common.constants import MAX_CACHED_QUERIES
from common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueryKey:
    """
    Parameters identifying one cached result set.

    Attributes:
        kind: Entity kind (e.g. 'sounds', 'admin.users')
        page: 1-based page number
        limit: Page size
        search: Debounced, trimmed search text
        sort_by: Sort column (admin directory only)
        sort_order: 'asc' or 'desc'
        filter: Directory filter (admin directory only)
    """
    kind: str
    page: Optional[int] = None
    limit: Optional[int] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    filter: Optional[str] = None


@dataclass
class CacheEntry:
    """Single cached result."""
    data: Any
    generation: int
    stale: bool = False


class QueryCache:
    """
    In-memory cache of query results for a single-threaded asyncio client.

    Concurrent fetches of the same key within the same generation share one
    request. Once more than max_entries results are held, stale entries are
    evicted first, then the least recently stored ones.
    """

    def __init__(self, max_entries: int = MAX_CACHED_QUERIES):
        self.max_entries = max_entries
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._generations: Dict[str, int] = {}
        self._in_flight: Dict[Tuple[QueryKey, int], asyncio.Future] = {}

    def generation(self, kind: str) -> int:
        return self._generations.get(kind, 0)

    def get(self, key: QueryKey) -> Optional[Any]:
        """
        Return cached data for key, stale or not.

        Args:
            key: Query key

        Returns:
            Cached data, or None when nothing was ever fetched for key
        """
        entry = self._entries.get(key)
        return entry.data if entry else None

    def is_fresh(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.stale and entry.generation == self.generation(key.kind)

    def set_data(self, key: QueryKey, data: Any) -> None:
        """Store data for key directly, as if it had just been fetched."""
        self._store(key, CacheEntry(data=data, generation=self.generation(key.kind)))

    async def fetch(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return fresh data for key, calling fetcher on a miss or stale entry.

        Args:
            key: Query key
            fetcher: Coroutine factory performing the request

        Returns:
            Fresh (or shared in-flight) result

        Raises:
            Whatever fetcher raises; the cache is left untouched on failure
        """
        if self.is_fresh(key):
            logger.debug(f"Cache hit for {key}")
            return self._entries[key].data

        generation = self.generation(key.kind)
        flight_key = (key, generation)
        task = self._in_flight.get(flight_key)
        if task is None:
            logger.debug(f"Cache miss for {key}, fetching [generation={generation}]")
            task = asyncio.ensure_future(self._run(key, generation, fetcher))
            self._in_flight[flight_key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(flight_key, None))
        else:
            logger.debug(f"Joining in-flight fetch for {key}")

        return await asyncio.shield(task)

    async def _run(self, key: QueryKey, generation: int, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        data = await fetcher()
        stale = generation != self.generation(key.kind)
        if stale:
            logger.debug(f"Fetch for {key} resolved after invalidation, storing as stale")
        self._store(key, CacheEntry(data=data, generation=generation, stale=stale))
        return data

    def _store(self, key: QueryKey, entry: CacheEntry) -> None:
        self._entries.pop(key, None)
        self._entries[key] = entry
        excess = len(self._entries) - self.max_entries
        if excess <= 0:
            return
        # dicts keep insertion order, so the oldest entries come first
        stale = [k for k, e in self._entries.items() if k != key and e.stale]
        others = [k for k, e in self._entries.items() if k != key and not e.stale]
        for victim in (stale + others)[:excess]:
            del self._entries[victim]
        logger.debug(f"Evicted {excess} cached result(s), {len(self._entries)} kept")

    def invalidate(self, kind: str) -> int:
        """
        Mark every entry of kind stale.

        Args:
            kind: Entity kind to invalidate

        Returns:
            Number of entries marked stale
        """
        self._generations[kind] = self.generation(kind) + 1
        count = 0
        for key, entry in self._entries.items():
            if key.kind == kind and not entry.stale:
                entry.stale = True
                count += 1

        logger.debug(f"Invalidated {count} cached result(s) for kind={kind}")
        return count

    def clear(self) -> None:
        self._entries.clear()
        self._generations.clear()
