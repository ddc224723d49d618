"""Wiring of the client components around one transport and one cache."""

import time
from typing import Callable, Optional

import httpx

from common.logging_config import get_logger
from client.admin import AdminDirectory, SettingsEditor
from client.api import SoundboardApi
from client.config import Config
from client.library import SoundLibrary
from client.preferences import ViewPreference
from client.query_cache import QueryCache
from client.session import Session
from client.transport import Transport
from client.upload import UploadController

logger = get_logger(__name__)


class SoundboardClient:
    """All client state for one signed-in user."""

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wall_clock: Callable[[], float] = time.time,
        monotonic_clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the client.

        Args:
            config: Configuration instance (also stores preferences and the upload cooldown)
            transport: Optional httpx transport (used by tests)
            wall_clock: Clock for the persisted upload cooldown
            monotonic_clock: Clock for search debouncing
        """
        self.config = config
        self.transport = Transport(config, transport=transport)
        self.api = SoundboardApi(self.transport)
        self.cache = QueryCache()
        self.session = Session(self.api, self.cache)
        self.uploads = UploadController(
            self.api, self.cache, clock=wall_clock, cooldown_store=config
        )
        self.library = SoundLibrary(
            self.api, self.cache, page_size=config.get_page_size(), clock=monotonic_clock
        )
        self.admin = AdminDirectory(
            self.api, self.cache, page_size=config.get_page_size(), clock=monotonic_clock
        )
        self.settings = SettingsEditor(self.api, self.cache)
        self.view = ViewPreference(config)

    async def close(self) -> None:
        await self.transport.close()
