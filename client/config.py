"""Configuration management for the soundboard client."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_PAGE_SIZE
from common.logging_config import get_logger

logger = get_logger(__name__)

SESSION_COOKIE_KEY = 'session_cookie'
VIEW_MODE_KEY = 'view_mode'
COOLDOWN_UNTIL_KEY = 'upload_cooldown_until'


class Config:
    """
    Client settings and small bits of persisted client state in one JSON file.

    Besides connection settings the file carries the session cookie, the
    list/grid preference and the upload cooldown expiry, so a restarted
    client picks up where it left off.
    """

    DEFAULT_CONFIG = {
        "api_url": os.environ.get("SOUNDBOARD_API_URL", "http://localhost:3000/api"),
        "timeout": 30,
        "session_cookie_name": "session",
        "page_size": DEFAULT_PAGE_SIZE,
        VIEW_MODE_KEY: "list",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.soundboard/config.json)
        """
        self.config_path = self._writable_location(config_path)
        self.data = self._load()

    @staticmethod
    def _writable_location(config_path: Path) -> Path:
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            return config_path
        except PermissionError:
            fallback = Path(tempfile.gettempdir()) / '.soundboard' / config_path.name
            logger.warning(f"Cannot create {config_path.parent}, using {fallback} instead")
            fallback.parent.mkdir(parents=True, exist_ok=True)
            return fallback

    def _load(self) -> dict:
        """
        Read the file over the defaults, writing a fresh one if none exists.

        A file that cannot be parsed is copied to ``config.json.bak`` and the
        defaults are used.
        """
        config = dict(self.DEFAULT_CONFIG)
        if not self.config_path.exists():
            self.data = config
            self.save()
            return config

        try:
            with open(self.config_path, 'r') as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("top-level value is not an object")
        except (ValueError, OSError) as e:
            backup_path = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Unreadable config {self.config_path} ({e}), backing up to {backup_path}")
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Config backup failed: {copy_error}")
            return config

        config.update(stored)
        return config

    def save(self) -> None:
        """Write current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get(self, key: str, default=None):
        """Read a raw configuration value."""
        return self.data.get(key, default)

    def set(self, key: str, value) -> None:
        """
        Set a configuration value and save to file.

        A value of None removes the key.
        """
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = value
        self.save()

    # Session

    def get_session_cookie(self) -> Optional[str]:
        """
        Get stored session cookie value.

        Returns:
            Cookie value or None if not signed in
        """
        return self.data.get(SESSION_COOKIE_KEY)

    def set_session_cookie(self, value: Optional[str]) -> None:
        """
        Store the session cookie obtained from the Steam sign-in flow.

        Args:
            value: Cookie value, or None to forget the session
        """
        self.set(SESSION_COOKIE_KEY, value)

    def get_cookie_name(self) -> str:
        return self.data.get('session_cookie_name', 'session')

    # Connection

    def get_base_url(self) -> str:
        """
        Get API base URL.

        Returns:
            Base URL string without trailing slash (e.g., "http://localhost:3000/api")
        """
        return self.data.get('api_url', 'http://localhost:3000/api').rstrip('/')

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_page_size(self) -> int:
        return self.data.get('page_size', DEFAULT_PAGE_SIZE)

    # Persisted client state

    def get_view_mode(self) -> Optional[str]:
        return self.data.get(VIEW_MODE_KEY)

    def set_view_mode(self, mode: str) -> None:
        self.set(VIEW_MODE_KEY, mode)

    def get_cooldown_until(self) -> Optional[float]:
        """
        Get the stored upload cooldown expiry.

        Returns:
            Wall-clock timestamp, or None when absent or not a number
        """
        value = self.data.get(COOLDOWN_UNTIL_KEY)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    def set_cooldown_until(self, expiry: Optional[float]) -> None:
        """Persist the cooldown expiry; None clears it (without a write if already clear)."""
        if expiry is None and COOLDOWN_UNTIL_KEY not in self.data:
            return
        self.set(COOLDOWN_UNTIL_KEY, expiry)
