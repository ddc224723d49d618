"""
Upload lifecycle for a single sound.

The controller owns at most one UploadAttempt. A selection is validated
locally (size and extension only; the server stays authoritative for duration
and exact format), then submitted with progress tracking. A rate-limited
rejection starts a cooldown whose remaining time is always recomputed from the
absolute expiry and the current clock.
"""

import asyncio
import math
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Callable, List, Optional

from common.constants import (
    ALLOWED_UPLOAD_EXTENSIONS,
    COOLDOWN_TICK_SECONDS,
    MAX_UPLOAD_SIZE_BYTES,
    SOUND_NAME_MAX_LENGTH,
    SOUNDS_KIND,
)
from common.logging_config import get_logger
from client.api import SoundboardApi
from client.config import Config
from client.exceptions import (
    CooldownActiveError,
    RateLimitedError,
    SoundboardError,
    TransportError,
    UploadStateError,
)
from client.query_cache import QueryCache
from client.schemas import Sound

logger = get_logger(__name__)


class UploadState(str, Enum):
    EMPTY = "empty"
    SELECTED = "selected"
    VALIDATING = "validating"
    READY = "ready"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    COOLING_DOWN = "cooling_down"


@dataclass(frozen=True)
class UploadFailure:
    """
    Why the last selection or submission failed.

    Attributes:
        kind: 'validation', 'rate_limited', 'server' or 'network'
        reason: Human-readable message
        code: Server error code, when there is one
    """
    kind: str
    reason: str
    code: Optional[str] = None


class FilePreview:
    """Playback source for a selected file, valid until revoked."""

    def __init__(self, path: Path):
        self.path = path
        self.revoked = False

    def open(self) -> BinaryIO:
        if self.revoked:
            raise UploadStateError("Preview is no longer available")
        return open(self.path, 'rb')

    def revoke(self) -> None:
        self.revoked = True


@dataclass
class UploadAttempt:
    """The file currently selected for upload."""
    path: Path
    size: int
    name: str
    preview: FilePreview
    progress: int = 0

    @property
    def filename(self) -> str:
        return self.path.name


def clamp_name(name: str) -> str:
    return name[:SOUND_NAME_MAX_LENGTH]


def default_sound_name(filename: str) -> str:
    """File name without its last extension, case preserved, clamped to 32 characters."""
    return clamp_name(re.sub(r'\.[^/.]+$', '', filename))


def validate_upload_file(path: Path) -> Optional[str]:
    """
    Check a file against the client-side upload limits.

    Args:
        path: Candidate file

    Returns:
        Human-readable reason when the file is rejected, None otherwise
    """
    if not path.exists():
        return f"File not found: {path}"
    if not path.is_file():
        return f"Not a file: {path}"

    if path.stat().st_size > MAX_UPLOAD_SIZE_BYTES:
        return "File exceeds the maximum size of 1 MiB"

    if path.suffix.lower() not in ALLOWED_UPLOAD_EXTENSIONS:
        return f"Unsupported extension. Accepted extensions: {', '.join(ALLOWED_UPLOAD_EXTENSIONS)}"

    return None


def cooldown_remaining(expiry: Optional[float], now: float) -> int:
    """Whole seconds left before ``expiry``, never negative."""
    if expiry is None:
        return 0
    return max(0, math.ceil(expiry - now))


class UploadController:
    """State machine driving one upload at a time."""

    def __init__(
        self,
        api: SoundboardApi,
        cache: QueryCache,
        clock: Callable[[], float] = time.time,
        cooldown_store: Optional[Config] = None,
        preview_factory: Callable[[Path], FilePreview] = FilePreview,
    ):
        """
        Initialize the upload controller.

        Args:
            api: Endpoint helpers
            cache: Query cache invalidated after a successful upload
            clock: Wall-clock source in seconds
            cooldown_store: Optional config used to persist the cooldown expiry
            preview_factory: Builds the preview handle for a selected file
        """
        self.api = api
        self.cache = cache
        self.clock = clock
        self.cooldown_store = cooldown_store
        self.preview_factory = preview_factory

        self.state = UploadState.EMPTY
        self.attempt: Optional[UploadAttempt] = None
        self.failure: Optional[UploadFailure] = None
        self.last_sound: Optional[Sound] = None
        self._cooldown_until: Optional[float] = None
        self._listeners: List[Callable[[UploadState], None]] = []

        self._restore_cooldown()

    def subscribe(self, listener: Callable[[UploadState], None]) -> Callable[[], None]:
        """
        Register a listener called on every state transition.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: UploadState) -> None:
        if state != self.state:
            logger.debug(f"Upload state {self.state.value} -> {state.value}")
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    def select_file(self, path) -> UploadState:
        """
        Replace the current attempt with a new file and validate it.

        Args:
            path: Path of the selected file

        Returns:
            Resulting state (READY, COOLING_DOWN or FAILED)

        Raises:
            UploadStateError: An upload is in progress
        """
        if self.state == UploadState.SUBMITTING:
            raise UploadStateError("An upload is already in progress")

        path = Path(path)
        self._discard_attempt()
        self.failure = None
        self.last_sound = None
        self._set_state(UploadState.SELECTED)

        self._set_state(UploadState.VALIDATING)
        reason = validate_upload_file(path)
        if reason:
            logger.info(f"Rejected {path.name}: {reason}")
            self.failure = UploadFailure('validation', reason)
            self._set_state(UploadState.FAILED)
            return self.state

        self.attempt = UploadAttempt(
            path=path,
            size=path.stat().st_size,
            name=default_sound_name(path.name),
            preview=self.preview_factory(path),
        )
        logger.info(f"Selected {path.name} ({self.attempt.size} bytes)")
        self._settle()
        return self.state

    def set_name(self, name: str) -> str:
        """
        Edit the sound name of the current attempt, clamped to 32 characters.

        Returns:
            The stored name
        """
        if self.attempt is None:
            raise UploadStateError("No file selected")
        if self.state == UploadState.SUBMITTING:
            raise UploadStateError("An upload is already in progress")
        self.attempt.name = clamp_name(name)
        return self.attempt.name

    def can_submit(self) -> bool:
        return (
            self.attempt is not None
            and self.state != UploadState.SUBMITTING
            and bool(self.attempt.name.strip())
            and self.cooldown_remaining() == 0
        )

    async def submit(self) -> Optional[Sound]:
        """
        Upload the current attempt.

        Server and network failures are recorded in ``failure`` and the
        resulting state rather than raised.

        Returns:
            The created sound, or None when the upload failed or was discarded

        Raises:
            CooldownActiveError: The upload cooldown has not expired yet
            UploadStateError: Nothing to submit, or a submission is in flight
        """
        remaining = self.cooldown_remaining()
        if remaining > 0:
            raise CooldownActiveError(remaining)
        if self.state == UploadState.SUBMITTING:
            raise UploadStateError("An upload is already in progress")
        if self.attempt is None:
            raise UploadStateError("No valid file selected")

        attempt = self.attempt
        name = attempt.name.strip()
        if not name:
            self.failure = UploadFailure('validation', "Name must contain at least 1 character")
            self._set_state(UploadState.FAILED)
            return None

        attempt.progress = 0
        self.failure = None
        self._set_state(UploadState.SUBMITTING)

        def on_progress(percent: int) -> None:
            if self.attempt is attempt:
                attempt.progress = percent
                for listener in list(self._listeners):
                    listener(self.state)

        logger.info(f"Uploading {attempt.filename} as '{name}'")
        try:
            sound = await self.api.upload_sound(attempt.path, name, on_progress)
        except SoundboardError as e:
            if not self._is_current(attempt):
                logger.info(f"Discarding failed result of cancelled upload: {e}")
                return None
            self._fail(attempt, e)
            return None

        if not self._is_current(attempt):
            logger.info(f"Discarding result of cancelled upload [sound_id={sound.id}]")
            return None

        self.cache.invalidate(SOUNDS_KIND)
        self._discard_attempt()
        self.last_sound = sound
        self._set_state(UploadState.SUCCEEDED)
        logger.info(f"Upload succeeded [sound_id={sound.id}]")
        return sound

    def _is_current(self, attempt: UploadAttempt) -> bool:
        return self.attempt is attempt and self.state == UploadState.SUBMITTING

    def _fail(self, attempt: UploadAttempt, error: SoundboardError) -> None:
        attempt.progress = 0
        if isinstance(error, RateLimitedError) and error.retry_after:
            self._start_cooldown(error.retry_after)
            self.failure = UploadFailure('rate_limited', error.message, error.code)
            self._set_state(UploadState.COOLING_DOWN)
            logger.warning(f"Upload rate limited, retry in {error.retry_after}s")
            return

        if isinstance(error, TransportError):
            self.failure = UploadFailure('server', error.message, error.code)
        else:
            self.failure = UploadFailure('network', str(error))
        self._set_state(UploadState.FAILED)
        logger.warning(f"Upload failed: {self.failure.reason}")

    def cancel(self) -> None:
        """
        Drop the current attempt, failure and cooldown.

        An in-flight request is not aborted; its result is discarded.
        """
        if self.state == UploadState.SUBMITTING:
            logger.info("Cancelling in-flight upload, its result will be discarded")
        self._discard_attempt()
        self.failure = None
        self._clear_cooldown()
        self._set_state(UploadState.EMPTY)

    def _discard_attempt(self) -> None:
        if self.attempt is not None:
            self.attempt.preview.revoke()
            self.attempt = None

    def _settle(self) -> None:
        if self.cooldown_remaining() > 0:
            self._set_state(UploadState.COOLING_DOWN)
        elif self.attempt is not None:
            self._set_state(UploadState.READY)
        else:
            self._set_state(UploadState.EMPTY)

    # Cooldown

    @property
    def cooldown_until(self) -> Optional[float]:
        return self._cooldown_until

    def cooldown_remaining(self) -> int:
        """
        Seconds left on the upload cooldown, recomputed from the clock.

        Reaching zero clears the cooldown and leaves the COOLING_DOWN state.
        """
        if self._cooldown_until is None:
            return 0
        remaining = cooldown_remaining(self._cooldown_until, self.clock())
        if remaining == 0:
            self._clear_cooldown()
            if self.state == UploadState.COOLING_DOWN:
                self._settle()
        return remaining

    async def watch_cooldown(self, interval: float = COOLDOWN_TICK_SECONDS) -> AsyncIterator[int]:
        """
        Yield the remaining cooldown once per interval until it reaches zero.

        Each value is recomputed from the absolute expiry, so suspended or
        delayed ticks never drift.
        """
        remaining = self.cooldown_remaining()
        while remaining > 0:
            yield remaining
            await asyncio.sleep(interval)
            remaining = self.cooldown_remaining()
        yield 0

    def _start_cooldown(self, seconds: int) -> None:
        self._cooldown_until = self.clock() + seconds
        if self.cooldown_store is not None:
            self.cooldown_store.set_cooldown_until(self._cooldown_until)

    def _clear_cooldown(self) -> None:
        self._cooldown_until = None
        if self.cooldown_store is not None:
            self.cooldown_store.set_cooldown_until(None)

    def _restore_cooldown(self) -> None:
        if self.cooldown_store is None:
            return
        expiry = self.cooldown_store.get_cooldown_until()
        if expiry is None:
            return
        if cooldown_remaining(expiry, self.clock()) > 0:
            self._cooldown_until = expiry
            self.state = UploadState.COOLING_DOWN
            logger.info(f"Restored upload cooldown ({cooldown_remaining(expiry, self.clock())}s left)")
        else:
            self.cooldown_store.set_cooldown_until(None)
