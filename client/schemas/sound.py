"""Pydantic schemas for sound endpoints."""

from typing import List

from client.schemas.common import CamelModel
from common.constants import DEFAULT_MAX_SOUNDS, DEFAULT_PAGE_SIZE


class Sound(CamelModel):
    """A single sound owned by the current user."""
    id: str
    name: str
    filename: str
    duration: float
    size: int
    created_at: str


class SoundListing(CamelModel):
    """One page of the current user's sounds."""
    sounds: List[Sound] = []
    count: int = 0
    total_count: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total_pages: int = 1
    max_sounds: int = DEFAULT_MAX_SOUNDS

    @property
    def quota_reached(self) -> bool:
        return self.total_count >= self.max_sounds


class SoundResponse(CamelModel):
    """Response model for upload and rename."""
    sound: Sound
