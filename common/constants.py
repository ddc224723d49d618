"""Project-wide constants (upload limits, paging, cache kinds)."""

MAX_UPLOAD_SIZE_BYTES: int = 1 * 1024 * 1024  # 1 MiB client-side ceiling
ALLOWED_UPLOAD_EXTENSIONS: tuple[str, ...] = (".mp3", ".wav", ".ogg")
SOUND_NAME_MAX_LENGTH: int = 32

SEARCH_DEBOUNCE_SECONDS: float = 0.3
COOLDOWN_TICK_SECONDS: float = 1.0

DEFAULT_PAGE_SIZE: int = 20
DEFAULT_MAX_SOUNDS: int = 25

RATE_LIMIT_ERROR_CODE: str = "RATE_LIMIT_EXCEEDED"

SOUNDS_KIND: str = "sounds"
ADMIN_USERS_KIND: str = "admin.users"
ADMIN_SETTINGS_KIND: str = "admin.settings"
AUTH_ME_KIND: str = "auth.me"
MAX_CACHED_QUERIES: int = 200

AVAILABLE_FORMATS: dict[str, str] = {
    "audio/ogg": "OGG",
    "audio/mpeg": "MP3",
    "audio/wav": "WAV",
}

UPLOAD_CONTENT_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
}
