"""Persisted display preferences, kept apart from the query cache."""

from client.config import Config
from client.exceptions import ValidationError

VIEW_MODES = ("list", "grid")


class ViewPreference:
    """List/grid display mode stored in the config file."""

    def __init__(self, store: Config, default: str = "list"):
        self.store = store
        self.default = default

    @property
    def mode(self) -> str:
        stored = self.store.get_view_mode()
        return stored if stored in VIEW_MODES else self.default

    def set_mode(self, mode: str) -> None:
        if mode not in VIEW_MODES:
            raise ValidationError(f"Unknown view mode '{mode}'. Expected 'list' or 'grid'")
        self.store.set_view_mode(mode)

    def toggle(self) -> str:
        self.set_mode("list" if self.mode == "grid" else "grid")
        return self.mode

    @property
    def is_grid(self) -> bool:
        return self.mode == "grid"
