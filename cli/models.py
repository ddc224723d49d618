"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class LoginCommand:
    """Store a session cookie, or show the Steam sign-in URL when omitted."""

    session_cookie: str | None = None
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    """End the current session."""

    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoamiCommand:
    """Show the signed-in user."""

    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class ListCommand:
    """List the current user's sounds."""

    page: int | None = None
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class SearchCommand:
    """Filter the library by name; empty text clears the filter."""

    text: str = ""
    command: Literal["search"] = "search"


@dataclass(frozen=True)
class PageCommand:
    """Jump to a page of the library or the user directory."""

    page: int
    command: Literal["page"] = "page"


@dataclass(frozen=True)
class PageStepCommand:
    """Move one page forward or back."""

    step: int
    command: Literal["next", "prev"] = "next"


@dataclass(frozen=True)
class ViewCommand:
    """Show or set the display mode."""

    mode: str | None = None
    command: Literal["view"] = "view"


@dataclass(frozen=True)
class UploadCommand:
    """Select a local audio file, with an optional sound name."""

    file_path: str
    name: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class NameCommand:
    """Change the sound name of the selected file."""

    name: str
    command: Literal["name"] = "name"


@dataclass(frozen=True)
class SubmitCommand:
    """Upload the selected file."""

    command: Literal["submit"] = "submit"


@dataclass(frozen=True)
class CancelCommand:
    """Drop the selection, its failure and any cooldown."""

    command: Literal["cancel"] = "cancel"


@dataclass(frozen=True)
class StatusCommand:
    """Show the upload state."""

    command: Literal["status"] = "status"


@dataclass(frozen=True)
class RenameCommand:
    """Rename one of the user's sounds."""

    sound_id: str
    name: str
    command: Literal["rename"] = "rename"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete one of the user's sounds."""

    sound_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class UsersCommand:
    """List users in the admin directory."""

    page: int | None = None
    command: Literal["users"] = "users"


@dataclass(frozen=True)
class UserFilterCommand:
    """Filter the admin directory."""

    filter: str
    command: Literal["user-filter"] = "user-filter"


@dataclass(frozen=True)
class UserSortCommand:
    """Cycle the sort on one directory column."""

    column: str
    command: Literal["user-sort"] = "user-sort"


@dataclass(frozen=True)
class UserSearchCommand:
    """Search the admin directory by username or Steam ID."""

    text: str = ""
    command: Literal["user-search"] = "user-search"


@dataclass(frozen=True)
class UserActionCommand:
    """Moderation action on one user."""

    action: Literal["ban", "unban", "toggle-admin", "delete-user"]
    user_id: str

    @property
    def command(self) -> str:
        return self.action


@dataclass(frozen=True)
class AdminDeleteSoundCommand:
    """Delete any user's sound."""

    sound_id: str
    command: Literal["delete-sound"] = "delete-sound"


@dataclass(frozen=True)
class SettingsCommand:
    """Show the global settings draft."""

    command: Literal["settings"] = "settings"


@dataclass(frozen=True)
class SetSettingCommand:
    """Edit one numeric setting on the draft."""

    field: str
    value: str
    command: Literal["set"] = "set"


@dataclass(frozen=True)
class ToggleFormatCommand:
    """Allow or disallow an audio format on the draft."""

    mime_type: str
    command: Literal["toggle-format"] = "toggle-format"


@dataclass(frozen=True)
class SaveSettingsCommand:
    """Save the settings draft."""

    command: Literal["save-settings"] = "save-settings"


CommandRequest = (
    LoginCommand
    | LogoutCommand
    | WhoamiCommand
    | ListCommand
    | SearchCommand
    | PageCommand
    | PageStepCommand
    | ViewCommand
    | UploadCommand
    | NameCommand
    | SubmitCommand
    | CancelCommand
    | StatusCommand
    | RenameCommand
    | DeleteCommand
    | UsersCommand
    | UserFilterCommand
    | UserSortCommand
    | UserSearchCommand
    | UserActionCommand
    | AdminDeleteSoundCommand
    | SettingsCommand
    | SetSettingCommand
    | ToggleFormatCommand
    | SaveSettingsCommand
)
