"""Command parser for CLI input."""

import shlex

from cli.models import (
    AdminDeleteSoundCommand,
    CancelCommand,
    CommandRequest,
    DeleteCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    NameCommand,
    PageCommand,
    PageStepCommand,
    RenameCommand,
    SaveSettingsCommand,
    SearchCommand,
    SetSettingCommand,
    SettingsCommand,
    StatusCommand,
    SubmitCommand,
    ToggleFormatCommand,
    UploadCommand,
    UserActionCommand,
    UserFilterCommand,
    UsersCommand,
    UserSearchCommand,
    UserSortCommand,
    ViewCommand,
    WhoamiCommand,
)

USER_ACTIONS = ("ban", "unban", "toggle-admin", "delete-user")


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "login":
        return _parse_login(args)
    elif command_name == "logout":
        return _parse_no_args(command_name, args, LogoutCommand)
    elif command_name == "whoami":
        return _parse_no_args(command_name, args, WhoamiCommand)
    elif command_name == "list":
        return ListCommand(page=_parse_optional_page(command_name, args))
    elif command_name == "search":
        return SearchCommand(text=" ".join(args))
    elif command_name == "page":
        return _parse_page(args)
    elif command_name == "next":
        _parse_no_args(command_name, args, None)
        return PageStepCommand(step=1, command="next")
    elif command_name == "prev":
        _parse_no_args(command_name, args, None)
        return PageStepCommand(step=-1, command="prev")
    elif command_name == "view":
        return _parse_view(args)
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "name":
        if not args:
            raise ParseError("name requires a sound name")
        return NameCommand(name=" ".join(args))
    elif command_name == "submit":
        return _parse_no_args(command_name, args, SubmitCommand)
    elif command_name == "cancel":
        return _parse_no_args(command_name, args, CancelCommand)
    elif command_name == "status":
        return _parse_no_args(command_name, args, StatusCommand)
    elif command_name == "rename":
        return _parse_rename(args)
    elif command_name == "delete":
        return DeleteCommand(sound_id=_parse_single_id(command_name, args, "sound-id"))
    elif command_name == "users":
        return UsersCommand(page=_parse_optional_page(command_name, args))
    elif command_name == "user-filter":
        if len(args) != 1:
            raise ParseError("user-filter requires one of: all, admins, banned")
        return UserFilterCommand(filter=args[0])
    elif command_name == "user-sort":
        if len(args) != 1:
            raise ParseError("user-sort requires one column: username, createdAt, soundCount")
        return UserSortCommand(column=args[0])
    elif command_name == "user-search":
        return UserSearchCommand(text=" ".join(args))
    elif command_name in USER_ACTIONS:
        return UserActionCommand(action=command_name, user_id=_parse_single_id(command_name, args, "user-id"))
    elif command_name == "delete-sound":
        return AdminDeleteSoundCommand(sound_id=_parse_single_id(command_name, args, "sound-id"))
    elif command_name == "settings":
        return _parse_no_args(command_name, args, SettingsCommand)
    elif command_name == "set":
        if len(args) != 2:
            raise ParseError("set requires a field and a value")
        return SetSettingCommand(field=args[0], value=args[1])
    elif command_name == "toggle-format":
        if len(args) != 1:
            raise ParseError("toggle-format requires one MIME type (e.g. audio/ogg)")
        return ToggleFormatCommand(mime_type=args[0])
    elif command_name == "save-settings":
        return _parse_no_args(command_name, args, SaveSettingsCommand)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_no_args(command_name: str, args: list[str], factory):
    if args:
        raise ParseError(f"{command_name} takes no arguments")
    return factory() if factory is not None else None


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login [session-cookie]' command."""
    if len(args) > 1:
        raise ParseError("login takes at most one argument: the session cookie value")
    return LoginCommand(session_cookie=args[0] if args else None)


def _parse_int(value: str, what: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ParseError(f"{what} must be a number, got '{value}'")
    if number < 1:
        raise ParseError(f"{what} must be at least 1")
    return number


def _parse_optional_page(command_name: str, args: list[str]) -> int | None:
    if len(args) > 1:
        raise ParseError(f"{command_name} takes at most one argument: the page number")
    return _parse_int(args[0], "Page") if args else None


def _parse_page(args: list[str]) -> PageCommand:
    """Parse 'page n' command."""
    if len(args) != 1:
        raise ParseError("page requires a page number")
    return PageCommand(page=_parse_int(args[0], "Page"))


def _parse_view(args: list[str]) -> ViewCommand:
    if len(args) > 1:
        raise ParseError("view takes at most one argument: list or grid")
    return ViewCommand(mode=args[0] if args else None)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload file [name]' command; the name may span several tokens."""
    if not args:
        raise ParseError("upload requires a file path")
    name = " ".join(args[1:]) if len(args) > 1 else None
    return UploadCommand(file_path=args[0], name=name)


def _parse_rename(args: list[str]) -> RenameCommand:
    """Parse 'rename sound-id name' command."""
    if len(args) < 2:
        raise ParseError("rename requires a sound id and a new name")
    return RenameCommand(sound_id=args[0], name=" ".join(args[1:]))


def _parse_single_id(command_name: str, args: list[str], what: str) -> str:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly one {what}")
    return args[0]
