"""REPL with prompt_toolkit for user interaction."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    close_app,
    cooldown_toolbar,
    handle_admin_delete_sound,
    handle_cancel,
    handle_delete,
    handle_list,
    handle_login,
    handle_logout,
    handle_name,
    handle_page,
    handle_page_step,
    handle_rename,
    handle_save_settings,
    handle_search,
    handle_set_setting,
    handle_settings,
    handle_status,
    handle_submit,
    handle_toggle_format,
    handle_upload,
    handle_user_action,
    handle_user_filter,
    handle_user_search,
    handle_user_sort,
    handle_users,
    handle_view,
    handle_whoami,
)
from cli.completer import SoundboardCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    AdminDeleteSoundCommand,
    CancelCommand,
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
from cli.parser import ParseError, parse_command

HANDLERS = {
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    WhoamiCommand: handle_whoami,
    ListCommand: handle_list,
    SearchCommand: handle_search,
    PageCommand: handle_page,
    PageStepCommand: handle_page_step,
    ViewCommand: handle_view,
    UploadCommand: handle_upload,
    NameCommand: handle_name,
    SubmitCommand: handle_submit,
    CancelCommand: handle_cancel,
    StatusCommand: handle_status,
    RenameCommand: handle_rename,
    DeleteCommand: handle_delete,
    UsersCommand: handle_users,
    UserFilterCommand: handle_user_filter,
    UserSortCommand: handle_user_sort,
    UserSearchCommand: handle_user_search,
    UserActionCommand: handle_user_action,
    AdminDeleteSoundCommand: handle_admin_delete_sound,
    SettingsCommand: handle_settings,
    SetSettingCommand: handle_set_setting,
    ToggleFormatCommand: handle_toggle_format,
    SaveSettingsCommand: handle_save_settings,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


async def dispatch_command(cmd_obj) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return await handler(cmd_obj)


async def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=SoundboardCompleter(),
        history=history,
        style=STYLE,
        bottom_toolbar=lambda: cooldown_toolbar(),
        refresh_interval=1.0,
    )

    clear_screen()
    show_welcome()

    try:
        while True:
            try:
                user_input = await session.prompt_async([("class:prompt", PROMPT_TEXT)])

                if not user_input.strip():
                    continue

                if user_input.strip() == "exit":
                    print("Goodbye!")
                    break

                if user_input.strip() == "help":
                    print(HELP_TEXT)
                    continue

                if user_input.strip() == "clear":
                    clear_screen()
                    show_welcome()
                    continue

                cmd_obj = parse_command(user_input)
                result = await dispatch_command(cmd_obj)
                print(result)

            except ParseError as e:
                print(f"Error: {e}")
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
    finally:
        await close_app()
