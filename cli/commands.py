"""Command handler functions for CLI operations."""

import sys
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
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
from cli.utils import (
    format_file_size,
    format_listing,
    format_progress,
    format_settings,
    format_users_page,
)
from client.app import SoundboardClient
from client.config import Config
from client.exceptions import (
    CooldownActiveError,
    SoundboardError,
    TransportError,
    ValidationError,
)
from client.schemas import AdminUser, Sound, User
from client.upload import UploadState

logger = get_logger(__name__)

ERROR_MESSAGES = {
    'UNAUTHORIZED': 'Not authenticated. Please run: login <session-cookie>',
    'FORBIDDEN': 'You do not have permission to do this.',
    'USER_BANNED': 'This account is banned.',
    'NOT_FOUND': 'Not found on server.',
    'SOUND_NOT_FOUND': 'Sound not found on server.',
    'USER_NOT_FOUND': 'User not found on server.',
    'QUOTA_EXCEEDED': 'Sound quota reached. Delete a sound to upload more.',
    'FILE_TOO_LARGE': 'File too large for the server limit.',
    'INVALID_FORMAT': 'Audio format not accepted by the server.',
    'DURATION_TOO_LONG': 'Sound is longer than the server allows.',
}

LIBRARY_VIEW = "library"
USERS_VIEW = "users"

_app: Optional[SoundboardClient] = None
_active_view = LIBRARY_VIEW


def get_app() -> SoundboardClient:
    """
    Get or create global SoundboardClient instance.

    Returns:
        SoundboardClient instance
    """
    global _app
    if _app is None:
        logger.debug("Creating new SoundboardClient instance")
        config = Config(Path.home() / '.soundboard' / 'config.json')
        _app = SoundboardClient(config)
    return _app


async def close_app() -> None:
    global _app
    if _app is not None:
        await _app.close()
        _app = None


def format_error(error: SoundboardError) -> str:
    """
    Map client errors to user-friendly messages.

    Args:
        error: Error raised by the client core

    Returns:
        User-friendly error message
    """
    if isinstance(error, TransportError):
        message = ERROR_MESSAGES.get(error.code, error.message)
        return f"{message} (Code: {error.code})"
    return str(error)


async def _current_user(app: SoundboardClient) -> User:
    user = await app.session.require_user()
    app.admin.current_user_id = user.id
    return user


async def _render_library(app: SoundboardClient) -> str:
    global _active_view
    _active_view = LIBRARY_VIEW
    await _current_user(app)
    listing = await app.library.refresh()
    return format_listing(listing, app.view.mode, app.library.search_query())


async def _render_users(app: SoundboardClient) -> str:
    global _active_view
    _active_view = USERS_VIEW
    admin = await app.session.require_admin()
    app.admin.current_user_id = admin.id
    users_page = await app.admin.refresh()
    return format_users_page(users_page, app.admin.sort, app.admin.filter, app.admin.current_user_id)


async def _find_sound(app: SoundboardClient, sound_id: str) -> Sound:
    sound = app.library.find(sound_id)
    if sound is None:
        await app.library.refresh()
        sound = app.library.find(sound_id)
    if sound is None:
        raise ValidationError(f"Sound {sound_id} is not on the current page. Run: list")
    return sound


async def _find_user(app: SoundboardClient, user_id: str) -> AdminUser:
    user = app.admin.find(user_id)
    if user is None:
        user = await app.api.admin_get_user(user_id)
    return user


async def handle_login(cmd: LoginCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'login' command.

    Args:
        cmd: LoginCommand with optional session cookie
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Sign-in instructions, or a greeting once the cookie is accepted
    """
    if app is None:
        app = get_app()
    if cmd.session_cookie is None:
        return (
            "Sign in with Steam in your browser:\n"
            f"  {app.session.steam_login_url()}\n"
            f"Then copy the '{app.config.get_cookie_name()}' cookie and run: login <session-cookie>"
        )

    app.session.login(cmd.session_cookie)
    try:
        user = await app.session.current_user()
    except SoundboardError as e:
        return f"Login failed: {format_error(e)}"
    if user is None:
        app.transport.set_session_cookie(None)
        return "Login failed: the session cookie was not accepted"
    app.admin.current_user_id = user.id
    role = " (admin)" if user.is_admin else ""
    return f"Logged in as {user.username}{role}"


async def handle_logout(cmd: LogoutCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        await app.session.logout()
    except SoundboardError as e:
        return f"Logout failed: {format_error(e)}"
    app.admin.current_user_id = None
    return "Logged out"


async def handle_whoami(cmd: WhoamiCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        user = await _current_user(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    lines = [f"{user.username} (Steam ID: {user.steam_id64})"]
    if user.is_admin:
        lines.append("Role: admin")
    return "\n".join(lines)


async def handle_list(cmd: ListCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand with optional page number
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Formatted page of sounds
    """
    logger.info(f"Executing list command: page={cmd.page}")
    if app is None:
        app = get_app()
    if cmd.page is not None:
        app.library.set_page(cmd.page)
    try:
        return await _render_library(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_search(cmd: SearchCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'search' command.

    Each command is a complete input, so the search text is settled at once
    instead of waiting for the debounce period.
    """
    if app is None:
        app = get_app()
    app.library.set_search(cmd.text)
    app.library.search.flush()
    try:
        return await _render_library(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def _goto_page(app: SoundboardClient, page: int) -> str:
    try:
        if _active_view == USERS_VIEW:
            app.admin.set_page(page)
            return await _render_users(app)
        app.library.set_page(page)
        return await _render_library(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_page(cmd: PageCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    return await _goto_page(app, cmd.page)


async def handle_page_step(cmd: PageStepCommand, app: Optional[SoundboardClient] = None) -> str:
    """Handle 'next' and 'prev' commands on the last listed view."""
    if app is None:
        app = get_app()
    if _active_view == USERS_VIEW:
        current, shown = app.admin.page, app.admin.users_page
    else:
        current, shown = app.library.page, app.library.listing
    target = current + cmd.step
    if target < 1:
        return "Already on the first page"
    if shown is not None and target > shown.total_pages:
        return "Already on the last page"
    return await _goto_page(app, target)


async def handle_view(cmd: ViewCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    if cmd.mode is None:
        return f"View mode: {app.view.mode}"
    try:
        app.view.set_mode(cmd.mode)
    except ValidationError as e:
        return f"Error: {e}"
    return f"View mode set to {app.view.mode}"


def _upload_status(app: SoundboardClient) -> str:
    uploads = app.uploads
    state = uploads.state
    remaining = uploads.cooldown_remaining()
    lines = [f"Upload state: {uploads.state.value}"]
    if uploads.attempt is not None:
        attempt = uploads.attempt
        lines.append(f"  File: {attempt.filename} ({format_file_size(attempt.size)})")
        lines.append(f"  Name: {attempt.name}")
        if state == UploadState.SUBMITTING:
            lines.append(f"  Progress: {attempt.progress}%")
    if uploads.failure is not None:
        lines.append(f"  Error: {uploads.failure.reason}")
    if remaining > 0:
        lines.append(f"  Next upload available in {remaining}s")
    if uploads.last_sound is not None and state == UploadState.SUCCEEDED:
        lines.append(f"  Uploaded: {uploads.last_sound.name} (ID: {uploads.last_sound.id})")
    return "\n".join(lines)


async def handle_upload(cmd: UploadCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file path and optional name
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Selection status, or the validation failure
    """
    logger.info(f"Executing upload command: file={cmd.file_path}")
    if app is None:
        app = get_app()
    try:
        state = app.uploads.select_file(cmd.file_path)
        if cmd.name is not None and app.uploads.attempt is not None:
            app.uploads.set_name(cmd.name)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"

    if state == UploadState.FAILED:
        return f"Error: {app.uploads.failure.reason}"
    return _upload_status(app) + "\nRun 'submit' to upload, 'name <name>' to rename first."


async def handle_name(cmd: NameCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        name = app.uploads.set_name(cmd.name)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    return f"Sound name set to '{name}'"


async def handle_submit(cmd: SubmitCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'submit' command.

    Prints a progress bar while the file is sent.

    Args:
        cmd: SubmitCommand
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Upload result message
    """
    if app is None:
        app = get_app()
    uploads = app.uploads
    if uploads.attempt is None:
        return "Error: No file selected. Run: upload <file> [name]"

    filename = uploads.attempt.filename
    shown = []

    def show_progress(state: UploadState) -> None:
        if state == UploadState.SUBMITTING and uploads.attempt is not None:
            sys.stdout.write(format_progress(filename, uploads.attempt.progress))
            sys.stdout.flush()
            shown.append(uploads.attempt.progress)

    unsubscribe = uploads.subscribe(show_progress)
    try:
        sound = await uploads.submit()
    except CooldownActiveError as e:
        return f"Error: {e}"
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    finally:
        unsubscribe()
        if shown:
            sys.stdout.write('\n')
            sys.stdout.flush()

    if sound is not None:
        return f"Uploaded {sound.name} (ID: {sound.id})"

    failure = uploads.failure
    if uploads.state == UploadState.COOLING_DOWN:
        return f"Upload rate limited. Next upload available in {uploads.cooldown_remaining()}s"
    if failure is not None:
        if failure.code:
            message = ERROR_MESSAGES.get(failure.code, failure.reason)
            return f"Upload failed: {message} (Code: {failure.code})"
        return f"Upload failed: {failure.reason}"
    return "Upload discarded"


async def handle_cancel(cmd: CancelCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    app.uploads.cancel()
    return "Upload selection cleared"


async def handle_status(cmd: StatusCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    return _upload_status(app)


async def handle_rename(cmd: RenameCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'rename' command.

    Args:
        cmd: RenameCommand with sound id and new name
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if app is None:
        app = get_app()
    try:
        sound = await _find_sound(app, cmd.sound_id)
        app.library.start_rename(sound)
        renamed = await app.library.rename(sound, cmd.name)
    except SoundboardError as e:
        app.library.cancel_rename()
        return f"Error: {format_error(e)}"
    if renamed is sound:
        return "Name unchanged"
    return f"Renamed to '{renamed.name}'"


async def handle_delete(cmd: DeleteCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'delete' command.

    Args:
        cmd: DeleteCommand with sound id
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing delete command: sound_id={cmd.sound_id}")
    if app is None:
        app = get_app()
    try:
        sound = await _find_sound(app, cmd.sound_id)
        await app.library.delete(sound)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    return f"Deleted {sound.name}"


async def handle_users(cmd: UsersCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    if cmd.page is not None:
        app.admin.set_page(cmd.page)
    try:
        return await _render_users(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_user_filter(cmd: UserFilterCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        app.admin.set_filter(cmd.filter)
        return await _render_users(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_user_sort(cmd: UserSortCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        app.admin.toggle_sort(cmd.column)
        return await _render_users(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_user_search(cmd: UserSearchCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    app.admin.set_search(cmd.text)
    app.admin.search.flush()
    try:
        return await _render_users(app)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_user_action(cmd: UserActionCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'ban', 'unban', 'toggle-admin' and 'delete-user' commands.

    Args:
        cmd: UserActionCommand with action and user id
        app: Optional SoundboardClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing {cmd.action} command: user_id={cmd.user_id}")
    if app is None:
        app = get_app()
    try:
        admin = await app.session.require_admin()
        app.admin.current_user_id = admin.id
        user = await _find_user(app, cmd.user_id)
        if cmd.action == "ban":
            await app.admin.ban(user)
            return f"Banned {user.username}"
        if cmd.action == "unban":
            await app.admin.unban(user)
            return f"Unbanned {user.username}"
        if cmd.action == "toggle-admin":
            updated = await app.admin.toggle_admin(user)
            role = "granted" if updated.is_admin else "revoked"
            return f"Admin rights {role} for {updated.username}"
        result = await app.admin.delete_user(user)
        return f"Deleted {user.username} and {result.deleted_sounds_count} sound(s)"
    except SoundboardError as e:
        return f"Error: {format_error(e)}"


async def handle_admin_delete_sound(cmd: AdminDeleteSoundCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        await app.session.require_admin()
        await app.admin.delete_sound(cmd.sound_id)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    return f"Deleted sound {cmd.sound_id}"


async def _ensure_settings(app: SoundboardClient) -> None:
    await app.session.require_admin()
    if app.settings.draft is None:
        await app.settings.load()


async def handle_settings(cmd: SettingsCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        await app.session.require_admin()
        if not app.settings.is_dirty:
            await app.settings.load()
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    return format_settings(app.settings.draft, dirty=app.settings.is_dirty)


async def handle_set_setting(cmd: SetSettingCommand, app: Optional[SoundboardClient] = None) -> str:
    """
    Handle 'set' command.

    ``max_file_size`` also accepts a MiB value with a trailing 'mb'.
    """
    if app is None:
        app = get_app()
    try:
        await _ensure_settings(app)
        value = cmd.value.strip()
        if cmd.field == "max_file_size" and value.lower().endswith("mb"):
            try:
                megabytes = float(value[:-2])
            except ValueError:
                raise ValidationError(f"Invalid size '{cmd.value}'")
            app.settings.set_max_file_size_mb(megabytes)
        else:
            app.settings.set_value(cmd.field, value)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    return format_settings(app.settings.draft, dirty=app.settings.is_dirty)


async def handle_toggle_format(cmd: ToggleFormatCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        await _ensure_settings(app)
        changed = app.settings.toggle_format(cmd.mime_type)
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    if not changed:
        return "At least one format must stay allowed"
    return format_settings(app.settings.draft, dirty=app.settings.is_dirty)


async def handle_save_settings(cmd: SaveSettingsCommand, app: Optional[SoundboardClient] = None) -> str:
    if app is None:
        app = get_app()
    try:
        await app.session.require_admin()
        if app.settings.draft is None:
            return "Nothing to save. Run: settings"
        saved = await app.settings.save()
    except SoundboardError as e:
        return f"Error: {format_error(e)}"
    return "Settings saved\n" + format_settings(saved)


def cooldown_toolbar(app: Optional[SoundboardClient] = None) -> str:
    """Bottom toolbar text: upload cooldown countdown, if any."""
    if app is None:
        app = get_app()
    remaining = app.uploads.cooldown_remaining()
    if remaining > 0:
        return f" Next upload available in {remaining}s "
    if app.uploads.state == UploadState.READY and app.uploads.attempt is not None:
        return f" Ready to upload: {app.uploads.attempt.filename} "
    return " Upload available "
