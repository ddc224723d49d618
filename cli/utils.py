"""Formatting helpers for CLI output."""

from datetime import datetime
from typing import List, Optional, Union

from cli.constants import GREEN, RED, RESET, YELLOW
from client.admin import SortState
from client.schemas import AdminUser, AdminUsersPage, Settings, Sound, SoundListing

QUOTA_WARNING_PERCENT = 60
QUOTA_CRITICAL_PERCENT = 85
MAX_VISIBLE_PAGES = 5
GRID_COLUMNS = 4
GRID_CELL_WIDTH = 34


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} TiB"


def format_duration(seconds: float) -> str:
    """Format a duration as m:ss."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def format_date(value: str) -> str:
    """Render an ISO timestamp as a date; unparseable values pass through."""
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).strftime('%Y-%m-%d')
    except ValueError:
        return value


def quota_percentage(used: int, limit: int) -> int:
    if limit <= 0:
        return 100
    return min(100, round(used * 100 / limit))


def quota_level(percentage: int) -> str:
    """Severity of quota usage: 'ok', 'warning' or 'critical'."""
    if percentage < QUOTA_WARNING_PERCENT:
        return 'ok'
    if percentage < QUOTA_CRITICAL_PERCENT:
        return 'warning'
    return 'critical'


def page_numbers(current: int, total: int, max_visible: int = MAX_VISIBLE_PAGES) -> List[Union[int, str]]:
    """
    Page numbers to show for a paginated list.

    Up to ``max_visible`` pages are listed in full. Beyond that the first and
    last page frame the current page and its neighbours, with '...' marking
    each gap.

    Args:
        current: Current page (1-based)
        total: Total number of pages
        max_visible: Largest page count listed in full

    Returns:
        Page numbers mixed with '...' markers
    """
    if total <= max_visible:
        return list(range(1, total + 1))

    pages: List[Union[int, str]] = [1]
    if current > 3:
        pages.append('...')
    pages.extend(range(max(2, current - 1), min(total - 1, current + 1) + 1))
    if current < total - 2:
        pages.append('...')
    pages.append(total)
    return pages


def format_pagination(current: int, total: int) -> str:
    """Render the page list, current page in brackets."""
    parts = []
    for page in page_numbers(current, total):
        if page == current:
            parts.append(f"[{page}]")
        else:
            parts.append(str(page))
    return "Pages: " + " ".join(parts)


def format_quota(listing: SoundListing) -> str:
    percentage = quota_percentage(listing.total_count, listing.max_sounds)
    color = {'ok': GREEN, 'warning': YELLOW, 'critical': RED}[quota_level(percentage)]
    line = f"Sounds: {listing.total_count} / {listing.max_sounds} ({color}{percentage}%{RESET})"
    if listing.quota_reached:
        line += " - quota reached, delete a sound to upload more"
    return line


def format_sound_line(sound: Sound) -> str:
    return (
        f"  - {sound.name} (ID: {sound.id})\n"
        f"    Duration: {format_duration(sound.duration)}  "
        f"Size: {format_file_size(sound.size)}  "
        f"Created: {format_date(sound.created_at)}"
    )


def format_sound_grid(sounds: List[Sound]) -> str:
    rows = []
    for start in range(0, len(sounds), GRID_COLUMNS):
        cells = []
        for sound in sounds[start:start + GRID_COLUMNS]:
            cell = f"{sound.name} ({format_duration(sound.duration)})"
            cells.append(cell.ljust(GRID_CELL_WIDTH))
        rows.append("  " + "".join(cells).rstrip())
    return "\n".join(rows)


def format_listing(listing: SoundListing, view_mode: str, search: Optional[str] = None) -> str:
    """
    Render one page of the sound library.

    Args:
        listing: Page returned by the server
        view_mode: 'list' or 'grid'
        search: Active search text, if any

    Returns:
        Multi-line text block
    """
    output = [format_quota(listing)]

    if not listing.sounds:
        if search:
            output.append(f"No sounds found matching: {search}")
        else:
            output.append("No sounds yet. Upload one with: upload <file> [name]")
        return "\n".join(output)

    header = f"Found {listing.count} sound(s)"
    if search:
        header += f" matching '{search}'"
    output.append(header + ":")

    if view_mode == 'grid':
        output.append(format_sound_grid(listing.sounds))
    else:
        output.extend(format_sound_line(sound) for sound in listing.sounds)

    if listing.total_pages > 1:
        output.append(format_pagination(listing.page, listing.total_pages))
    return "\n".join(output)


def format_user_line(user: AdminUser, current_user_id: Optional[str] = None) -> str:
    flags = []
    if user.is_admin:
        flags.append("admin")
    if user.is_banned:
        flags.append("banned")
    if current_user_id is not None and user.id == current_user_id:
        flags.append("you")
    flag_str = f" [{', '.join(flags)}]" if flags else ""
    return (
        f"  - {user.username}{flag_str} (ID: {user.id})\n"
        f"    Steam ID: {user.steam_id64}  Sounds: {user.sound_count}  "
        f"Joined: {format_date(user.created_at)}"
    )


def format_users_page(
    users_page: AdminUsersPage,
    sort: Optional[SortState],
    filter_value: str,
    current_user_id: Optional[str] = None,
) -> str:
    sort_str = f"{sort.column} {sort.order}" if sort else "none"
    output = [f"Filter: {filter_value}  Sort: {sort_str}"]

    if not users_page.users:
        output.append("No users found")
        return "\n".join(output)

    output.append(f"Found {users_page.count} user(s):")
    output.extend(format_user_line(user, current_user_id) for user in users_page.users)
    if users_page.total_pages > 1:
        output.append(format_pagination(users_page.page, users_page.total_pages))
    return "\n".join(output)


def format_settings(settings: Settings, dirty: bool = False) -> str:
    lines = [
        "Settings" + (" (unsaved changes)" if dirty else "") + ":",
        f"  max_sounds_per_user: {settings.max_sounds_per_user}",
        f"  max_file_size:       {settings.max_file_size} ({format_file_size(settings.max_file_size)})",
        f"  max_duration:        {settings.max_duration}s",
        f"  cooldown_seconds:    {settings.cooldown_seconds}s",
        f"  allowed_formats:     {', '.join(settings.allowed_formats)}",
    ]
    return "\n".join(lines)


def format_progress(filename: str, percent: int, width: int = 30) -> str:
    filled = width * percent // 100
    bar = "#" * filled + "-" * (width - filled)
    return f"\rUploading {filename}: [{bar}] {GREEN}{percent}%{RESET}"
