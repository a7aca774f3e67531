"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys
import time

from rich.console import Console

from heft.core.theme import get_theme

_UNITS = ("B", "KB", "MB", "GB", "TB")


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_bytes(size: int) -> str:
    """Format a byte count in binary units.

    Args:
        size: Number of bytes.

    Returns:
        e.g. "512 B", "1.5 KB", "3.2 GB".
    """
    value = float(size)
    for unit in _UNITS:
        if value < 1024 or unit == _UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def format_delta(delta: int) -> str:
    """Format a signed byte change, e.g. "+1.5 KB" or "-200 B"."""
    sign = "+" if delta >= 0 else "-"
    return f"{sign}{format_bytes(abs(delta))}"


def format_age(timestamp: int | None, now: float | None = None) -> str:
    """Format how long ago a Unix timestamp was.

    Args:
        timestamp: Unix timestamp in seconds, or None.
        now: Reference time. Defaults to the current time.

    Returns:
        e.g. "today", "3 days", "5 months", "2 years", or "-" if unknown.
    """
    if timestamp is None:
        return "-"
    reference = time.time() if now is None else now
    days = int(max(0.0, reference - timestamp) // 86400)
    if days == 0:
        return "today"
    if days < 60:
        return f"{days} day{'s' if days != 1 else ''}"
    if days < 730:
        return f"{days // 30} months"
    return f"{days // 365} years"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
