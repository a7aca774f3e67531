"""Host platform capability.

Detectors never read the environment directly. The host OS, the home
directory and tool lookups come from a ``HostPlatform`` value that is
built once and passed in through the scan configuration, so tests can
substitute a fake home without touching the real environment.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from heft.utils.shell import command_exists


class Platform(str, Enum):
    """Operating system family."""

    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


def detect_platform(platform_name: str | None = None) -> Platform:
    """Map a ``sys.platform`` value to a Platform.

    Args:
        platform_name: Value to map. Defaults to ``sys.platform``.

    Returns:
        Platform enum value.
    """
    name = platform_name if platform_name is not None else sys.platform
    if name == "darwin":
        return Platform.MACOS
    if name.startswith("linux"):
        return Platform.LINUX
    if name in ("win32", "cygwin"):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def home_dir() -> Path | None:
    """Best-effort home directory from HOME, falling back to USERPROFILE."""
    value = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    return Path(value) if value else None


def _running_under_wsl() -> bool:
    try:
        with open("/proc/version", encoding="utf-8") as f:
            return "microsoft" in f.read().lower()
    except OSError:
        return False


@dataclass(frozen=True, slots=True)
class HostPlatform:
    """What the scan knows about the machine it runs on.

    Attributes:
        os: Operating system family.
        home: Home directory, or None when it cannot be determined.
        is_wsl: Whether this is Linux running under WSL.
    """

    os: Platform
    home: Path | None
    is_wsl: bool = False

    @classmethod
    def detect(cls) -> "HostPlatform":
        """Build a HostPlatform from the current process environment."""
        current = detect_platform()
        return cls(
            os=current,
            home=home_dir(),
            is_wsl=current == Platform.LINUX and _running_under_wsl(),
        )

    def has_tool(self, name: str) -> bool:
        """Check whether an external tool is on PATH."""
        return command_exists(name)
