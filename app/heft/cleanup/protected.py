"""Paths that cleanup must never delete.

Findings feed straight into deletion, so credentials and heft's own state
are refused here regardless of what a detector reported.
"""

import fnmatch
from pathlib import Path

from heft.core.paths import get_config_dir, get_data_dir

# Protected path patterns (glob-style). Patterns starting with ~ are
# expanded to the home directory before matching; each pattern also
# protects everything below it.
PROTECTED_PATH_PATTERNS: list[str] = [
    # SSH and security
    "~/.ssh",
    "~/.gnupg",
    "~/.gpg",
    "~/.aws",
    "~/.kube",
    # Keyrings
    "~/.local/share/keyrings",
    "~/Library/Keychains",
    # Shell and git config
    "~/.config/git",
    "~/.gitconfig",
    # heft itself
    "~/.config/heft",
    "~/.local/share/heft",
]


def _expand(pattern: str, home: Path | None) -> str | None:
    if not pattern.startswith("~"):
        return pattern
    if home is None:
        return None
    return str(home) + pattern[1:]


def is_protected_path(path: str, home: Path | None = None) -> bool:
    """Check if a filesystem path is protected and should not be deleted.

    Args:
        path: Absolute filesystem path to check.
        home: Home directory used to expand ``~`` patterns.

    Returns:
        True if the path matches or lies below a protected pattern, or lies
        inside heft's own config or data directory.
    """
    patterns = [_expand(p, home) for p in PROTECTED_PATH_PATTERNS]
    patterns.extend([str(get_config_dir()), str(get_data_dir())])

    for expanded in patterns:
        if expanded is None:
            continue
        if fnmatch.fnmatch(path, expanded) or fnmatch.fnmatch(path, expanded + "/*"):
            return True

    return False
