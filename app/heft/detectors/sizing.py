"""Recursive directory size measurement.

Sums logical file sizes under a path without ever following symbolic
links. Traversal faults are downgraded to warnings so that one unreadable
subdirectory does not blank out a multi-gigabyte finding.
"""

import logging
import os
from pathlib import Path

from heft.models.finding import UINT64_MAX, saturating_add

logger = logging.getLogger(__name__)

OVERFLOW_WARNING = "directory size exceeds u64::MAX, size capped at maximum value"

# Suffix appended by detectors when re-emitting measurement warnings
UNDERESTIMATE_SUFFIX = " (size may be underestimated)"


def _file_size(path: str) -> int:
    """Return the size of a regular file without following links."""
    return os.lstat(path).st_size


def traverse_warning(path: str, error: OSError) -> str:
    """Describe a directory that could not be entered."""
    if isinstance(error, PermissionError):
        return f"permission denied: {path}"
    return f"failed to traverse {path}: {error}"


def measure(path: Path | str) -> tuple[int, list[str]]:
    """Sum the sizes of all regular files under ``path``.

    Symlinks are never followed or counted. Additions saturate at
    UINT64_MAX with a single overflow warning per call. Per-entry errors
    become warnings and traversal continues.

    Args:
        path: Directory (or file) to measure.

    Returns:
        Tuple of (total_bytes, warnings). Never raises for I/O faults;
        a path that cannot be entered at all yields (0, [warning]).
    """
    root = os.fspath(path)
    total = 0
    warnings: list[str] = []
    overflowed = False

    try:
        if os.path.islink(root):
            return 0, warnings
        if os.path.isfile(root):
            return _file_size(root), warnings
    except OSError as e:
        return 0, [f"failed to read metadata for {root}: {e}"]

    stack = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("Cannot enter %s: %s", current, e)
            warnings.append(traverse_warning(current, e))
            continue

        for entry in entries:
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    stack.append(entry.path)
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
                size = _file_size(entry.path)
            except OSError as e:
                warnings.append(f"failed to read metadata for {entry.path}: {e}")
                continue

            if overflowed:
                continue
            total, overflowed = saturating_add(total, size)
            if overflowed:
                total = UINT64_MAX
                warnings.append(OVERFLOW_WARNING)

    return total, warnings
