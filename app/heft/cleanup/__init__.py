"""Cleanup of reported findings.

This module exports the executor, its result type and the path-safety
checks applied before anything is deleted.
"""

from heft.cleanup.executor import (
    CleanupError,
    CleanupExecutor,
    CleanupResult,
    UnsafePathError,
    parse_categories,
    validate_deletion_path,
)
from heft.cleanup.protected import PROTECTED_PATH_PATTERNS, is_protected_path

__all__ = [
    "PROTECTED_PATH_PATTERNS",
    "CleanupError",
    "CleanupExecutor",
    "CleanupResult",
    "UnsafePathError",
    "is_protected_path",
    "parse_categories",
    "validate_deletion_path",
]
