"""Cleanup execution.

Deletes reported findings: filesystem locations are removed after a
path-safety check, Docker aggregates are pruned with the matching
``docker ... prune -f`` command, and single Docker objects are removed by
id. Failures are isolated per item and never abort the run.
"""

import logging
import os
import shutil
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from heft.cleanup.protected import is_protected_path
from heft.models.finding import BloatCategory, Finding, saturating_add
from heft.utils.shell import run_command

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30

# Fewest path components (excluding the root) a deletable path may have
MIN_PATH_COMPONENTS = 3

# `docker system df` types and the command that prunes each of them
PRUNE_COMMANDS: dict[str, list[str]] = {
    "Images": ["docker", "image", "prune", "-a", "-f"],
    "Containers": ["docker", "container", "prune", "-f"],
    "Build Cache": ["docker", "builder", "prune", "-f"],
    "Local Volumes": ["docker", "volume", "prune", "-f"],
}

VOLUMES_TYPE = "Local Volumes"


class CleanupError(Exception):
    """Base exception for cleanup errors."""


class UnsafePathError(CleanupError):
    """Raised when a path must not be deleted."""


def parse_categories(value: str | None) -> frozenset[BloatCategory] | None:
    """Parse a comma-separated list of kebab-case category names.

    Args:
        value: e.g. "project-artifacts,package-cache". None or empty means all.

    Returns:
        The selected categories, or None for no filter.

    Raises:
        CleanupError: If a name is not a known category.
    """
    if not value:
        return None
    categories: set[BloatCategory] = set()
    for part in value.split(","):
        if not part.strip():
            continue
        try:
            categories.add(BloatCategory.from_slug(part))
        except ValueError as e:
            raise CleanupError(str(e)) from e
    return frozenset(categories) or None


def validate_deletion_path(path: Path, home: Path | None = None) -> None:
    """Check that a path is safe to delete.

    Args:
        path: Candidate path.
        home: Home directory; neither it nor any ancestor may be deleted.

    Raises:
        UnsafePathError: With the reason the path is refused.
    """
    if not path.is_absolute():
        msg = f"refusing to delete relative path: {path}"
        raise UnsafePathError(msg)

    normalized = Path(os.path.normpath(path))
    if normalized.is_symlink():
        msg = f"refusing to delete symlink: {path}"
        raise UnsafePathError(msg)
    if not normalized.exists():
        msg = f"path does not exist: {path}"
        raise UnsafePathError(msg)

    if normalized == Path(normalized.anchor):
        msg = f"refusing to delete filesystem root: {path}"
        raise UnsafePathError(msg)
    if home is not None and (normalized == home or normalized in home.parents):
        msg = f"refusing to delete home directory or its parent: {path}"
        raise UnsafePathError(msg)

    components = len(normalized.parts) - (1 if normalized.anchor else 0)
    if components < MIN_PATH_COMPONENTS:
        msg = f"refusing to delete shallow path: {path}"
        raise UnsafePathError(msg)

    if is_protected_path(str(normalized), home):
        msg = f"protected path cannot be deleted: {path}"
        raise UnsafePathError(msg)


@dataclass(slots=True)
class CleanupResult:
    """Outcome of a cleanup run.

    Attributes:
        deleted: One line per item that was (or in a dry run would be) removed.
        skipped: Items deliberately left alone, with the reason.
        errors: Items that failed, with the reason.
        bytes_freed: Sum of reclaimable bytes of the deleted items.
        dry_run: Whether nothing was actually touched.
    """

    deleted: list[str] = field(default_factory=lambda: [])
    skipped: list[str] = field(default_factory=lambda: [])
    errors: list[str] = field(default_factory=lambda: [])
    bytes_freed: int = 0
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Check if no item failed."""
        return not self.errors


class CleanupExecutor:
    """Deletes findings, or reports what it would delete.

    Attributes:
        _dry_run: If True, report what would be deleted without deleting.
        _categories: Only findings in these categories are considered.
        _include_volumes: Whether Docker volumes may be pruned.
        _timeout_seconds: Hard limit for each docker call.
        _home: Home directory for path-safety checks.
    """

    def __init__(
        self,
        dry_run: bool = False,
        categories: Iterable[BloatCategory] | None = None,
        include_volumes: bool = False,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        home: Path | None = None,
    ) -> None:
        self._dry_run = dry_run
        self._categories = frozenset(categories) if categories is not None else None
        self._include_volumes = include_volumes
        self._timeout_seconds = timeout_seconds
        self._home = home

    def select(self, findings: Iterable[Finding]) -> list[Finding]:
        """Return the findings that pass the category filter."""
        if self._categories is None:
            return list(findings)
        return [f for f in findings if f.category in self._categories]

    def run(self, findings: Iterable[Finding]) -> CleanupResult:
        """Clean up every selected finding.

        Args:
            findings: Findings from a scan.

        Returns:
            CleanupResult with one line per item.
        """
        result = CleanupResult(dry_run=self._dry_run)

        for finding in self.select(findings):
            if finding.reclaimable_bytes == 0:
                result.skipped.append(f"{finding.name}: nothing reclaimable by deletion")
                continue

            location = finding.location
            path = location.fs_path
            if path is not None:
                outcome = self._delete_path(path, result)
            elif not location.is_addressable:
                outcome = self._prune_aggregate(finding, result)
            else:
                outcome = self._remove_docker_object(finding, result)

            if outcome is not None:
                result.deleted.append(outcome)
                result.bytes_freed, _ = saturating_add(
                    result.bytes_freed, finding.reclaimable_bytes
                )

        return result

    def _delete_path(self, path: Path, result: CleanupResult) -> str | None:
        try:
            validate_deletion_path(path, self._home)
        except UnsafePathError as e:
            logger.warning("Refusing to delete %s: %s", path, e)
            result.errors.append(str(e))
            return None

        if self._dry_run:
            return f"would delete {path}"

        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            logger.warning("Failed to delete %s: %s", path, e)
            result.errors.append(f"failed to delete {path}: {e}")
            return None

        logger.info("Deleted %s", path)
        return f"deleted {path}"

    def _prune_aggregate(self, finding: Finding, result: CleanupResult) -> str | None:
        docker_type = finding.location.value
        command = PRUNE_COMMANDS.get(docker_type)
        if command is None:
            result.skipped.append(f"{finding.name}: no prune command for {docker_type!r}")
            return None
        if docker_type == VOLUMES_TYPE and not self._include_volumes:
            result.skipped.append(
                f"{finding.name}: volumes may hold data, pass --include-volumes to prune them"
            )
            return None
        return self._run_docker(finding.name, command, result)

    def _remove_docker_object(self, finding: Finding, result: CleanupResult) -> str | None:
        object_id = finding.location.value
        return self._run_docker(object_id, ["docker", "rmi", object_id], result)

    def _run_docker(self, label: str, command: list[str], result: CleanupResult) -> str | None:
        printable = " ".join(command)
        if self._dry_run:
            return f"would delete {label} ({printable})"

        try:
            output = run_command(command, timeout=self._timeout_seconds)
        except FileNotFoundError:
            result.errors.append(f"{label}: docker not installed")
            return None
        except subprocess.TimeoutExpired:
            result.errors.append(f"{label}: {printable} timed out after {self._timeout_seconds}s")
            return None
        except OSError as e:
            result.errors.append(f"{label}: failed to run {printable}: {e}")
            return None

        if not output.success:
            stderr = output.stderr.strip() or f"exit code {output.returncode}"
            logger.warning("%s failed: %s", printable, stderr)
            result.errors.append(f"{label}: {printable} failed: {stderr}")
            return None

        logger.info("Ran %s", printable)
        return f"deleted {label} ({printable})"
