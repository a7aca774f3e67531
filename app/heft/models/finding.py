"""Finding models produced by detectors.

This module defines the core data structures for reclaimable items:
the closed set of bloat categories, where an item lives, and the
per-detector outcome that carries findings alongside diagnostics.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# Sizes are logical byte sums stored as unsigned 64-bit values
UINT64_MAX = 2**64 - 1


def saturating_add(total: int, amount: int) -> tuple[int, bool]:
    """Add two byte counts, clamping at UINT64_MAX.

    Args:
        total: Running total.
        amount: Non-negative amount to add.

    Returns:
        Tuple of (new_total, overflowed).
    """
    result = total + amount
    if result > UINT64_MAX:
        return UINT64_MAX, True
    return result, False


class BloatCategory(str, Enum):
    """Why a piece of disk space is in use.

    The value is the stable storage form; ``slug`` is the kebab-case
    form used on the command line.
    """

    PROJECT_ARTIFACTS = "ProjectArtifacts"
    CONTAINER_DATA = "ContainerData"
    PACKAGE_CACHE = "PackageCache"
    IDE_DATA = "IdeData"
    SYSTEM_CACHE = "SystemCache"
    OTHER = "Other"

    @property
    def slug(self) -> str:
        """Return the kebab-case CLI name (e.g. 'project-artifacts')."""
        return _SLUGS[self]

    @property
    def label(self) -> str:
        """Return a human-readable heading for reports."""
        return _LABELS[self]

    @classmethod
    def from_storage(cls, value: str) -> "BloatCategory":
        """Parse a stored category name, mapping unknown values to OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @classmethod
    def from_slug(cls, slug: str) -> "BloatCategory":
        """Parse a kebab-case CLI name.

        Raises:
            ValueError: If the slug does not name a category.
        """
        for category, candidate in _SLUGS.items():
            if candidate == slug.strip().lower():
                return category
        msg = f"Unknown category: {slug!r} (expected one of: {', '.join(_SLUGS.values())})"
        raise ValueError(msg)


_SLUGS: dict[BloatCategory, str] = {
    BloatCategory.PROJECT_ARTIFACTS: "project-artifacts",
    BloatCategory.CONTAINER_DATA: "container-data",
    BloatCategory.PACKAGE_CACHE: "package-cache",
    BloatCategory.IDE_DATA: "ide-data",
    BloatCategory.SYSTEM_CACHE: "system-cache",
    BloatCategory.OTHER: "other",
}

_LABELS: dict[BloatCategory, str] = {
    BloatCategory.PROJECT_ARTIFACTS: "Project artifacts",
    BloatCategory.CONTAINER_DATA: "Container data",
    BloatCategory.PACKAGE_CACHE: "Package caches",
    BloatCategory.IDE_DATA: "IDE data",
    BloatCategory.SYSTEM_CACHE: "System caches",
    BloatCategory.OTHER: "Other",
}


class LocationKind(str, Enum):
    """Kind of location a finding points at.

    Attributes:
        PATH: A concrete filesystem path.
        DOCKER: An opaque container-engine object handle (e.g. image ID).
        AGGREGATE: A class of objects with no single deletable path.
    """

    PATH = "path"
    DOCKER = "docker"
    AGGREGATE = "aggregate"


_DOCKER_PREFIX = "docker:"
_AGGREGATE_PREFIX = "aggregate:"


@dataclass(frozen=True, slots=True)
class Location:
    """Where a finding lives.

    Attributes:
        kind: Which variant this location is.
        value: Path string, object handle, or aggregate name.
    """

    kind: LocationKind
    value: str

    @classmethod
    def path(cls, path: Path | str) -> "Location":
        """Create a filesystem path location."""
        return cls(kind=LocationKind.PATH, value=str(path))

    @classmethod
    def docker(cls, object_id: str) -> "Location":
        """Create a container-engine object location."""
        return cls(kind=LocationKind.DOCKER, value=object_id)

    @classmethod
    def aggregate(cls, name: str) -> "Location":
        """Create an aggregate location."""
        return cls(kind=LocationKind.AGGREGATE, value=name)

    @property
    def is_addressable(self) -> bool:
        """Check if this location can be deleted as a single item."""
        return self.kind != LocationKind.AGGREGATE

    @property
    def fs_path(self) -> Path | None:
        """Return the filesystem path, or None for non-path locations."""
        if self.kind == LocationKind.PATH:
            return Path(self.value)
        return None

    def to_storage(self) -> str:
        """Serialize to the stable single-string form.

        Returns:
            Plain path, 'docker:<id>', or 'aggregate:<name>'.
        """
        if self.kind == LocationKind.DOCKER:
            return f"{_DOCKER_PREFIX}{self.value}"
        if self.kind == LocationKind.AGGREGATE:
            return f"{_AGGREGATE_PREFIX}{self.value}"
        return self.value

    @classmethod
    def from_storage(cls, value: str) -> "Location":
        """Parse the single-string form produced by to_storage()."""
        if value.startswith(_DOCKER_PREFIX):
            return cls.docker(value[len(_DOCKER_PREFIX) :])
        if value.startswith(_AGGREGATE_PREFIX):
            return cls.aggregate(value[len(_AGGREGATE_PREFIX) :])
        return cls.path(value)

    def __str__(self) -> str:
        return self.to_storage()


@dataclass(frozen=True, slots=True)
class Finding:
    """One reported reclaimable item.

    This is an immutable data structure. ``reclaimable_bytes`` never
    exceeds ``size_bytes``; they differ when space cannot be fully
    reclaimed (e.g. a VM disk image that does not shrink).

    Attributes:
        category: Why the space is used.
        name: Human-readable name (project name, cache name, ...).
        location: Where the item lives.
        size_bytes: Logical byte sum at scan time.
        reclaimable_bytes: Bytes that deleting the item would free.
        last_modified: Unix timestamp of the latest source change, if known.
        cleanup_hint: How to clean the item up, if known.
    """

    category: BloatCategory
    name: str
    location: Location
    size_bytes: int
    reclaimable_bytes: int
    last_modified: int | None = field(default=None)
    cleanup_hint: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate finding data after initialization."""
        if not self.name:
            msg = "Finding name cannot be empty"
            raise ValueError(msg)
        if not (0 <= self.size_bytes <= UINT64_MAX):
            msg = f"size_bytes out of range: {self.size_bytes}"
            raise ValueError(msg)
        if not (0 <= self.reclaimable_bytes <= self.size_bytes):
            msg = (
                f"reclaimable_bytes must be between 0 and size_bytes "
                f"({self.size_bytes}), got {self.reclaimable_bytes}"
            )
            raise ValueError(msg)

    @property
    def identity(self) -> tuple[BloatCategory, str]:
        """Key that matches the same logical item across snapshots."""
        return (self.category, self.name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "name": self.name,
            "location": self.location.to_storage(),
            "size_bytes": self.size_bytes,
            "reclaimable_bytes": self.reclaimable_bytes,
            "last_modified": self.last_modified,
            "cleanup_hint": self.cleanup_hint,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            category=BloatCategory.from_storage(data["category"]),
            name=data["name"],
            location=Location.from_storage(data["location"]),
            size_bytes=int(data["size_bytes"]),
            reclaimable_bytes=int(data["reclaimable_bytes"]),
            last_modified=data.get("last_modified"),
            cleanup_hint=data.get("cleanup_hint"),
        )


@dataclass(slots=True)
class DetectorOutcome:
    """Findings and non-fatal diagnostics from one detector run.

    Attributes:
        entries: Findings produced by the detector.
        diagnostics: Human-readable observations (permission denied,
            timeouts, ...). They never abort a scan.
    """

    entries: list[Finding] = field(default_factory=lambda: [])
    diagnostics: list[str] = field(default_factory=lambda: [])

    @classmethod
    def empty(cls) -> "DetectorOutcome":
        """Create an outcome with no entries and no diagnostics."""
        return cls()

    @classmethod
    def with_diagnostic(cls, message: str) -> "DetectorOutcome":
        """Create an outcome holding a single diagnostic."""
        return cls(entries=[], diagnostics=[message])
