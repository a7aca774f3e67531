"""Snapshot comparison.

Matches the findings of two scans by their (category, name) identity,
not by path: artifact directories get deleted and recreated between
scans, but the same project's node_modules keeps its identity.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from heft.models.finding import BloatCategory, Finding


class DiffKind(str, Enum):
    """How an item changed between two snapshots.

    Attributes:
        GREW: Present in both, larger now.
        SHRANK: Present in both, smaller now.
        NEW: Only present in the newer snapshot.
        GONE: Only present in the older snapshot.
    """

    GREW = "grew"
    SHRANK = "shrank"
    NEW = "new"
    GONE = "gone"


@dataclass(frozen=True, slots=True)
class DiffEntry:
    """A single changed item.

    Attributes:
        name: Finding name.
        category: Finding category.
        old_size: Size in the older snapshot (0 if NEW).
        new_size: Size in the newer snapshot (0 if GONE).
        delta: Signed change in bytes.
        kind: Kind of change.
    """

    name: str
    category: BloatCategory
    old_size: int
    new_size: int
    delta: int
    kind: DiffKind

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "category": self.category.value,
            "old_size": self.old_size,
            "new_size": self.new_size,
            "delta": self.delta,
            "kind": self.kind.value,
        }


@dataclass(frozen=True, slots=True)
class DiffReport:
    """Result of comparing two snapshots.

    Attributes:
        entries: Changed items, ordered by category then name.
        net_change: Sum of all deltas.
        from_id: Older snapshot id, if compared from storage.
        to_id: Newer snapshot id, if compared from storage.
        from_timestamp: Older snapshot time (Unix seconds).
        to_timestamp: Newer snapshot time (Unix seconds).
    """

    entries: tuple[DiffEntry, ...] = field(default_factory=tuple)
    net_change: int = 0
    from_id: int | None = None
    to_id: int | None = None
    from_timestamp: int | None = None
    to_timestamp: int | None = None

    @property
    def has_changes(self) -> bool:
        """Check if any item changed."""
        return bool(self.entries)

    def by_kind(self, kind: DiffKind) -> list[DiffEntry]:
        """Return the entries of one kind."""
        return [entry for entry in self.entries if entry.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "from_id": self.from_id,
            "to_id": self.to_id,
            "from_timestamp": self.from_timestamp,
            "to_timestamp": self.to_timestamp,
            "net_change": self.net_change,
            "entries": [entry.to_dict() for entry in self.entries],
        }


def _index(findings: Iterable[Finding]) -> dict[tuple[BloatCategory, str], Finding]:
    # A repeated identity keeps the last finding seen
    return {finding.identity: finding for finding in findings}


def compare(
    from_entries: Iterable[Finding],
    to_entries: Iterable[Finding],
    *,
    from_id: int | None = None,
    to_id: int | None = None,
    from_timestamp: int | None = None,
    to_timestamp: int | None = None,
) -> DiffReport:
    """Compare two sets of findings.

    Unchanged items are omitted. Python integers do not overflow, so
    deltas near the 64-bit limit stay exact.

    Args:
        from_entries: Findings of the older scan.
        to_entries: Findings of the newer scan.
        from_id: Older snapshot id to carry into the report.
        to_id: Newer snapshot id to carry into the report.
        from_timestamp: Older snapshot timestamp to carry into the report.
        to_timestamp: Newer snapshot timestamp to carry into the report.

    Returns:
        DiffReport with one entry per changed identity.
    """
    old = _index(from_entries)
    new = _index(to_entries)

    entries: list[DiffEntry] = []
    for key, current in new.items():
        previous = old.get(key)
        if previous is None:
            entries.append(
                DiffEntry(
                    name=current.name,
                    category=current.category,
                    old_size=0,
                    new_size=current.size_bytes,
                    delta=current.size_bytes,
                    kind=DiffKind.NEW,
                )
            )
            continue

        delta = current.size_bytes - previous.size_bytes
        if delta == 0:
            continue
        entries.append(
            DiffEntry(
                name=current.name,
                category=current.category,
                old_size=previous.size_bytes,
                new_size=current.size_bytes,
                delta=delta,
                kind=DiffKind.GREW if delta > 0 else DiffKind.SHRANK,
            )
        )

    for key, previous in old.items():
        if key in new:
            continue
        entries.append(
            DiffEntry(
                name=previous.name,
                category=previous.category,
                old_size=previous.size_bytes,
                new_size=0,
                delta=-previous.size_bytes,
                kind=DiffKind.GONE,
            )
        )

    entries.sort(key=lambda e: (e.category.value, e.name))
    return DiffReport(
        entries=tuple(entries),
        net_change=sum(entry.delta for entry in entries),
        from_id=from_id,
        to_id=to_id,
        from_timestamp=from_timestamp,
        to_timestamp=to_timestamp,
    )
