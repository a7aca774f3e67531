"""Stored snapshot metadata."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Metadata of a persisted scan report.

    Attributes:
        id: Auto-incrementing snapshot identifier.
        timestamp: Unix timestamp (seconds) when the snapshot was saved.
        total_bytes: Sum of entry sizes at save time.
        reclaimable_bytes: Sum of reclaimable sizes at save time.
        scan_duration_ms: Wall time of the scan that produced it.
        peak_memory_bytes: Peak resident memory of that scan, if sampled.
    """

    id: int
    timestamp: int
    total_bytes: int
    reclaimable_bytes: int
    scan_duration_ms: int
    peak_memory_bytes: int | None = None

    @property
    def saved_at(self) -> datetime:
        """Return the save time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "saved_at": self.saved_at.isoformat(),
            "total_bytes": self.total_bytes,
            "reclaimable_bytes": self.reclaimable_bytes,
            "scan_duration_ms": self.scan_duration_ms,
            "peak_memory_bytes": self.peak_memory_bytes,
        }
