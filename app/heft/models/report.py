"""Scan report model.

This module defines the aggregate produced by one orchestration run,
handed unchanged to rendering, persistence and diffing.
"""

from dataclasses import dataclass, field
from typing import Any

from heft.models.finding import BloatCategory, Finding, saturating_add


@dataclass(frozen=True, slots=True)
class DetectorMetric:
    """A single per-detector measurement.

    Attributes:
        detector: Detector name.
        value: Duration in milliseconds or memory growth in bytes.
    """

    detector: str
    value: int


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Complete result of one scan.

    Attributes:
        entries: Findings from every detector, in detector order.
        diagnostics: Diagnostics from every detector and the orchestrator.
        duration_ms: Total wall time of the orchestration.
        peak_memory_bytes: Highest resident memory sampled, if sampling works.
        detector_timings: Per-detector wall time in milliseconds.
        detector_memory: Per-detector resident memory growth in bytes.
    """

    entries: tuple[Finding, ...] = field(default_factory=tuple)
    diagnostics: tuple[str, ...] = field(default_factory=tuple)
    duration_ms: int | None = None
    peak_memory_bytes: int | None = None
    detector_timings: tuple[DetectorMetric, ...] = field(default_factory=tuple)
    detector_memory: tuple[DetectorMetric, ...] = field(default_factory=tuple)

    @property
    def total_bytes(self) -> int:
        """Saturating sum of all entry sizes."""
        total = 0
        for entry in self.entries:
            total, _ = saturating_add(total, entry.size_bytes)
        return total

    @property
    def reclaimable_bytes(self) -> int:
        """Saturating sum of all reclaimable sizes."""
        total = 0
        for entry in self.entries:
            total, _ = saturating_add(total, entry.reclaimable_bytes)
        return total

    def by_category(self) -> dict[BloatCategory, list[Finding]]:
        """Group entries by category, preserving entry order within a group."""
        groups: dict[BloatCategory, list[Finding]] = {}
        for entry in self.entries:
            groups.setdefault(entry.category, []).append(entry)
        return groups

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "entries": [entry.to_dict() for entry in self.entries],
            "diagnostics": list(self.diagnostics),
            "summary": {
                "count": len(self.entries),
                "total_bytes": self.total_bytes,
                "reclaimable_bytes": self.reclaimable_bytes,
            },
        }
        if self.duration_ms is not None:
            result["duration_ms"] = self.duration_ms
        if self.peak_memory_bytes is not None:
            result["peak_memory_bytes"] = self.peak_memory_bytes
        if self.detector_timings:
            result["detector_timings"] = [[m.detector, m.value] for m in self.detector_timings]
        if self.detector_memory:
            result["detector_memory"] = [[m.detector, m.value] for m in self.detector_memory]
        return result
