"""Data models for heft.

This module exports the core data structures used throughout the application.
"""

from heft.models.finding import (
    UINT64_MAX,
    BloatCategory,
    DetectorOutcome,
    Finding,
    Location,
    LocationKind,
    saturating_add,
)
from heft.models.report import DetectorMetric, ScanReport
from heft.models.snapshot import Snapshot

__all__ = [
    "UINT64_MAX",
    "BloatCategory",
    "DetectorMetric",
    "DetectorOutcome",
    "Finding",
    "Location",
    "LocationKind",
    "ScanReport",
    "Snapshot",
    "saturating_add",
]
