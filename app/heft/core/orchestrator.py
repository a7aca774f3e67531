"""Scan orchestration.

Runs the detectors one after another in a fixed order, timing each one
and sampling resident memory around it, and merges their outcomes into
a single ScanReport. No detector failure ever aborts the scan.
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import psutil

from heft.core.config import ScanConfig
from heft.detectors.base import Detector
from heft.detectors.caches import CacheDetector
from heft.detectors.docker import DockerDetector
from heft.detectors.projects import ProjectScanner
from heft.detectors.xcode import XcodeDetector
from heft.models.finding import DetectorOutcome, Finding, saturating_add
from heft.models.report import DetectorMetric, ScanReport

logger = logging.getLogger(__name__)


class ProgressStage(Enum):
    """Stage of a detector run reported to the progress callback."""

    STARTED = "started"
    SKIPPED = "skipped"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """A detector lifecycle event.

    Attributes:
        detector: Detector name.
        stage: What happened.
        item_count: Findings produced (COMPLETED only).
        total_bytes: Sum of their sizes (COMPLETED only).
        elapsed_seconds: Wall time of the scan call (COMPLETED only).
    """

    detector: str
    stage: ProgressStage
    item_count: int = 0
    total_bytes: int = 0
    elapsed_seconds: float = 0.0


ProgressCallback = Callable[[ProgressEvent], None]


def default_detectors() -> list[Detector]:
    """Return the detectors in run order."""
    return [ProjectScanner(), CacheDetector(), DockerDetector(), XcodeDetector()]


def sample_rss() -> int | None:
    """Sample this process's resident memory in bytes.

    Returns:
        RSS in bytes, or None if the host does not support sampling.
    """
    try:
        return int(psutil.Process().memory_info().rss)
    except (psutil.Error, OSError):
        return None


def _outcome_bytes(outcome: DetectorOutcome) -> int:
    total = 0
    for entry in outcome.entries:
        total, _ = saturating_add(total, entry.size_bytes)
    return total


def _is_within(path: Path, other: Path) -> bool:
    return path == other or other in path.parents


def drop_overlapping(entries: Sequence[Finding]) -> list[Finding]:
    """Drop path findings already counted by another finding.

    Detectors overlap: the project walk can reach DerivedData or a
    `vendor` directory inside the Go module cache, which the Xcode and
    cache detectors also report. A finding whose path equals or lies under
    another reported path is dropped; for equal paths the first one wins.

    Args:
        entries: Findings in detector order.

    Returns:
        The findings with overlaps removed, order preserved.
    """
    paths = [entry.location.fs_path for entry in entries]
    kept: list[Finding] = []
    for index, (entry, path) in enumerate(zip(entries, paths, strict=True)):
        if path is None:
            kept.append(entry)
            continue
        covering = next(
            (
                other
                for other_index, other in enumerate(paths)
                if other is not None
                and other_index != index
                and _is_within(path, other)
                and (other != path or other_index < index)
            ),
            None,
        )
        if covering is not None:
            logger.debug("Dropping %s: already counted under %s", path, covering)
            continue
        kept.append(entry)
    return kept


def _run_detector(detector: Detector, config: ScanConfig) -> DetectorOutcome:
    try:
        return detector.scan(config)
    except Exception as e:
        logger.exception("Detector %s failed", detector.name)
        return DetectorOutcome.with_diagnostic(f"{detector.name}: failed: {e}")


def run(
    config: ScanConfig,
    detectors: Sequence[Detector] | None = None,
    on_progress: ProgressCallback | None = None,
) -> ScanReport:
    """Run every enabled, available detector and merge the results.

    Args:
        config: Immutable scan configuration.
        detectors: Detectors to run, in order. Defaults to default_detectors().
        on_progress: Optional callback for detector lifecycle events.

    Returns:
        The merged ScanReport.
    """
    if detectors is None:
        detectors = default_detectors()

    def notify(event: ProgressEvent) -> None:
        if on_progress is not None:
            on_progress(event)

    started = time.perf_counter()
    entries: list[Finding] = []
    diagnostics: list[str] = []
    timings: list[DetectorMetric] = []
    memory: list[DetectorMetric] = []
    peak_memory: int | None = None

    for detector in detectors:
        name = detector.name
        if not config.is_detector_enabled(name):
            logger.debug("Detector %s disabled", name)
            diagnostics.append(f"{name}: skipped (disabled)")
            notify(ProgressEvent(detector=name, stage=ProgressStage.SKIPPED))
            continue
        try:
            is_available = detector.available(config)
        except Exception as e:
            logger.exception("Detector %s availability check failed", name)
            diagnostics.append(f"{name}: failed: {e}")
            notify(ProgressEvent(detector=name, stage=ProgressStage.SKIPPED))
            continue
        if not is_available:
            logger.debug("Detector %s not available", name)
            diagnostics.append(f"{name}: skipped (not available on this platform)")
            notify(ProgressEvent(detector=name, stage=ProgressStage.SKIPPED))
            continue

        notify(ProgressEvent(detector=name, stage=ProgressStage.STARTED))

        before = sample_rss()
        detector_started = time.perf_counter()
        outcome = _run_detector(detector, config)
        elapsed = time.perf_counter() - detector_started
        after = sample_rss()

        timings.append(DetectorMetric(detector=name, value=int(elapsed * 1000)))
        if before is not None and after is not None:
            memory.append(DetectorMetric(detector=name, value=max(0, after - before)))
        for sample in (before, after):
            if sample is not None and (peak_memory is None or sample > peak_memory):
                peak_memory = sample

        logger.debug(
            "Detector %s: %d entries, %d diagnostics in %.2fs",
            name,
            len(outcome.entries),
            len(outcome.diagnostics),
            elapsed,
        )
        notify(
            ProgressEvent(
                detector=name,
                stage=ProgressStage.COMPLETED,
                item_count=len(outcome.entries),
                total_bytes=_outcome_bytes(outcome),
                elapsed_seconds=elapsed,
            )
        )

        entries.extend(outcome.entries)
        diagnostics.extend(outcome.diagnostics)

    return ScanReport(
        entries=tuple(drop_overlapping(entries)),
        diagnostics=tuple(diagnostics),
        duration_ms=int((time.perf_counter() - started) * 1000),
        peak_memory_bytes=peak_memory,
        detector_timings=tuple(timings),
        detector_memory=tuple(memory),
    )
