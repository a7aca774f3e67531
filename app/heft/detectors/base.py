"""Abstract base class for bloat detectors.

This module defines the Detector interface that every detector
(projects, caches, docker, xcode) must implement.
"""

from abc import ABC, abstractmethod

from heft.core.config import ScanConfig
from heft.models.finding import DetectorOutcome


class Detector(ABC):
    """Abstract base class for all detectors.

    A detector looks for one class of bloat and reports findings plus
    diagnostics. It only reads the configuration it is given and must
    never raise: every problem becomes a diagnostic string.

    Example:
        >>> detector = CacheDetector()
        >>> if detector.available(config):
        ...     outcome = detector.scan(config)
        ...     for entry in outcome.entries:
        ...         print(f"{entry.name}: {entry.size_bytes}")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the stable detector name (used for --disable and timings)."""

    @abstractmethod
    def available(self, config: ScanConfig) -> bool:
        """Check if this detector can run on the configured host.

        Returns:
            True if the detector should run, False to skip it.
        """

    @abstractmethod
    def scan(self, config: ScanConfig) -> DetectorOutcome:
        """Scan for bloat.

        Returns:
            DetectorOutcome with findings and diagnostics.
        """
