"""Xcode DerivedData detector (macOS only)."""

import logging

from heft.core.config import ScanConfig
from heft.core.platform import Platform
from heft.detectors.base import Detector
from heft.detectors.classifier import XCODE_DERIVED_DATA
from heft.detectors.sizing import UNDERESTIMATE_SUFFIX, measure
from heft.models.finding import BloatCategory, DetectorOutcome, Finding, Location

logger = logging.getLogger(__name__)

CLEANUP_HINT = (
    "safe to delete, Xcode rebuilds on next build. "
    "or: Xcode → Settings → Locations → Derived Data → arrow button"
)


class XcodeDetector(Detector):
    """Detector for the shared Xcode DerivedData directory."""

    @property
    def name(self) -> str:
        return "xcode"

    def available(self, config: ScanConfig) -> bool:
        return config.host.os == Platform.MACOS

    def scan(self, config: ScanConfig) -> DetectorOutcome:
        home = config.host.home
        if home is None:
            return DetectorOutcome.with_diagnostic("xcode: could not determine home directory")

        derived_data = home / XCODE_DERIVED_DATA
        if not derived_data.is_dir():
            return DetectorOutcome.empty()

        size, warnings = measure(derived_data)
        if size == 0:
            return DetectorOutcome.empty()

        outcome = DetectorOutcome.empty()
        outcome.diagnostics.extend(f"{w}{UNDERESTIMATE_SUFFIX}" for w in warnings)
        if config.verbose:
            outcome.diagnostics.append(f"xcode: DerivedData at {derived_data}")

        logger.debug("DerivedData: %d bytes", size)
        outcome.entries.append(
            Finding(
                category=BloatCategory.IDE_DATA,
                name="Xcode DerivedData",
                location=Location.path(derived_data),
                size_bytes=size,
                reclaimable_bytes=size,
                cleanup_hint=CLEANUP_HINT,
            )
        )
        return outcome
