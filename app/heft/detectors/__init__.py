"""Bloat detectors.

This module exports the detector classes run by the scan orchestrator.
"""

from heft.detectors.base import Detector
from heft.detectors.caches import CacheDetector
from heft.detectors.docker import DockerDetector
from heft.detectors.projects import ProjectScanner
from heft.detectors.xcode import XcodeDetector

__all__ = ["CacheDetector", "Detector", "DockerDetector", "ProjectScanner", "XcodeDetector"]
