"""Project artifact detector.

Walks the configured roots looking for build output and dependency
directories (node_modules, target, .venv, ...). Each artifact is
reported once: nothing below an accepted artifact is examined, and
nested packages of an already-reported project are folded into it.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from heft.core.config import ScanConfig
from heft.detectors.base import Detector
from heft.detectors.classifier import ArtifactClassifier, ArtifactType, is_hidden
from heft.detectors.naming import determine_project_name
from heft.detectors.sizing import UNDERESTIMATE_SUFFIX, measure, traverse_warning
from heft.models.finding import DetectorOutcome, Finding, Location

logger = logging.getLogger(__name__)

# Depth limit for the last-modified scan (the project root is depth 0)
MTIME_MAX_DEPTH = 3

SOURCE_EXTENSIONS: frozenset[str] = frozenset(
    {".rs", ".js", ".ts", ".jsx", ".tsx", ".py", ".go", ".java", ".kt", ".swift"}
)

# Directories never descended into by the last-modified scan
MTIME_SKIP_DIRS: frozenset[str] = frozenset(
    {"node_modules", "target", ".venv", "venv", "vendor", "__pycache__", "build", "dist"}
)


def _is_within(path: Path, prefixes: list[Path]) -> bool:
    return any(path == prefix or path.is_relative_to(prefix) for prefix in prefixes)


def latest_source_mtime(project_root: Path, max_depth: int = MTIME_MAX_DEPTH) -> int | None:
    """Find the newest modification time of a source file in a project.

    Only ``max_depth`` directory levels are visited, and known artifact
    directories are pruned before descent.

    Args:
        project_root: Directory to scan.
        max_depth: Number of directory levels to visit.

    Returns:
        Unix timestamp in seconds, or None if no source file was found.
    """
    latest: float | None = None
    base_depth = len(project_root.parts)

    for dirpath, dirnames, filenames in os.walk(project_root, topdown=True, followlinks=False):
        depth = len(Path(dirpath).parts) - base_depth
        if depth >= max_depth - 1:
            dirnames[:] = []
        else:
            dirnames[:] = [d for d in dirnames if d not in MTIME_SKIP_DIRS]

        for filename in filenames:
            if os.path.splitext(filename)[1] not in SOURCE_EXTENSIONS:
                continue
            try:
                mtime = os.lstat(os.path.join(dirpath, filename)).st_mtime
            except OSError:
                continue
            if latest is None or mtime > latest:
                latest = mtime

    return int(latest) if latest is not None else None


@dataclass(slots=True)
class _WalkState:
    """Claims shared across all roots of one scan."""

    claimed_artifacts: list[Path] = field(default_factory=lambda: [])
    seen_projects: list[Path] = field(default_factory=lambda: [])


class ProjectScanner(Detector):
    """Detector for per-project build artifacts under the scan roots."""

    @property
    def name(self) -> str:
        return "projects"

    def available(self, config: ScanConfig) -> bool:
        return True

    def scan(self, config: ScanConfig) -> DetectorOutcome:
        """Walk every root and report each artifact directory once."""
        outcome = DetectorOutcome.empty()
        classifier = ArtifactClassifier(home=config.host.home)
        state = _WalkState()

        for root in config.roots:
            if not root.is_dir():
                logger.debug("Root %s does not exist", root)
                outcome.diagnostics.append(f"skipping {root}: directory does not exist")
                continue
            self._scan_root(root, classifier, state, outcome)

        return outcome

    def _scan_root(
        self,
        root: Path,
        classifier: ArtifactClassifier,
        state: _WalkState,
        outcome: DetectorOutcome,
    ) -> None:
        if self._visit(root, classifier, state, outcome):
            return

        def on_error(error: OSError) -> None:
            path = error.filename if error.filename is not None else str(root)
            logger.debug("Cannot read directory %s: %s", path, error)
            outcome.diagnostics.append(traverse_warning(str(path), error))

        for dirpath, dirnames, _ in os.walk(root, topdown=True, onerror=on_error):
            parent = Path(dirpath)
            descend: list[str] = []
            for dirname in sorted(dirnames):
                if is_hidden(dirname):
                    continue
                child = parent / dirname
                if child.is_symlink():
                    continue
                if self._visit(child, classifier, state, outcome):
                    continue
                descend.append(dirname)
            dirnames[:] = descend

    def _visit(
        self,
        path: Path,
        classifier: ArtifactClassifier,
        state: _WalkState,
        outcome: DetectorOutcome,
    ) -> bool:
        """Handle one directory.

        Returns:
            True if the walk must not descend into ``path``.
        """
        if _is_within(path, state.claimed_artifacts):
            return True

        artifact = classifier.classify(path)
        if artifact is None:
            return False

        project_root = path.parent
        if _is_within(project_root, state.seen_projects):
            logger.debug("Folding %s into an already reported project", path)
            state.claimed_artifacts.append(path)
            return True

        outcome.entries.append(self._build_finding(path, project_root, artifact, outcome))
        state.seen_projects.append(project_root)
        state.claimed_artifacts.append(path)
        return True

    def _build_finding(
        self,
        path: Path,
        project_root: Path,
        artifact: ArtifactType,
        outcome: DetectorOutcome,
    ) -> Finding:
        size, warnings = measure(path)
        for warning in warnings:
            logger.debug("%s: %s", path, warning)
            outcome.diagnostics.append(f"{warning}{UNDERESTIMATE_SUFFIX}")

        return Finding(
            category=artifact.category,
            name=determine_project_name(project_root, artifact.manifest_file),
            location=Location.path(path),
            size_bytes=size,
            reclaimable_bytes=size,
            last_modified=latest_source_mtime(project_root),
            cleanup_hint=artifact.cleanup_hint,
        )
