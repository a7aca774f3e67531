"""Build artifact classification.

Decides whether a directory is a known build or cache artifact from its
name and the files around it. Generic names (``target``, ``build``,
``bin``, ``obj``, ``vendor``) only match with corroborating manifest or
structural evidence; a shell-script ``bin/`` or a 3D-model ``obj/`` must
never be reported, because findings feed straight into deletion.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from heft.models.finding import BloatCategory

# Hidden directories that are artifacts themselves and must not be pruned
ALLOWED_DOT_DIRS: frozenset[str] = frozenset(
    {".venv", ".pytest_cache", ".mypy_cache", ".tox", ".gradle"}
)

# Directory names whose contents are never project sources
ARTIFACT_DIR_NAMES: frozenset[str] = frozenset(
    {
        "node_modules",
        "target",
        ".venv",
        "venv",
        "vendor",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
        ".gradle",
        "build",
        "dist",
        "bin",
        "obj",
        "DerivedData",
    }
)

PYTHON_CACHE_DIRS: frozenset[str] = frozenset(
    {"__pycache__", ".pytest_cache", ".mypy_cache", ".tox"}
)

# Ancestors that hold installed third-party code rather than a project
INSTALLED_PACKAGE_DIRS: frozenset[str] = frozenset(
    {"site-packages", "dist-packages", "node_modules", ".venv", "venv"}
)

PYTHON_PROJECT_MARKERS: tuple[str, ...] = (
    "requirements.txt",
    "setup.py",
    "pyproject.toml",
    "setup.cfg",
)

GRADLE_BUILD_FILES: tuple[str, ...] = ("build.gradle", "build.gradle.kts")

# A Gradle build/ output contains at least one of these
GRADLE_OUTPUT_DIRS: frozenset[str] = frozenset(
    {"classes", "libs", "tmp", "generated", "intermediates"}
)

DOTNET_PROJECT_SUFFIXES: tuple[str, ...] = (".csproj", ".fsproj", ".vbproj")

XCODE_PROJECT_SUFFIXES: tuple[str, ...] = (".xcodeproj", ".xcworkspace")

# Subfolders Xcode creates inside a DerivedData directory
XCODE_DERIVED_MARKERS: frozenset[str] = frozenset(
    {"ModuleCache.noindex", "Index.noindex", "SDKStatCaches.noindex", "SourcePackages"}
)

XCODE_DERIVED_DATA = Path("Library/Developer/Xcode/DerivedData")

DEFAULT_IDE_ANCESTOR_DEPTH = 3


@dataclass(frozen=True, slots=True)
class ArtifactType:
    """How a matched artifact is reported.

    Attributes:
        category: Category of the finding.
        cleanup_hint: How to clean it up and get it back.
        manifest_file: Sibling manifest to read the project name from.
    """

    category: BloatCategory
    cleanup_hint: str
    manifest_file: str | None = None


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


def _list_names(directory: Path) -> list[str]:
    try:
        with os.scandir(directory) as it:
            return sorted(entry.name for entry in it)
    except OSError:
        return []


def is_hidden(name: str) -> bool:
    """Check if a directory name should be pruned as hidden.

    Dot-directories in ALLOWED_DOT_DIRS are not hidden for this purpose.
    """
    return name.startswith(".") and name not in ALLOWED_DOT_DIRS


def is_inside_installed_packages(path: Path) -> bool:
    """Check if any ancestor of ``path`` is an installed-package directory."""
    return any(ancestor.name in INSTALLED_PACKAGE_DIRS for ancestor in path.parents)


def has_python_project(directory: Path) -> bool:
    """Check if ``directory`` holds a Python project marker file."""
    return any(_exists(directory / marker) for marker in PYTHON_PROJECT_MARKERS)


def has_gradle_build(directory: Path) -> bool:
    """Check if ``directory`` holds a Gradle build script."""
    return any(_exists(directory / name) for name in GRADLE_BUILD_FILES)


def find_dotnet_project(directory: Path) -> str | None:
    """Return the first .NET project file name in ``directory``, if any."""
    for name in _list_names(directory):
        if name.endswith(DOTNET_PROJECT_SUFFIXES):
            return name
    return None


class ArtifactClassifier:
    """Classifies candidate directories as build or cache artifacts.

    The decision depends only on the directory's name, its siblings, its
    immediate children and a bounded set of ancestors. Nothing is
    measured or recorded here.

    Args:
        home: Home directory; bounds the ancestor walk and locates the
            canonical Xcode DerivedData path. None disables both.
        ide_ancestor_depth: How many ancestors to search for an Xcode
            project or workspace when classifying ``DerivedData``.
    """

    def __init__(
        self,
        home: Path | None = None,
        *,
        ide_ancestor_depth: int = DEFAULT_IDE_ANCESTOR_DEPTH,
    ) -> None:
        self._home = home
        self._ide_ancestor_depth = ide_ancestor_depth

    def classify(self, path: Path) -> ArtifactType | None:
        """Classify a directory.

        Args:
            path: Candidate directory.

        Returns:
            ArtifactType if the directory is a known artifact, else None.
        """
        name = path.name
        parent = path.parent
        if not name or parent == path:
            return None

        if name == "node_modules":
            return ArtifactType(
                category=BloatCategory.PROJECT_ARTIFACTS,
                cleanup_hint="safe to delete, reinstall with npm install",
                manifest_file="package.json",
            )

        if name == "target":
            if _exists(parent / "Cargo.toml"):
                return ArtifactType(
                    category=BloatCategory.PROJECT_ARTIFACTS,
                    cleanup_hint="safe to delete, rebuild with cargo build",
                    manifest_file="Cargo.toml",
                )
            return None

        if name in PYTHON_CACHE_DIRS:
            if is_inside_installed_packages(path):
                return None
            return ArtifactType(
                category=BloatCategory.PROJECT_ARTIFACTS,
                cleanup_hint="safe to delete, regenerated automatically",
            )

        if name in (".venv", "venv"):
            if has_python_project(parent):
                return ArtifactType(
                    category=BloatCategory.PROJECT_ARTIFACTS,
                    cleanup_hint="virtual environment, recreate with python -m venv",
                )
            return None

        if name == "vendor":
            return self._classify_vendor(parent)

        if name in (".gradle", "build"):
            return self._classify_gradle(path, parent)

        if name == "DerivedData":
            return self._classify_derived_data(path)

        if name in ("bin", "obj"):
            manifest = find_dotnet_project(parent)
            if manifest is not None:
                return ArtifactType(
                    category=BloatCategory.PROJECT_ARTIFACTS,
                    cleanup_hint="safe to delete, rebuild with dotnet build",
                    manifest_file=manifest,
                )
            return None

        return None

    def _classify_vendor(self, parent: Path) -> ArtifactType | None:
        if _exists(parent / "go.mod"):
            return ArtifactType(
                category=BloatCategory.PROJECT_ARTIFACTS,
                cleanup_hint="safe to delete, restore with go mod vendor",
                manifest_file="go.mod",
            )
        if _exists(parent / "composer.json"):
            return ArtifactType(
                category=BloatCategory.PROJECT_ARTIFACTS,
                cleanup_hint="safe to delete, restore with composer install",
                manifest_file="composer.json",
            )
        return None

    def _classify_gradle(self, path: Path, parent: Path) -> ArtifactType | None:
        if not has_gradle_build(parent):
            return None
        if path.name == "build" and not GRADLE_OUTPUT_DIRS.intersection(_list_names(path)):
            return None
        return ArtifactType(
            category=BloatCategory.PROJECT_ARTIFACTS,
            cleanup_hint="safe to delete, rebuild with gradle build",
        )

    def _classify_derived_data(self, path: Path) -> ArtifactType | None:
        if (
            self._is_canonical_derived_data(path)
            or self._ancestor_has_xcode_project(path)
            or XCODE_DERIVED_MARKERS.intersection(_list_names(path))
        ):
            return ArtifactType(
                category=BloatCategory.IDE_DATA,
                cleanup_hint="xcode build artifacts, safe to delete",
            )
        return None

    def _is_canonical_derived_data(self, path: Path) -> bool:
        if self._home is None:
            return False
        canonical = self._home / XCODE_DERIVED_DATA
        return path == canonical or canonical in path.parents

    def _ancestor_has_xcode_project(self, path: Path) -> bool:
        for depth, ancestor in enumerate(path.parents):
            if depth >= self._ide_ancestor_depth:
                break
            if self._home is not None and ancestor == self._home.parent:
                break
            if any(name.endswith(XCODE_PROJECT_SUFFIXES) for name in _list_names(ancestor)):
                return True
        return False
