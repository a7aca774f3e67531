"""Unit tests for build artifact classification.

Covers every row of the decision table, including the generic names
(target, build, bin, obj, vendor) that must not match without evidence.
"""

from pathlib import Path

import pytest
from heft.detectors.classifier import (
    XCODE_DERIVED_DATA,
    ArtifactClassifier,
    is_hidden,
    is_inside_installed_packages,
)
from heft.models.finding import BloatCategory


def _mkdir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


@pytest.fixture
def classifier(home: Path) -> ArtifactClassifier:
    return ArtifactClassifier(home=home)


class TestNodeAndRust:
    """node_modules and target/."""

    def test_node_modules_always_matches(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """node_modules needs no sibling evidence."""
        result = classifier.classify(_mkdir(tmp_path / "web" / "node_modules"))
        assert result is not None
        assert result.category == BloatCategory.PROJECT_ARTIFACTS
        assert result.manifest_file == "package.json"
        assert "npm install" in result.cleanup_hint

    def test_target_without_cargo_rejected(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """A bare target/ directory is not a Rust artifact."""
        assert classifier.classify(_mkdir(tmp_path / "maven" / "target")) is None

    def test_target_with_cargo_matches(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """target/ next to Cargo.toml is a Rust artifact."""
        _touch(tmp_path / "crate" / "Cargo.toml")
        result = classifier.classify(_mkdir(tmp_path / "crate" / "target"))
        assert result is not None
        assert result.manifest_file == "Cargo.toml"


class TestPython:
    """Python caches and virtual environments."""

    @pytest.mark.parametrize("name", ["__pycache__", ".pytest_cache", ".mypy_cache", ".tox"])
    def test_caches_match(self, tmp_path: Path, classifier: ArtifactClassifier, name: str) -> None:
        """Python cache directories in a project match without a manifest."""
        result = classifier.classify(_mkdir(tmp_path / "proj" / name))
        assert result is not None
        assert result.manifest_file is None

    def test_cache_inside_site_packages_rejected(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """Caches of installed packages belong to the environment, not a project."""
        path = _mkdir(tmp_path / "lib" / "site-packages" / "requests" / "__pycache__")
        assert classifier.classify(path) is None

    def test_venv_requires_project_marker(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """A .venv only matches next to a Python project file."""
        assert classifier.classify(_mkdir(tmp_path / "loose" / ".venv")) is None

        _touch(tmp_path / "api" / "pyproject.toml")
        result = classifier.classify(_mkdir(tmp_path / "api" / ".venv"))
        assert result is not None
        assert "venv" in result.cleanup_hint

    def test_plain_venv_with_requirements(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """venv/ next to requirements.txt matches."""
        _touch(tmp_path / "svc" / "requirements.txt")
        assert classifier.classify(_mkdir(tmp_path / "svc" / "venv")) is not None


class TestVendor:
    """vendor/ for Go and PHP."""

    def test_go_vendor(self, tmp_path: Path, classifier: ArtifactClassifier) -> None:
        """vendor/ next to go.mod matches."""
        _touch(tmp_path / "svc" / "go.mod")
        result = classifier.classify(_mkdir(tmp_path / "svc" / "vendor"))
        assert result is not None
        assert result.manifest_file == "go.mod"

    def test_composer_vendor(self, tmp_path: Path, classifier: ArtifactClassifier) -> None:
        """vendor/ next to composer.json matches."""
        _touch(tmp_path / "site" / "composer.json")
        result = classifier.classify(_mkdir(tmp_path / "site" / "vendor"))
        assert result is not None
        assert result.manifest_file == "composer.json"

    def test_vendor_without_manifest_rejected(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """A bare vendor/ directory is left alone."""
        assert classifier.classify(_mkdir(tmp_path / "misc" / "vendor")) is None


class TestGradle:
    """.gradle and build/."""

    def test_build_without_gradle_rejected(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """A generic build/ directory is never reported."""
        build = _mkdir(tmp_path / "docs" / "build")
        _mkdir(build / "classes")
        assert classifier.classify(build) is None

    def test_build_without_gradle_outputs_rejected(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """build/ next to build.gradle still needs Gradle output folders."""
        _touch(tmp_path / "android" / "build.gradle")
        build = _mkdir(tmp_path / "android" / "build")
        _touch(build / "notes.txt")
        assert classifier.classify(build) is None

    def test_build_with_gradle_evidence_matches(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """build/ with build.gradle and an output folder matches."""
        _touch(tmp_path / "android" / "build.gradle")
        build = _mkdir(tmp_path / "android" / "build")
        _mkdir(build / "intermediates")
        result = classifier.classify(build)
        assert result is not None
        assert "gradle" in result.cleanup_hint

    def test_dot_gradle_with_kotlin_script(
        self, tmp_path: Path, classifier: ArtifactClassifier
    ) -> None:
        """.gradle next to build.gradle.kts matches without output folders."""
        _touch(tmp_path / "kt" / "build.gradle.kts")
        assert classifier.classify(_mkdir(tmp_path / "kt" / ".gradle")) is not None


class TestDotnet:
    """bin/ and obj/."""

    @pytest.mark.parametrize("name", ["bin", "obj"])
    def test_without_project_file_rejected(
        self, tmp_path: Path, classifier: ArtifactClassifier, name: str
    ) -> None:
        """A shell-script bin/ or a 3D-model obj/ is not an artifact."""
        _touch(tmp_path / "tools" / name / "deploy.sh")
        assert classifier.classify(tmp_path / "tools" / name) is None

    @pytest.mark.parametrize("name", ["bin", "obj"])
    def test_with_project_file_matches(
        self, tmp_path: Path, classifier: ArtifactClassifier, name: str
    ) -> None:
        """bin/ and obj/ next to a .csproj match."""
        _touch(tmp_path / "App" / "App.csproj")
        result = classifier.classify(_mkdir(tmp_path / "App" / name))
        assert result is not None
        assert result.manifest_file == "App.csproj"
        assert "dotnet build" in result.cleanup_hint


class TestDerivedData:
    """Xcode DerivedData."""

    def test_canonical_location(self, home: Path, classifier: ArtifactClassifier) -> None:
        """The shared DerivedData under the home directory matches."""
        result = classifier.classify(_mkdir(home / XCODE_DERIVED_DATA))
        assert result is not None
        assert result.category == BloatCategory.IDE_DATA

    def test_next_to_xcode_project(self, home: Path, classifier: ArtifactClassifier) -> None:
        """DerivedData near an .xcodeproj matches."""
        _mkdir(home / "code" / "ios" / "App.xcodeproj")
        result = classifier.classify(_mkdir(home / "code" / "ios" / "DerivedData"))
        assert result is not None

    def test_with_marker_folders(self, home: Path, classifier: ArtifactClassifier) -> None:
        """DerivedData holding Xcode's own subfolders matches."""
        derived = _mkdir(home / "ci" / "DerivedData")
        _mkdir(derived / "ModuleCache.noindex")
        assert classifier.classify(derived) is not None

    def test_bare_derived_data_rejected(self, home: Path, classifier: ArtifactClassifier) -> None:
        """A DerivedData directory with no Xcode evidence is left alone."""
        derived = _mkdir(home / "notes" / "DerivedData")
        _touch(derived / "table.csv")
        assert classifier.classify(derived) is None


class TestHelpers:
    """Tests for module helpers."""

    def test_unknown_name(self, tmp_path: Path, classifier: ArtifactClassifier) -> None:
        """Unrelated directory names never match."""
        assert classifier.classify(_mkdir(tmp_path / "src")) is None

    def test_is_hidden(self) -> None:
        """Dot-directories are hidden unless they are known artifacts."""
        assert is_hidden(".git") is True
        assert is_hidden(".venv") is False
        assert is_hidden(".gradle") is False
        assert is_hidden("node_modules") is False

    def test_is_inside_installed_packages(self) -> None:
        """Any installed-package ancestor counts."""
        assert is_inside_installed_packages(Path("/x/.venv/lib/pkg/__pycache__")) is True
        assert is_inside_installed_packages(Path("/x/proj/__pycache__")) is False
