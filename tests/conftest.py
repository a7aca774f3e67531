"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from heft.core.config import ScanConfig
from heft.core.platform import HostPlatform, Platform
from heft.models.finding import BloatCategory, Finding, Location


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point heft's config and data directories at the test's temp dir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_config(home: Path) -> Callable[..., ScanConfig]:
    """Factory for ScanConfig values bound to the fake home."""

    def _make(
        *roots: Path,
        os: Platform = Platform.LINUX,
        host_home: Path | None = home,
        verbose: bool = False,
        disabled: frozenset[str] = frozenset(),
        timeout_seconds: int = 30,
    ) -> ScanConfig:
        return ScanConfig(
            roots=tuple(roots),
            host=HostPlatform(os=os, home=host_home),
            timeout_seconds=timeout_seconds,
            disabled_detectors=disabled,
            verbose=verbose,
        )

    return _make


@pytest.fixture
def make_finding() -> Callable[..., Finding]:
    """Factory for findings with sensible defaults."""

    def _make(
        name: str,
        size: int,
        category: BloatCategory = BloatCategory.PROJECT_ARTIFACTS,
        location: Location | None = None,
        reclaimable: int | None = None,
    ) -> Finding:
        return Finding(
            category=category,
            name=name,
            location=location or Location.path(f"/work/{name}/node_modules"),
            size_bytes=size,
            reclaimable_bytes=size if reclaimable is None else reclaimable,
        )

    return _make


@pytest.fixture
def write_file() -> Callable[[Path, int], Path]:
    """Create a file of exactly ``size`` bytes, creating parents."""

    def _write(path: Path, size: int) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return path

    return _write
