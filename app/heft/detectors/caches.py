"""Package-manager and toolchain cache detector.

Probes well-known cache locations under the home directory. Which path
a tool uses depends on the OS family, so locations are resolved from the
host platform carried in the scan configuration.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from heft.core.config import ScanConfig
from heft.core.platform import Platform
from heft.detectors.base import Detector
from heft.detectors.sizing import UNDERESTIMATE_SUFFIX, measure
from heft.models.finding import BloatCategory, DetectorOutcome, Finding, Location
from heft.utils.shell import run_command

logger = logging.getLogger(__name__)

BREW_TIMEOUT_SECONDS = 5


@dataclass(frozen=True, slots=True)
class CacheLocation:
    """A cache directory to probe.

    Attributes:
        name: Display name of the cache.
        path: Where the cache lives.
        category: Category of the finding.
        cleanup_hint: Command that clears the cache.
    """

    name: str
    path: Path
    category: BloatCategory
    cleanup_hint: str


def _per_platform(home: Path, platform: Platform, macos: str, other: str) -> Path:
    return home / (macos if platform == Platform.MACOS else other)


def cache_locations(home: Path, platform: Platform) -> list[CacheLocation]:
    """List the known cache locations for a platform.

    Homebrew is not included; its path comes from ``brew --cache``.

    Args:
        home: Home directory.
        platform: OS family. UNKNOWN uses the Unix-like paths.

    Returns:
        Cache locations in reporting order.
    """
    package = BloatCategory.PACKAGE_CACHE
    cargo_hint = "cargo cache --autoclean (requires cargo-cache)"
    return [
        CacheLocation("npm cache", home / ".npm", package, "npm cache clean --force"),
        CacheLocation(
            "yarn cache",
            _per_platform(home, platform, "Library/Caches/Yarn", ".cache/yarn"),
            package,
            "yarn cache clean",
        ),
        CacheLocation(
            "pnpm store", home / ".local/share/pnpm/store", package, "pnpm store prune"
        ),
        CacheLocation(
            "pip cache",
            _per_platform(home, platform, "Library/Caches/pip", ".cache/pip"),
            package,
            "pip cache purge",
        ),
        CacheLocation("cargo registry", home / ".cargo/registry", package, cargo_hint),
        CacheLocation("cargo git", home / ".cargo/git", package, cargo_hint),
        CacheLocation("go module cache", home / "go/pkg/mod", package, "go clean -modcache"),
        CacheLocation(
            "vscode data",
            _per_platform(home, platform, "Library/Application Support/Code", ".config/Code"),
            BloatCategory.IDE_DATA,
            "clear from within vscode or delete unused extensions",
        ),
        CacheLocation(
            "gradle cache", home / ".gradle/caches", package, "rm -rf ~/.gradle/caches"
        ),
        CacheLocation(
            "maven cache",
            home / ".m2/repository",
            package,
            "mvn dependency:purge-local-repository",
        ),
    ]


def homebrew_cache() -> Path | None:
    """Ask Homebrew where its download cache lives.

    Returns:
        The cache path, or None when brew is not installed.

    Raises:
        RuntimeError: If brew fails, times out, or reports an unusable path.
    """
    try:
        result = run_command(["brew", "--cache"], timeout=BREW_TIMEOUT_SECONDS)
    except FileNotFoundError:
        return None
    except subprocess.TimeoutExpired as e:
        msg = f"brew --cache timed out after {BREW_TIMEOUT_SECONDS} seconds"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"failed to run brew: {e}"
        raise RuntimeError(msg) from e

    if not result.success:
        msg = f"brew --cache failed with status {result.returncode}: {result.stderr.strip()}"
        raise RuntimeError(msg)

    output = result.stdout.strip()
    if not output:
        msg = "brew returned empty output"
        raise RuntimeError(msg)

    path = Path(output)
    if not path.exists():
        msg = f"brew returned path {path} but it doesn't exist"
        raise RuntimeError(msg)
    return path


class CacheDetector(Detector):
    """Detector for package-manager, toolchain and editor caches."""

    @property
    def name(self) -> str:
        return "caches"

    def available(self, config: ScanConfig) -> bool:
        return True

    def scan(self, config: ScanConfig) -> DetectorOutcome:
        """Measure every existing, non-empty cache location."""
        outcome = DetectorOutcome.empty()
        platform = config.host.os

        if platform == Platform.UNKNOWN:
            outcome.diagnostics.append(
                "unknown platform detected, falling back to Unix-like cache paths"
            )

        home = config.host.home
        if home is None:
            return DetectorOutcome.with_diagnostic("could not determine home directory")

        locations = cache_locations(home, platform)
        try:
            brew_cache = homebrew_cache()
        except RuntimeError as e:
            logger.debug("Homebrew cache detection failed: %s", e)
            outcome.diagnostics.append(f"homebrew cache detection failed: {e}")
        else:
            if brew_cache is not None:
                locations.append(
                    CacheLocation(
                        "homebrew cache", brew_cache, BloatCategory.PACKAGE_CACHE, "brew cleanup"
                    )
                )

        for location in locations:
            if not location.path.exists():
                continue

            size, warnings = measure(location.path)
            if size == 0:
                continue

            logger.debug("%s: %d bytes at %s", location.name, size, location.path)
            outcome.entries.append(
                Finding(
                    category=location.category,
                    name=location.name,
                    location=Location.path(location.path),
                    size_bytes=size,
                    reclaimable_bytes=size,
                    cleanup_hint=location.cleanup_hint,
                )
            )
            outcome.diagnostics.extend(f"{w}{UNDERESTIMATE_SUFFIX}" for w in warnings)

        return outcome
