"""Scan configuration.

Two layers feed a scan: an optional TOML file (``~/.config/heft/config.toml``)
validated with Pydantic, and command-line options. ``merge_scan_config``
combines them into the immutable ``ScanConfig`` that every detector reads.

Precedence for every setting is CLI, then file, then built-in default.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from heft.core.paths import get_config_path
from heft.core.platform import HostPlatform

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30

# Names of the detectors the orchestrator knows about, in run order
DETECTOR_NAMES: tuple[str, ...] = ("projects", "caches", "docker", "xcode")


class ConfigError(Exception):
    """Base exception for config file errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file is not valid TOML."""


class ConfigValidationError(ConfigError):
    """Raised when the config file content does not match the schema."""


class FileScanConfig(BaseModel):
    """The ``[scan]`` table of the config file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    roots: list[Path] | None = None
    timeout: Annotated[
        int | None,
        Field(ge=1, le=3600, description="Per-detector timeout in seconds"),
    ] = None
    json_output: Annotated[bool | None, Field(alias="json")] = None
    verbose: bool | None = None
    progressive: bool | None = None


class FileDetectorsConfig(BaseModel):
    """The ``[detectors]`` table of the config file.

    A detector set to ``false`` is disabled; ``true`` or absent leaves it on.
    """

    model_config = ConfigDict(extra="forbid")

    projects: bool | None = None
    caches: bool | None = None
    docker: bool | None = None
    xcode: bool | None = None

    def disabled(self) -> set[str]:
        """Return the names of detectors explicitly set to false."""
        return {name for name in DETECTOR_NAMES if getattr(self, name) is False}


class FileConfig(BaseModel):
    """Validated content of config.toml."""

    model_config = ConfigDict(extra="forbid")

    scan: FileScanConfig = Field(default_factory=FileScanConfig)
    detectors: FileDetectorsConfig = Field(default_factory=FileDetectorsConfig)


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Command-line overrides for a scan.

    ``None`` means "not given on the command line". The paired
    ``no_*`` flags force a boolean off even when the file turns it on.
    """

    roots: tuple[Path, ...] | None = None
    timeout: int | None = None
    json_output: bool = False
    no_json: bool = False
    verbose: bool = False
    no_verbose: bool = False
    progressive: bool = False
    no_progressive: bool = False
    no_docker: bool = False
    disable: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Immutable configuration read by the orchestrator and every detector.

    Attributes:
        roots: Ordered directories for the project scan.
        timeout_seconds: Per-call timeout for external tools.
        disabled_detectors: Names of detectors that must not run.
        json_output: Render as JSON instead of a table.
        verbose: Include detailed diagnostics.
        progressive: Report each detector as it starts and completes.
        host: Platform capability (OS family, home directory, tool lookup).
    """

    roots: tuple[Path, ...]
    host: HostPlatform
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    disabled_detectors: frozenset[str] = field(default_factory=frozenset)
    json_output: bool = False
    verbose: bool = False
    progressive: bool = False

    def is_detector_enabled(self, name: str) -> bool:
        """Check if a detector has not been disabled."""
        return name not in self.disabled_detectors


def _pick_flag(force_on: bool, force_off: bool, file_value: bool | None) -> bool:
    if force_off:
        return False
    if force_on:
        return True
    return bool(file_value)


def _expand(path: Path) -> Path:
    return Path(os.path.expanduser(path))


def merge_scan_config(
    options: ScanOptions,
    file_config: FileConfig,
    host: HostPlatform,
) -> ScanConfig:
    """Combine CLI options and file config into a ScanConfig.

    Args:
        options: Values given on the command line.
        file_config: Validated file config (defaults if no file exists).
        host: Platform capability to embed.

    Returns:
        The effective ScanConfig.
    """
    if options.roots is not None:
        roots = tuple(_expand(p) for p in options.roots)
    elif file_config.scan.roots is not None:
        roots = tuple(_expand(p) for p in file_config.scan.roots)
    elif host.home is not None:
        roots = (host.home,)
    else:
        roots = ()

    timeout = options.timeout or file_config.scan.timeout or DEFAULT_TIMEOUT_SECONDS

    disabled = file_config.detectors.disabled()
    if options.no_docker:
        disabled.add("docker")
    disabled.update(name.strip() for name in options.disable if name.strip())

    return ScanConfig(
        roots=roots,
        host=host,
        timeout_seconds=timeout,
        disabled_detectors=frozenset(disabled),
        json_output=_pick_flag(options.json_output, options.no_json, file_config.scan.json_output),
        verbose=_pick_flag(options.verbose, options.no_verbose, file_config.scan.verbose),
        progressive=_pick_flag(
            options.progressive, options.no_progressive, file_config.scan.progressive
        ),
    )


def load_file_config(path: Path | None = None) -> FileConfig:
    """Load and validate the config file.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated FileConfig; defaults when the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return FileConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return FileConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content in {config_path}: {e}") from e


def load_file_config_or_default(path: Path | None = None) -> FileConfig:
    """Load the config file, falling back to defaults on any error.

    A broken config file must not prevent a scan; the problem is logged
    as a warning instead, which the CLI log handler shows on stderr.
    """
    try:
        return load_file_config(path)
    except ConfigError as e:
        logger.warning("Ignoring config file: %s", e)
        return FileConfig()


def save_file_config(config: FileConfig, path: Path | None = None) -> Path:
    """Save a config file atomically.

    Args:
        config: The FileConfig to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def default_file_config() -> FileConfig:
    """Config written by ``heft config init``: every setting spelled out."""
    return FileConfig(
        scan=FileScanConfig(
            timeout=DEFAULT_TIMEOUT_SECONDS,
            json=False,
            verbose=False,
            progressive=False,
        ),
        detectors=FileDetectorsConfig(projects=True, caches=True, docker=True, xcode=True),
    )


def config_to_dict(config: FileConfig) -> dict[str, object]:
    """Convert FileConfig to a TOML-ready dictionary, omitting unset values."""
    scan = config.scan.model_dump(by_alias=True, exclude_none=True)
    if "roots" in scan:
        scan["roots"] = [str(p) for p in scan["roots"]]
    detectors = config.detectors.model_dump(exclude_none=True)
    return {"scan": scan, "detectors": detectors}
