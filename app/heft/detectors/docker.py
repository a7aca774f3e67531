"""Docker storage detector.

Reports images, containers, volumes and build cache from
``docker system df``, plus the Docker Desktop VM disk image on macOS and
Windows.
"""

import logging
import re
import subprocess

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from heft.core.config import ScanConfig
from heft.core.platform import Platform
from heft.detectors.base import Detector
from heft.models.finding import BloatCategory, DetectorOutcome, Finding, Location
from heft.utils.shell import run_command

logger = logging.getLogger(__name__)

# Display names for the `docker system df` types
TYPE_NAMES: dict[str, str] = {
    "Images": "docker images",
    "Containers": "docker containers",
    "Local Volumes": "docker volumes",
    "Build Cache": "docker build cache",
}

TYPE_HINTS: dict[str, str] = {
    "Images": "docker image prune -a",
    "Containers": "docker container prune",
    "Local Volumes": "docker volume prune",
    "Build Cache": "docker builder prune",
}

DEFAULT_HINT = "docker system prune"

VM_DISK_NAME = "Docker Desktop VM disk"

_VM_DISKS: dict[Platform, tuple[str, str]] = {
    Platform.MACOS: (
        "Library/Containers/com.docker.docker/Data/vms/0/data/Docker.raw",
        "Docker Desktop VM disk (does not auto-compact). Shrink it: Docker Desktop → "
        "Settings → Resources → Advanced → Disk image size → 'Clean/Purge data', "
        "then restart Docker Desktop.",
    ),
    Platform.WINDOWS: (
        "AppData/Local/Docker/wsl/data/ext4.vhdx",
        "Docker Desktop VM disk (does not auto-compact). Shrink it: run 'wsl --shutdown' "
        "then 'Optimize-VHD -Path <path> -Mode Full' in an elevated PowerShell.",
    ),
}

# Regex for size strings like "8.056GB", "248.1MB (3%)", "1.5KiB"
_SIZE_PATTERN = re.compile(r"^([\d.]+)\s*([A-Za-z]*)$")

_SIZE_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "kB": 1_000,
    "KB": 1_000,
    "MB": 1_000_000,
    "GB": 1_000_000_000,
    "TB": 1_000_000_000_000,
    "KiB": 1_024,
    "MiB": 1_024**2,
    "GiB": 1_024**3,
    "TiB": 1_024**4,
}


class DockerProbeError(Exception):
    """Raised when `docker system df` cannot be run or understood.

    The message is the diagnostic shown to the user.
    """


class DockerDfRow(BaseModel):
    """One JSON line of `docker system df --format json`."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(alias="Type")
    size: str = Field(alias="Size")
    reclaimable: str = Field(alias="Reclaimable")


def parse_docker_size(size_str: str) -> int:
    """Parse a docker size string to bytes.

    Args:
        size_str: Size like "8.056GB", "248.1MB (3%)" or "0B".

    Returns:
        Size in bytes.

    Raises:
        DockerProbeError: If the number or unit is not recognised.
    """
    size_part = size_str.split("(", 1)[0].strip()
    if size_part in ("", "0B"):
        return 0

    match = _SIZE_PATTERN.match(size_part)
    if not match:
        msg = f"docker: invalid size format: {size_str}"
        raise DockerProbeError(msg)

    try:
        value = float(match.group(1))
    except ValueError as e:
        msg = f"docker: invalid number in size: {size_str}"
        raise DockerProbeError(msg) from e

    unit = match.group(2) or "B"
    multiplier = _SIZE_MULTIPLIERS.get(unit)
    if multiplier is None:
        msg = f"docker: unknown size unit: {unit}"
        raise DockerProbeError(msg)

    return round(value * multiplier)


def _classify_failure(stderr: str) -> str:
    if "Cannot connect to the Docker daemon" in stderr or "Is the docker daemon running" in stderr:
        return "docker: daemon not running (start Docker Desktop or dockerd)"
    if "permission denied" in stderr or "EACCES" in stderr:
        return "docker: permission denied (add user to docker group or run with sudo)"
    return f"docker: command failed: {stderr.strip()}"


def system_df(timeout_seconds: int, *, strict: bool = False) -> list[Finding]:
    """Run `docker system df` and turn each non-empty type into a finding.

    Args:
        timeout_seconds: Hard limit for the docker call.
        strict: Abort on malformed JSON lines instead of skipping them.

    Returns:
        One aggregate finding per non-empty storage type.

    Raises:
        DockerProbeError: With a user-facing message on any failure.
    """
    try:
        result = run_command(
            ["docker", "system", "df", "--format", "json"],
            timeout=timeout_seconds,
        )
    except FileNotFoundError as e:
        raise DockerProbeError("docker: not installed") from e
    except subprocess.TimeoutExpired as e:
        msg = f"docker: timed out after {timeout_seconds} seconds (is Docker Desktop starting?)"
        raise DockerProbeError(msg) from e
    except OSError as e:
        msg = f"docker: failed to run command: {e}"
        raise DockerProbeError(msg) from e

    if not result.success:
        raise DockerProbeError(_classify_failure(result.stderr))

    findings: list[Finding] = []
    for line in result.stdout.splitlines():
        if not line.strip():
            continue

        try:
            row = DockerDfRow.model_validate_json(line)
        except ValidationError as e:
            if strict:
                msg = f"docker: failed to parse output: {e}"
                raise DockerProbeError(msg) from e
            logger.debug("Skipping malformed docker line: %s", line)
            continue

        size = parse_docker_size(row.size)
        reclaimable = parse_docker_size(row.reclaimable)
        if size == 0:
            continue

        findings.append(
            Finding(
                category=BloatCategory.CONTAINER_DATA,
                name=TYPE_NAMES.get(row.type, row.type),
                location=Location.aggregate(row.type),
                size_bytes=size,
                # Rounded figures can put reclaimable a hair above size
                reclaimable_bytes=min(reclaimable, size),
                cleanup_hint=TYPE_HINTS.get(row.type, DEFAULT_HINT),
            )
        )

    return findings


def desktop_vm_disk(config: ScanConfig, outcome: DetectorOutcome) -> Finding | None:
    """Report the Docker Desktop VM disk image, if there is one.

    Space freed inside the VM is not returned to the host, so the disk is
    reported with nothing reclaimable.
    """
    vm_disk = _VM_DISKS.get(config.host.os)
    home = config.host.home
    if vm_disk is None or home is None:
        return None

    relative, hint = vm_disk
    path = home / relative
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        if config.verbose:
            outcome.diagnostics.append(f"docker: VM disk not found at {path}")
        return None
    except OSError as e:
        if config.verbose:
            outcome.diagnostics.append(f"docker: failed to get VM disk metadata: {e}")
        return None

    if size == 0:
        return None

    return Finding(
        category=BloatCategory.CONTAINER_DATA,
        name=VM_DISK_NAME,
        location=Location.path(path),
        size_bytes=size,
        reclaimable_bytes=0,
        cleanup_hint=hint,
    )


class DockerDetector(Detector):
    """Detector for Docker images, containers, volumes and build cache."""

    @property
    def name(self) -> str:
        return "docker"

    def available(self, config: ScanConfig) -> bool:
        """Check if the docker CLI is on PATH."""
        return config.host.has_tool("docker")

    def scan(self, config: ScanConfig) -> DetectorOutcome:
        outcome = DetectorOutcome.empty()

        try:
            outcome.entries.extend(system_df(config.timeout_seconds, strict=config.verbose))
        except DockerProbeError as e:
            logger.debug("%s", e)
            outcome.diagnostics.append(str(e))

        vm_entry = desktop_vm_disk(config, outcome)
        if vm_entry is not None:
            outcome.entries.append(vm_entry)

        return outcome
