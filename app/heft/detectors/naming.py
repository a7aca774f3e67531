"""Project name extraction from manifest files.

Parse failures are never reported: a broken manifest simply yields no
name and the caller falls back to the directory name.
"""

import json
import logging
import tomllib
from pathlib import Path

logger = logging.getLogger(__name__)

# Manifests larger than this are treated as absent
MAX_MANIFEST_BYTES = 1024 * 1024

_DOTNET_SUFFIXES = (".csproj", ".fsproj", ".vbproj")


def _read_manifest(path: Path) -> str | None:
    try:
        if path.stat().st_size > MAX_MANIFEST_BYTES:
            logger.debug("Skipping oversized manifest %s", path)
            return None
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _name_from_json(content: str) -> str | None:
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return None
    if isinstance(data, dict):
        name = data.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def _name_from_cargo(content: str) -> str | None:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        return None
    package = data.get("package")
    if isinstance(package, dict):
        name = package.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def _name_from_go_mod(content: str) -> str | None:
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("module "):
            module = stripped[len("module ") :].strip().strip('"')
            return module or None
    return None


def read_manifest_name(manifest: Path) -> str | None:
    """Read a human-readable project name from a manifest file.

    Args:
        manifest: Path to package.json, composer.json, Cargo.toml, go.mod
            or a .NET project file.

    Returns:
        The project name, or None if the file is missing, oversized,
        malformed or carries no name.
    """
    file_name = manifest.name
    if file_name.endswith(_DOTNET_SUFFIXES):
        return manifest.stem if manifest.is_file() else None

    content = _read_manifest(manifest)
    if content is None:
        return None

    if file_name in ("package.json", "composer.json"):
        return _name_from_json(content)
    if file_name == "Cargo.toml":
        return _name_from_cargo(content)
    if file_name == "go.mod":
        return _name_from_go_mod(content)
    return None


def determine_project_name(project_root: Path, manifest_file: str | None) -> str:
    """Choose the display name for a project.

    Args:
        project_root: Directory containing the artifact.
        manifest_file: Manifest to read the name from, if the artifact
            type has one.

    Returns:
        The manifest name, else the project root's basename, else "unknown".
    """
    if manifest_file is not None:
        name = read_manifest_name(project_root / manifest_file)
        if name:
            return name
    return project_root.name or "unknown"
