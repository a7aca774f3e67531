"""Shared helpers for CLI commands.

Builds the effective scan configuration from command-line options and
the config file, and opens the snapshot store, for the commands that
need them (scan, clean, report, diff).
"""

from pathlib import Path

import typer

from heft.core.config import (
    ScanConfig,
    ScanOptions,
    load_file_config_or_default,
    merge_scan_config,
)
from heft.core.platform import HostPlatform
from heft.core.store import SnapshotStore, StoreError
from heft.utils.formatting import print_error


def split_csv(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated option value, dropping empty items."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def global_flag(ctx: typer.Context, name: str) -> bool:
    """Read a global option (--verbose, --quiet) stored by the root callback."""
    if isinstance(ctx.obj, dict):
        return bool(ctx.obj.get(name, False))
    return False


def build_scan_config(
    *,
    roots: str | None = None,
    timeout: int | None = None,
    json_output: bool = False,
    no_json: bool = False,
    verbose: bool = False,
    no_verbose: bool = False,
    progressive: bool = False,
    no_progressive: bool = False,
    no_docker: bool = False,
    disable: str | None = None,
    host: HostPlatform | None = None,
) -> ScanConfig:
    """Merge command-line options with the config file.

    Args:
        roots: Comma-separated root directories.
        timeout: Per-detector timeout in seconds.
        json_output: --json was given.
        no_json: --no-json was given.
        verbose: --verbose was given.
        no_verbose: --no-verbose was given.
        progressive: --progressive was given.
        no_progressive: --no-progressive was given.
        no_docker: --no-docker was given.
        disable: Comma-separated detector names to disable.
        host: Platform capability. Detected when None.

    Returns:
        The effective ScanConfig.
    """
    root_paths = split_csv(roots)
    options = ScanOptions(
        roots=tuple(Path(p) for p in root_paths) if root_paths else None,
        timeout=timeout,
        json_output=json_output,
        no_json=no_json,
        verbose=verbose,
        no_verbose=no_verbose,
        progressive=progressive,
        no_progressive=no_progressive,
        no_docker=no_docker,
        disable=split_csv(disable),
    )
    return merge_scan_config(
        options,
        load_file_config_or_default(),
        host or HostPlatform.detect(),
    )


def open_store() -> SnapshotStore:
    """Open the snapshot store, exiting with an error if that fails."""
    try:
        return SnapshotStore()
    except (StoreError, RuntimeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
