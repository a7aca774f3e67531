"""Scan command implementation.

Runs every detector, renders the report and saves it as a snapshot.
"""

from typing import Annotated

import typer

from heft.cli.display import print_json, print_progress, print_report
from heft.cli.types import build_scan_config, global_flag
from heft.core import orchestrator
from heft.core.store import SnapshotStore, StoreError
from heft.utils.formatting import print_info, print_warning

app = typer.Typer(
    help="Scan for reclaimable disk space.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan(
    ctx: typer.Context,
    roots: Annotated[
        str | None,
        typer.Option(
            "--roots",
            "-r",
            help="Comma-separated directories to search for projects (default: home).",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
    no_json: Annotated[
        bool,
        typer.Option("--no-json", help="Force table output even if the config enables JSON."),
    ] = False,
    no_docker: Annotated[
        bool,
        typer.Option("--no-docker", help="Skip the docker detector."),
    ] = False,
    disable: Annotated[
        str | None,
        typer.Option(
            "--disable",
            help="Comma-separated detectors to skip: projects, caches, docker, xcode.",
        ),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", min=1, help="Timeout for external tools in seconds."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show diagnostics and detector timings."),
    ] = False,
    no_verbose: Annotated[
        bool,
        typer.Option("--no-verbose", help="Hide diagnostics even if the config enables them."),
    ] = False,
    progressive: Annotated[
        bool,
        typer.Option("--progressive", help="Report each detector as it runs."),
    ] = False,
    no_progressive: Annotated[
        bool,
        typer.Option("--no-progressive", help="Disable progressive output."),
    ] = False,
    no_save: Annotated[
        bool,
        typer.Option("--no-save", help="Do not store this scan as a snapshot."),
    ] = False,
) -> None:
    """Scan for build artifacts, caches, container data and IDE data.

    Examples:
        heft scan                          # Scan home, show table
        heft scan --roots ~/code,~/work    # Only look for projects here
        heft scan --json                   # Output as JSON
        heft scan --disable docker,xcode   # Skip detectors
        heft scan -v --progressive         # Show diagnostics and progress
    """
    if ctx.invoked_subcommand is not None:
        return

    config = build_scan_config(
        roots=roots,
        timeout=timeout,
        json_output=json_output,
        no_json=no_json,
        verbose=verbose or global_flag(ctx, "verbose"),
        no_verbose=no_verbose,
        progressive=progressive,
        no_progressive=no_progressive,
        no_docker=no_docker,
        disable=disable,
    )

    report = orchestrator.run(
        config,
        on_progress=print_progress if config.progressive else None,
    )

    snapshot_id: int | None = None
    if not no_save:
        try:
            with SnapshotStore() as store:
                snapshot_id = store.save_snapshot(report)
        except (StoreError, RuntimeError) as e:
            print_warning(f"Could not save snapshot: {e}")

    if config.json_output:
        print_json(report.to_dict())
        return

    print_report(report, verbose=config.verbose)
    if snapshot_id is not None and not global_flag(ctx, "quiet"):
        print_info(f"Saved as snapshot #{snapshot_id}.")
