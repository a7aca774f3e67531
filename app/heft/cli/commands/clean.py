"""Clean command implementation.

Re-scans, shows what would be removed, and deletes it after
confirmation.
"""

from typing import Annotated

import typer

from heft.cleanup.executor import CleanupError, CleanupExecutor, parse_categories
from heft.cli.display import print_cleanup_plan, print_cleanup_result, print_progress
from heft.cli.types import build_scan_config, global_flag
from heft.core import orchestrator
from heft.utils.formatting import print_error, print_info

app = typer.Typer(
    help="Delete reclaimable items.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def clean(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    category: Annotated[
        str | None,
        typer.Option(
            "--category",
            "-c",
            help=(
                "Comma-separated categories to clean: project-artifacts, container-data, "
                "package-cache, ide-data, system-cache, other."
            ),
        ),
    ] = None,
    include_volumes: Annotated[
        bool,
        typer.Option("--include-volumes", help="Also prune Docker volumes (may hold data)."),
    ] = False,
    roots: Annotated[
        str | None,
        typer.Option("--roots", "-r", help="Comma-separated directories to search for projects."),
    ] = None,
    no_docker: Annotated[
        bool,
        typer.Option("--no-docker", help="Skip the docker detector."),
    ] = False,
    disable: Annotated[
        str | None,
        typer.Option("--disable", help="Comma-separated detectors to skip."),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", min=1, help="Timeout for external tools in seconds."),
    ] = None,
) -> None:
    """Delete build artifacts, caches and container data.

    Examples:
        heft clean --dry-run                          # Show the plan only
        heft clean --category project-artifacts       # Only project artifacts
        heft clean --yes --category package-cache     # No confirmation
    """
    if ctx.invoked_subcommand is not None:
        return

    if dry_run and yes:
        print_error("--dry-run and --yes cannot be combined.")
        raise typer.Exit(code=1)

    try:
        categories = parse_categories(category)
    except CleanupError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    config = build_scan_config(
        roots=roots,
        timeout=timeout,
        no_docker=no_docker,
        disable=disable,
        verbose=global_flag(ctx, "verbose"),
    )
    report = orchestrator.run(
        config,
        on_progress=print_progress if config.progressive else None,
    )

    executor = CleanupExecutor(
        dry_run=dry_run,
        categories=categories,
        include_volumes=include_volumes,
        timeout_seconds=config.timeout_seconds,
        home=config.host.home,
    )
    selected = executor.select(report.entries)
    if not selected:
        print_info("Nothing to clean.")
        return

    print_cleanup_plan(selected, dry_run)

    if not dry_run and not yes:
        confirmed = typer.confirm(
            f"\nProceed with deleting {len(selected)} item(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    result = executor.run(selected)
    print_cleanup_result(result)

    if not result.success:
        raise typer.Exit(code=1)
