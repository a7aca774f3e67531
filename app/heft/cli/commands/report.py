"""Report command implementation.

Lists stored snapshots or re-renders one of them.
"""

from typing import Annotated

import typer

from heft.cli.display import create_snapshot_table, print_json, print_report
from heft.cli.types import global_flag, open_store
from heft.core.store import SnapshotNotFoundError, StoreError
from heft.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Show stored scan snapshots.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def report(
    ctx: typer.Context,
    list_snapshots: Annotated[
        bool,
        typer.Option("--list", "-l", help="List all stored snapshots."),
    ] = False,
    snapshot_id: Annotated[
        int | None,
        typer.Option("--id", help="Snapshot to show (default: latest)."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show a stored snapshot, or list them all.

    Examples:
        heft report              # Show the latest snapshot
        heft report --list       # List snapshots
        heft report --id 3       # Show snapshot 3
        heft report --json       # Output as JSON
    """
    if ctx.invoked_subcommand is not None:
        return

    with open_store() as store:
        try:
            if list_snapshots:
                snapshots = store.list_snapshots()
                if json_output:
                    print_json([s.to_dict() for s in snapshots])
                elif not snapshots:
                    print_info("No snapshots stored yet. Run 'heft scan' first.")
                else:
                    console.print(create_snapshot_table(snapshots))
                return

            if snapshot_id is None:
                latest = store.get_latest_snapshot()
                if latest is None:
                    print_info("No snapshots stored yet. Run 'heft scan' first.")
                    return
                snapshot_id = latest.id

            snapshot = store.get_snapshot(snapshot_id)
            stored = store.load_report(snapshot_id)
        except SnapshotNotFoundError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        except StoreError as e:
            print_error(f"Failed to read snapshots: {e}")
            raise typer.Exit(code=1) from e

    if json_output:
        print_json({"snapshot": snapshot.to_dict(), **stored.to_dict()})
        return

    print_info(f"Snapshot #{snapshot.id}")
    print_report(stored, verbose=global_flag(ctx, "verbose"))
