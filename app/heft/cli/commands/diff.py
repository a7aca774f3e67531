"""Diff command implementation.

Compares two stored snapshots and shows what grew, shrank, appeared or
disappeared.
"""

from typing import Annotated

import typer

from heft.cli.display import print_diff, print_json
from heft.cli.types import open_store
from heft.core.diff import DiffReport, compare
from heft.core.store import SnapshotNotFoundError, SnapshotStore, StoreError
from heft.utils.formatting import print_error

app = typer.Typer(
    help="Compare two snapshots.",
    invoke_without_command=True,
)


def _resolve_ids(
    store: SnapshotStore,
    from_id: int | None,
    to_id: int | None,
) -> tuple[int, int]:
    """Fill in missing snapshot ids.

    ``to`` defaults to the latest snapshot and ``from`` to the one saved
    just before ``to``.

    Raises:
        typer.Exit: If fewer than two snapshots are available.
    """
    if from_id is not None and to_id is not None:
        return from_id, to_id

    # Newest first
    snapshots = store.list_snapshots()
    if len(snapshots) < 2:
        print_error(
            f"Need at least two snapshots to compare, found {len(snapshots)}. "
            "Run 'heft scan' again later."
        )
        raise typer.Exit(code=1)

    if to_id is None:
        to_id = snapshots[0].id
    if from_id is None:
        ids = [s.id for s in snapshots]
        if to_id not in ids:
            raise SnapshotNotFoundError(to_id)
        position = ids.index(to_id)
        if position + 1 >= len(ids):
            print_error(f"Snapshot {to_id} is the oldest; there is nothing to compare it with.")
            raise typer.Exit(code=1)
        from_id = ids[position + 1]
    return from_id, to_id


def build_diff(store: SnapshotStore, from_id: int, to_id: int) -> DiffReport:
    """Load two snapshots and compare their findings."""
    older = store.get_snapshot(from_id)
    newer = store.get_snapshot(to_id)
    return compare(
        store.load_snapshot_entries(from_id),
        store.load_snapshot_entries(to_id),
        from_id=older.id,
        to_id=newer.id,
        from_timestamp=older.timestamp,
        to_timestamp=newer.timestamp,
    )


@app.callback(invoke_without_command=True)
def diff(
    ctx: typer.Context,
    from_id: Annotated[
        int | None,
        typer.Option("--from", help="Older snapshot id (default: the one before --to)."),
    ] = None,
    to_id: Annotated[
        int | None,
        typer.Option("--to", help="Newer snapshot id (default: latest)."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show how disk usage changed between two snapshots.

    Items are matched by category and name, so a project whose build
    directory was deleted and rebuilt is still recognised.

    Examples:
        heft diff                    # Latest vs. the one before
        heft diff --from 1 --to 4    # Two specific snapshots
        heft diff --json             # Output as JSON
    """
    if ctx.invoked_subcommand is not None:
        return

    with open_store() as store:
        try:
            resolved_from, resolved_to = _resolve_ids(store, from_id, to_id)
            result = build_diff(store, resolved_from, resolved_to)
        except SnapshotNotFoundError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        except StoreError as e:
            print_error(f"Failed to read snapshots: {e}")
            raise typer.Exit(code=1) from e

    if json_output:
        print_json(result.to_dict())
        return

    print_diff(result)
