"""Shared Rich display functions for reports, diffs and snapshots.

Provides table builders and summary printers used by the scan, report,
diff and clean commands.
"""

import json
from datetime import UTC, datetime

from rich.table import Table

from heft.cleanup.executor import CleanupResult
from heft.core.diff import DiffKind, DiffReport
from heft.core.orchestrator import ProgressEvent, ProgressStage
from heft.models.finding import BloatCategory, Finding, saturating_add
from heft.models.report import ScanReport
from heft.models.snapshot import Snapshot
from heft.utils.formatting import (
    console,
    err_console,
    format_age,
    format_bytes,
    format_delta,
    print_info,
    print_success,
    print_warning,
)

_DIFF_LABELS: dict[DiffKind, str] = {
    DiffKind.GREW: "▲ grew",
    DiffKind.SHRANK: "▼ shrank",
    DiffKind.NEW: "+ new",
    DiffKind.GONE: "- gone",
}


def _sum_sizes(findings: list[Finding]) -> tuple[int, int]:
    total = 0
    reclaimable = 0
    for finding in findings:
        total, _ = saturating_add(total, finding.size_bytes)
        reclaimable, _ = saturating_add(reclaimable, finding.reclaimable_bytes)
    return total, reclaimable


def _format_timestamp(timestamp: int | None) -> str:
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


def sorted_groups(report: ScanReport) -> list[tuple[BloatCategory, list[Finding]]]:
    """Group findings by category for display.

    Categories are ordered by total size descending, and findings within
    a category by size descending.
    """
    groups = [
        (category, sorted(findings, key=lambda f: f.size_bytes, reverse=True))
        for category, findings in report.by_category().items()
    ]
    groups.sort(key=lambda group: _sum_sizes(group[1])[0], reverse=True)
    return groups


def create_report_table(report: ScanReport, title: str = "Disk Bloat") -> Table:
    """Create a Rich table of all findings grouped by category.

    Args:
        report: The scan report to display.
        title: Table title.

    Returns:
        Rich Table with one section per category, subtotals and a grand total.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Size", style="size", justify="right")
    table.add_column("Reclaimable", style="reclaimable", justify="right")
    table.add_column("Age", style="muted", justify="right")
    table.add_column("Cleanup", style="muted", overflow="fold")
    table.add_column("Location", style="dim", overflow="fold")

    for category, findings in sorted_groups(report):
        style = f"category.{category.slug}"
        table.add_row(f"[{style}]{category.label}[/]", "", "", "", "", "")
        for finding in findings:
            table.add_row(
                f"  {finding.name}",
                format_bytes(finding.size_bytes),
                format_bytes(finding.reclaimable_bytes),
                format_age(finding.last_modified),
                finding.cleanup_hint or "-",
                str(finding.location),
            )
        total, reclaimable = _sum_sizes(findings)
        table.add_row(
            "[muted]  subtotal[/]",
            f"[muted]{format_bytes(total)}[/]",
            f"[muted]{format_bytes(reclaimable)}[/]",
            "",
            "",
            "",
            end_section=True,
        )

    table.add_row(
        "[bold]Total[/]",
        f"[bold]{format_bytes(report.total_bytes)}[/]",
        f"[bold]{format_bytes(report.reclaimable_bytes)}[/]",
        "",
        "",
        "",
    )
    return table


def print_report(report: ScanReport, verbose: bool = False) -> None:
    """Print a scan report as a table followed by its diagnostics."""
    if not report.entries:
        print_info("No bloat detected.")
    else:
        console.print(create_report_table(report))

    print_diagnostics(report.diagnostics, verbose)
    if verbose:
        print_timings(report)


def print_diagnostics(diagnostics: tuple[str, ...], verbose: bool) -> None:
    """Print diagnostics in verbose mode, otherwise only their count."""
    if not diagnostics:
        return
    if verbose:
        for diagnostic in diagnostics:
            err_console.print(f"[warning]\\[diagnostic][/] {diagnostic}", highlight=False)
    else:
        err_console.print(
            f"[muted]{len(diagnostics)} diagnostic(s) hidden, use --verbose to show them[/]"
        )


def print_timings(report: ScanReport) -> None:
    """Print per-detector duration and memory growth."""
    if not report.detector_timings:
        return

    memory = {metric.detector: metric.value for metric in report.detector_memory}
    table = Table(
        title="Detector Timings",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Detector")
    table.add_column("Duration", justify="right")
    table.add_column("Memory", justify="right")

    for metric in report.detector_timings:
        growth = memory.get(metric.detector)
        table.add_row(
            metric.detector,
            f"{metric.value / 1000:.2f}s",
            format_bytes(growth) if growth is not None else "-",
        )
    console.print(table)

    if report.duration_ms is not None:
        print_info(f"Total scan time: {report.duration_ms / 1000:.2f}s")
    if report.peak_memory_bytes is not None:
        print_info(f"Peak memory: {format_bytes(report.peak_memory_bytes)}")


def print_json(data: object) -> None:
    """Print a JSON-ready object."""
    console.print_json(json.dumps(data))


def print_progress(event: ProgressEvent) -> None:
    """Print a detector lifecycle event on stderr."""
    if event.stage == ProgressStage.STARTED:
        err_console.print(f"[info]Scanning {event.detector}...[/]")
    elif event.stage == ProgressStage.SKIPPED:
        err_console.print(f"[muted]{event.detector}: skipped[/]")
    else:
        err_console.print(
            f"[success]{event.detector} complete:[/] {event.item_count} items, "
            f"{format_bytes(event.total_bytes)}, {event.elapsed_seconds:.2f}s"
        )


def create_diff_table(diff: DiffReport) -> Table:
    """Create a Rich table of changed items."""
    table = Table(
        title=f"Changes: snapshot {diff.from_id} → {diff.to_id}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Change", no_wrap=True)
    table.add_column("Category")
    table.add_column("Name", no_wrap=True)
    table.add_column("Old", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Delta", justify="right")

    for entry in diff.entries:
        style = entry.kind.value
        table.add_row(
            f"[{style}]{_DIFF_LABELS[entry.kind]}[/]",
            entry.category.label,
            entry.name,
            format_bytes(entry.old_size),
            format_bytes(entry.new_size),
            f"[{style}]{format_delta(entry.delta)}[/]",
        )
    return table


def print_diff(diff: DiffReport) -> None:
    """Print a diff report with its net change and source snapshots."""
    if not diff.has_changes:
        print_info("No changes between snapshots.")
    else:
        console.print(create_diff_table(diff))

    style = "grew" if diff.net_change > 0 else "shrank"
    console.print(f"Net change: [{style}]{format_delta(diff.net_change)}[/]")
    console.print(
        f"[muted]from #{diff.from_id} ({_format_timestamp(diff.from_timestamp)}) "
        f"to #{diff.to_id} ({_format_timestamp(diff.to_timestamp)})[/]"
    )


def create_snapshot_table(snapshots: list[Snapshot]) -> Table:
    """Create a Rich table listing stored snapshots."""
    table = Table(
        title="Snapshots",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", justify="right")
    table.add_column("Saved")
    table.add_column("Total", style="size", justify="right")
    table.add_column("Reclaimable", style="reclaimable", justify="right")
    table.add_column("Duration", justify="right")

    for snapshot in snapshots:
        table.add_row(
            str(snapshot.id),
            _format_timestamp(snapshot.timestamp),
            format_bytes(snapshot.total_bytes),
            format_bytes(snapshot.reclaimable_bytes),
            f"{snapshot.scan_duration_ms / 1000:.2f}s",
        )
    return table


def print_cleanup_plan(findings: list[Finding], dry_run: bool) -> None:
    """Display the items a cleanup run will touch."""
    label = "Cleanup Plan (dry-run)" if dry_run else "Cleanup Plan"
    table = Table(title=label, show_header=True, header_style="bold_header")
    table.add_column("Category")
    table.add_column("Name", style="bold")
    table.add_column("Reclaimable", style="reclaimable", justify="right")
    table.add_column("Location", style="dim", overflow="fold")

    for finding in findings:
        table.add_row(
            finding.category.label,
            finding.name,
            format_bytes(finding.reclaimable_bytes),
            str(finding.location),
        )
    console.print(table)


def print_cleanup_result(result: CleanupResult) -> None:
    """Display the outcome of a cleanup run."""
    for line in result.deleted:
        console.print(f"[success]✓[/] {line}", highlight=False)
    for line in result.skipped:
        console.print(f"[muted]- {line}[/]", highlight=False)
    for line in result.errors:
        err_console.print(f"[error]✗[/] {line}", highlight=False)

    freed = format_bytes(result.bytes_freed)
    if result.dry_run:
        print_info(f"Dry-run: {len(result.deleted)} item(s), {freed} would be freed.")
    elif result.errors:
        print_warning(
            f"{len(result.deleted)} succeeded, {len(result.errors)} failed, {freed} freed."
        )
    else:
        print_success(f"Freed {freed} from {len(result.deleted)} item(s).")
