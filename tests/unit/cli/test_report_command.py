"""Unit tests for the report command."""

import json
from collections.abc import Callable

from heft.cli.main import app
from heft.core.store import SnapshotStore
from heft.models.finding import Finding
from heft.models.report import ScanReport
from typer.testing import CliRunner

runner = CliRunner()


def _save(*reports: ScanReport) -> list[int]:
    with SnapshotStore() as store:
        return [
            store.save_snapshot(report, timestamp=1_700_000_000 + i * 3600)
            for i, report in enumerate(reports)
        ]


class TestReportCommand:
    """Tests for the report command."""

    def test_empty_store(self) -> None:
        """Without snapshots the user is told to scan first."""
        result = runner.invoke(app, ["report"])

        assert result.exit_code == 0
        assert "No snapshots stored yet" in result.output

    def test_list_json(self, make_finding: Callable[..., Finding]) -> None:
        """--list --json prints every snapshot, newest first."""
        _save(
            ScanReport(entries=(make_finding("api", 100),), duration_ms=10),
            ScanReport(entries=(make_finding("api", 300),), duration_ms=20),
        )

        result = runner.invoke(app, ["report", "--list", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [s["id"] for s in data] == [2, 1]
        assert data[0]["total_bytes"] == 300

    def test_list_table(self, make_finding: Callable[..., Finding]) -> None:
        """--list renders a table of snapshots."""
        _save(ScanReport(entries=(make_finding("api", 100),), duration_ms=10))

        result = runner.invoke(app, ["report", "--list"])

        assert result.exit_code == 0
        assert "Snapshots" in result.output

    def test_latest_by_default(self, make_finding: Callable[..., Finding]) -> None:
        """Without --id the latest snapshot is shown."""
        _save(
            ScanReport(entries=(make_finding("old", 100),), duration_ms=10),
            ScanReport(entries=(make_finding("new", 200),), duration_ms=10),
        )

        result = runner.invoke(app, ["report", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["snapshot"]["id"] == 2
        assert [entry["name"] for entry in data["entries"]] == ["new"]

    def test_by_id(self, make_finding: Callable[..., Finding]) -> None:
        """--id selects a specific snapshot."""
        _save(
            ScanReport(entries=(make_finding("old", 100),), duration_ms=10),
            ScanReport(entries=(make_finding("new", 200),), duration_ms=10),
        )

        result = runner.invoke(app, ["report", "--id", "1"])

        assert result.exit_code == 0
        assert "Snapshot #1" in result.output

    def test_unknown_id(self) -> None:
        """An unknown id exits with an error."""
        result = runner.invoke(app, ["report", "--id", "42"])

        assert result.exit_code == 1
        assert "Snapshot 42 not found" in result.output
