"""Snapshot storage.

Thin SQLite wrapper that persists ScanReports so later runs can list,
re-render and diff them. Sizes are unsigned 64-bit values while SQLite
integers are signed, so values are clamped on the way in and read back
as non-negative.
"""

import logging
import sqlite3
import time
from pathlib import Path
from types import TracebackType

from heft.core.paths import ensure_data_dir, get_db_path
from heft.models.finding import BloatCategory, Finding, Location, saturating_add
from heft.models.report import ScanReport
from heft.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

INT64_MAX = 2**63 - 1

MEMORY_DB = ":memory:"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS snapshots (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp INTEGER NOT NULL,
        total_bytes INTEGER NOT NULL,
        reclaimable_bytes INTEGER NOT NULL,
        scan_duration_ms INTEGER NOT NULL,
        peak_memory_bytes INTEGER
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        snapshot_id INTEGER NOT NULL REFERENCES snapshots(id) ON DELETE CASCADE,
        category TEXT NOT NULL,
        name TEXT NOT NULL,
        location TEXT NOT NULL,
        size_bytes INTEGER NOT NULL,
        reclaimable_bytes INTEGER NOT NULL,
        last_modified INTEGER,
        cleanup_hint TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_entries_snapshot ON entries(snapshot_id);",
)

_SNAPSHOT_COLUMNS = (
    "id, timestamp, total_bytes, reclaimable_bytes, scan_duration_ms, peak_memory_bytes"
)


class StoreError(Exception):
    """Base exception for snapshot storage errors."""


class SnapshotNotFoundError(StoreError):
    """Raised when a snapshot id does not exist."""

    def __init__(self, snapshot_id: int) -> None:
        self.snapshot_id = snapshot_id
        super().__init__(f"Snapshot {snapshot_id} not found")


def _to_db(value: int) -> int:
    return min(max(value, 0), INT64_MAX)


def _to_db_optional(value: int | None) -> int | None:
    return None if value is None else _to_db(value)


def _from_db(value: int | None) -> int:
    return max(0, value or 0)


class SnapshotStore:
    """SQLite-backed snapshot storage.

    The connection stays open for the lifetime of the store so that an
    in-memory database (``":memory:"``) keeps its content.

    Example:
        >>> with SnapshotStore(":memory:") as store:
        ...     snapshot_id = store.save_snapshot(report)
        ...     entries = store.load_snapshot_entries(snapshot_id)
    """

    def __init__(self, db_path: Path | str | None = None) -> None:
        """Open (and create if needed) the snapshot database.

        Args:
            db_path: Database file, or ":memory:". Defaults to the data dir.

        Raises:
            StoreError: If the database cannot be opened or initialised.
        """
        if db_path is None:
            ensure_data_dir()
            db_path = get_db_path()
        elif str(db_path) != MEMORY_DB:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        try:
            self._conn = sqlite3.connect(str(db_path))
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON;")
            with self._conn:
                for statement in _SCHEMA:
                    self._conn.execute(statement)
        except sqlite3.Error as e:
            msg = f"Failed to open snapshot database {db_path}: {e}"
            raise StoreError(msg) from e

    def __enter__(self) -> "SnapshotStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def save_snapshot(self, report: ScanReport, timestamp: int | None = None) -> int:
        """Persist a scan report in a single transaction.

        Args:
            report: The report to save.
            timestamp: Unix timestamp to record. Defaults to now.

        Returns:
            The new snapshot id.

        Raises:
            StoreError: If the write fails; nothing is saved in that case.
        """
        total = 0
        reclaimable = 0
        for entry in report.entries:
            total, _ = saturating_add(total, entry.size_bytes)
            reclaimable, _ = saturating_add(reclaimable, entry.reclaimable_bytes)

        saved_at = int(time.time()) if timestamp is None else timestamp
        try:
            with self._conn:
                cursor = self._conn.execute(
                    """
                    INSERT INTO snapshots (
                        timestamp, total_bytes, reclaimable_bytes,
                        scan_duration_ms, peak_memory_bytes
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        saved_at,
                        _to_db(total),
                        _to_db(reclaimable),
                        _to_db(report.duration_ms or 0),
                        _to_db_optional(report.peak_memory_bytes),
                    ),
                )
                snapshot_id = cursor.lastrowid
                self._conn.executemany(
                    """
                    INSERT INTO entries (
                        snapshot_id, category, name, location, size_bytes,
                        reclaimable_bytes, last_modified, cleanup_hint
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            snapshot_id,
                            entry.category.value,
                            entry.name,
                            entry.location.to_storage(),
                            _to_db(entry.size_bytes),
                            _to_db(entry.reclaimable_bytes),
                            _to_db_optional(entry.last_modified),
                            entry.cleanup_hint,
                        )
                        for entry in report.entries
                    ],
                )
        except sqlite3.Error as e:
            msg = f"Failed to save snapshot: {e}"
            raise StoreError(msg) from e

        if snapshot_id is None:
            msg = "Failed to save snapshot: no id assigned"
            raise StoreError(msg)
        logger.debug("Saved snapshot %d with %d entries", snapshot_id, len(report.entries))
        return snapshot_id

    def list_snapshots(self) -> list[Snapshot]:
        """Return all snapshots, newest first."""
        rows = self._query(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM snapshots ORDER BY timestamp DESC, id DESC"
        )
        return [self._row_to_snapshot(row) for row in rows]

    def get_snapshot(self, snapshot_id: int) -> Snapshot:
        """Return one snapshot's metadata.

        Raises:
            SnapshotNotFoundError: If the id does not exist.
        """
        rows = self._query(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM snapshots WHERE id = ?", (snapshot_id,)
        )
        if not rows:
            raise SnapshotNotFoundError(snapshot_id)
        return self._row_to_snapshot(rows[0])

    def get_latest_snapshot(self) -> Snapshot | None:
        """Return the newest snapshot, or None if there are none."""
        rows = self._query(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM snapshots ORDER BY timestamp DESC, id DESC LIMIT 1"
        )
        return self._row_to_snapshot(rows[0]) if rows else None

    def load_snapshot_entries(self, snapshot_id: int) -> list[Finding]:
        """Return the findings stored with a snapshot, in saved order.

        Raises:
            SnapshotNotFoundError: If the id does not exist.
        """
        self.get_snapshot(snapshot_id)
        rows = self._query(
            """
            SELECT category, name, location, size_bytes, reclaimable_bytes,
                   last_modified, cleanup_hint
            FROM entries WHERE snapshot_id = ? ORDER BY id
            """,
            (snapshot_id,),
        )
        findings: list[Finding] = []
        for row in rows:
            size = _from_db(row["size_bytes"])
            findings.append(
                Finding(
                    category=BloatCategory.from_storage(row["category"]),
                    name=row["name"],
                    location=Location.from_storage(row["location"]),
                    size_bytes=size,
                    reclaimable_bytes=min(_from_db(row["reclaimable_bytes"]), size),
                    last_modified=(
                        None if row["last_modified"] is None else _from_db(row["last_modified"])
                    ),
                    cleanup_hint=row["cleanup_hint"],
                )
            )
        return findings

    def load_report(self, snapshot_id: int) -> ScanReport:
        """Rebuild a ScanReport (without diagnostics or timings) from storage."""
        snapshot = self.get_snapshot(snapshot_id)
        return ScanReport(
            entries=tuple(self.load_snapshot_entries(snapshot_id)),
            duration_ms=snapshot.scan_duration_ms,
            peak_memory_bytes=snapshot.peak_memory_bytes,
        )

    def delete_snapshot(self, snapshot_id: int) -> None:
        """Delete a snapshot and its entries.

        Raises:
            SnapshotNotFoundError: If the id does not exist.
        """
        try:
            with self._conn:
                cursor = self._conn.execute("DELETE FROM snapshots WHERE id = ?", (snapshot_id,))
        except sqlite3.Error as e:
            msg = f"Failed to delete snapshot {snapshot_id}: {e}"
            raise StoreError(msg) from e
        if cursor.rowcount == 0:
            raise SnapshotNotFoundError(snapshot_id)

    def _query(self, sql: str, params: tuple[object, ...] = ()) -> list[sqlite3.Row]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            msg = f"Snapshot query failed: {e}"
            raise StoreError(msg) from e

    @staticmethod
    def _row_to_snapshot(row: sqlite3.Row) -> Snapshot:
        peak = row["peak_memory_bytes"]
        return Snapshot(
            id=row["id"],
            timestamp=_from_db(row["timestamp"]),
            total_bytes=_from_db(row["total_bytes"]),
            reclaimable_bytes=_from_db(row["reclaimable_bytes"]),
            scan_duration_ms=_from_db(row["scan_duration_ms"]),
            peak_memory_bytes=None if peak is None else _from_db(peak),
        )
