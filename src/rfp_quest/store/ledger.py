"""SQLite-backed sync run ledger."""

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from rfp_quest.models.sync import SyncCounts, SyncRun, SyncRunStatus

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class SyncLedger:
    """
    Durable record of sync runs for operators.
    Rows are created as running and finalized once via complete() or fail();
    nothing here deletes them.
    """

    def __init__(
        self,
        db_path: str | Path = "rfp_quest.db",
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._db_path = Path(db_path)
        self._clock = clock
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript(SCHEMA_PATH.read_text())

    def begin(self, params: Optional[dict[str, Any]] = None) -> SyncRun:
        """Record start of a sync run. Returns SyncRun with a fresh id."""
        run = SyncRun(
            id=uuid.uuid4().hex,
            started_at=self._clock(),
            status=SyncRunStatus.RUNNING,
            params=params or {},
        )
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO sync_runs (
                    id, started_at, status, records_fetched, records_inserted,
                    records_updated, records_skipped, params
                ) VALUES (?, ?, ?, 0, 0, 0, 0, ?)
                """,
                (run.id, run.started_at.isoformat(), run.status.value, json.dumps(run.params, default=str)),
            )
            conn.commit()
        return run

    def _finalize(
        self,
        run_id: str,
        counts: SyncCounts,
        status: SyncRunStatus,
        error_message: Optional[str] = None,
    ) -> None:
        with self._connection() as conn:
            cursor = conn.execute(
                """
                UPDATE sync_runs SET
                    completed_at = ?, status = ?, records_fetched = ?, records_inserted = ?,
                    records_updated = ?, records_skipped = ?, error_message = ?
                WHERE id = ?
                """,
                (
                    self._clock().isoformat(),
                    status.value,
                    counts.fetched,
                    counts.inserted,
                    counts.updated,
                    counts.skipped,
                    error_message,
                    run_id,
                ),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise ValueError(f"Sync run not found: {run_id}")

    def complete(self, run_id: str, counts: SyncCounts) -> None:
        """Mark run completed with final counts."""
        self._finalize(run_id, counts, SyncRunStatus.COMPLETED)

    def fail(self, run_id: str, counts: SyncCounts, error_message: str) -> None:
        """Mark run failed with counts so far and the error text."""
        self._finalize(run_id, counts, SyncRunStatus.ERROR, error_message)

    def get(self, run_id: str) -> Optional[SyncRun]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM sync_runs WHERE id = ?", (run_id,)).fetchone()
        return self._row_to_run(row) if row else None

    def recent(self, limit: int = 20) -> list[SyncRun]:
        """Most recent runs first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM sync_runs ORDER BY started_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_run(r) for r in rows]

    def _row_to_run(self, row: sqlite3.Row) -> SyncRun:
        return SyncRun(
            id=row["id"],
            started_at=datetime.fromisoformat(row["started_at"]),
            completed_at=datetime.fromisoformat(row["completed_at"]) if row["completed_at"] else None,
            status=SyncRunStatus(row["status"]),
            records_fetched=row["records_fetched"],
            records_inserted=row["records_inserted"],
            records_updated=row["records_updated"],
            records_skipped=row["records_skipped"],
            error_message=row["error_message"],
            params=json.loads(row["params"]) if row["params"] else {},
        )
