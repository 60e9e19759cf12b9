"""SQLite-backed tender store keyed by OCDS ocid."""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from rfp_quest.models.sync import UpsertOutcome
from rfp_quest.models.tender import TenderRecord
from rfp_quest.store.base import BaseTenderStore

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class TenderStore(BaseTenderStore):
    """
    SQLite store for normalized tenders.
    Identity is external_id only; every other column is overwritten on update.
    SELECT-then-write runs in one transaction, so inserted/updated is reported exactly.
    """

    reports_updates = True

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

    def _serialize(self, record: TenderRecord) -> tuple[str, str]:
        """Serialize record to (data JSON without raw, raw JSON)."""
        data = record.model_dump(mode="json", exclude={"raw"})
        return json.dumps(data, default=str), json.dumps(record.raw, default=str)

    def _deserialize(self, row: sqlite3.Row) -> TenderRecord:
        data = json.loads(row["data"])
        data["raw"] = json.loads(row["raw"]) if row["raw"] else {}
        return TenderRecord.model_validate(data)

    def _write(self, record: TenderRecord) -> UpsertOutcome:
        now = self._clock().isoformat()
        data_str, raw_str = self._serialize(record)
        columns = (
            record.revision_id,
            record.source,
            record.title,
            record.slug,
            record.status,
            record.stage,
            record.buyer.name,
            record.value.amount,
            record.region,
            _iso(record.published_at),
            _iso(record.tender_window.end),
            data_str,
            raw_str,
        )

        with self._connection() as conn:
            existing = conn.execute(
                "SELECT external_id FROM tenders WHERE external_id = ?",
                (record.external_id,),
            ).fetchone()

            if existing:
                conn.execute(
                    """
                    UPDATE tenders SET
                        revision_id = ?, source = ?, title = ?, slug = ?, status = ?, stage = ?,
                        buyer_name = ?, value_amount = ?, region = ?, published_at = ?,
                        tender_end_at = ?, data = ?, raw = ?, last_synced_at = ?
                    WHERE external_id = ?
                    """,
                    (*columns, now, record.external_id),
                )
                outcome = UpsertOutcome.UPDATED
            else:
                conn.execute(
                    """
                    INSERT INTO tenders (
                        external_id, revision_id, source, title, slug, status, stage,
                        buyer_name, value_amount, region, published_at, tender_end_at,
                        data, raw, first_synced_at, last_synced_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (record.external_id, *columns, now, now),
                )
                outcome = UpsertOutcome.INSERTED
            conn.commit()

        return outcome

    def get(self, external_id: str) -> Optional[TenderRecord]:
        """Get single tender by external_id."""
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM tenders WHERE external_id = ?", (external_id,)).fetchone()
        return self._deserialize(row) if row else None

    def get_all(self) -> list[TenderRecord]:
        """Return all tenders, most recently published first."""
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM tenders ORDER BY published_at DESC").fetchall()
        return [self._deserialize(r) for r in rows]

    def get_by_stage(self, stage: str) -> list[TenderRecord]:
        """Return tenders with given stage."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM tenders WHERE stage = ? ORDER BY published_at DESC",
                (stage,),
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def get_synced_since(self, since: datetime) -> list[TenderRecord]:
        """Return tenders written (inserted or updated) since given datetime."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM tenders WHERE last_synced_at >= ? ORDER BY last_synced_at DESC",
                (since.isoformat(),),
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def last_synced_at(self, external_id: str) -> Optional[datetime]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT last_synced_at FROM tenders WHERE external_id = ?", (external_id,)
            ).fetchone()
        return datetime.fromisoformat(row["last_synced_at"]) if row else None

    def count(self, stage: Optional[str] = None) -> int:
        with self._connection() as conn:
            if stage:
                row = conn.execute("SELECT COUNT(*) FROM tenders WHERE stage = ?", (stage,)).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM tenders").fetchone()
        return int(row[0])
