"""Sync run models: options, counters, upsert results and ledger entries."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class UpsertOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"


class UpsertResult(BaseModel):
    """
    Result of a single store write.
    `error` is set only when outcome is SKIPPED; the store never raises for one bad record.
    """

    external_id: Optional[str] = None
    outcome: UpsertOutcome
    error: Optional[str] = None


class SyncOptions(BaseModel):
    """Invocation parameters for one sync run."""

    window_days: int = Field(default=7, ge=0, description="Incremental window in days")
    full_sync: bool = Field(default=False, description="Ignore the window and fetch everything")
    limit: Optional[int] = Field(default=None, ge=1, description="Stop after this many records")


@dataclass(frozen=True)
class SyncCounts:
    """Immutable run counters; `record` returns a new value."""

    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def record(self, outcome: UpsertOutcome) -> "SyncCounts":
        if outcome is UpsertOutcome.INSERTED:
            return replace(self, fetched=self.fetched + 1, inserted=self.inserted + 1)
        if outcome is UpsertOutcome.UPDATED:
            return replace(self, fetched=self.fetched + 1, updated=self.updated + 1)
        return replace(self, fetched=self.fetched + 1, skipped=self.skipped + 1)

    def limit_reached(self, limit: Optional[int]) -> bool:
        return limit is not None and self.fetched >= limit


class SyncRunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


class SyncRun(BaseModel):
    """One ledger entry per orchestrator invocation."""

    id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    status: SyncRunStatus = SyncRunStatus.RUNNING
    records_fetched: int = 0
    records_inserted: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    error_message: Optional[str] = None
    params: dict[str, Any] = Field(default_factory=dict)


class SyncSummary(BaseModel):
    """What the orchestrator returns to its caller after a completed run."""

    run_id: str
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    duration_seconds: float = 0.0

    @classmethod
    def from_counts(cls, run_id: str, counts: SyncCounts, duration_seconds: float) -> "SyncSummary":
        return cls(
            run_id=run_id,
            fetched=counts.fetched,
            inserted=counts.inserted,
            updated=counts.updated,
            skipped=counts.skipped,
            duration_seconds=duration_seconds,
        )
