"""Data models for releases, normalized tenders and sync runs."""

from rfp_quest.models.raw import RawRelease, ReleasePage
from rfp_quest.models.sync import (
    SyncCounts,
    SyncOptions,
    SyncRun,
    SyncRunStatus,
    SyncSummary,
    UpsertOutcome,
    UpsertResult,
)
from rfp_quest.models.tender import BuyerRef, DateWindow, Stage, TenderRecord, TenderValue

__all__ = [
    "BuyerRef",
    "DateWindow",
    "RawRelease",
    "ReleasePage",
    "Stage",
    "SyncCounts",
    "SyncOptions",
    "SyncRun",
    "SyncRunStatus",
    "SyncSummary",
    "TenderRecord",
    "TenderValue",
    "UpsertOutcome",
    "UpsertResult",
]
