"""Upsert store interface with per-record failure isolation."""

import logging
from abc import ABC, abstractmethod

from rfp_quest.models.sync import UpsertOutcome, UpsertResult
from rfp_quest.models.tender import TenderRecord

logger = logging.getLogger(__name__)


class BaseTenderStore(ABC):
    """
    Keyed storage for TenderRecord by external_id.

    Backends implement `_write`; `upsert` turns any write failure into a
    SKIPPED result so one bad record never aborts a sync run.

    `reports_updates` is False for backends whose native upsert cannot tell
    which branch fired; those report INSERTED for both.
    """

    reports_updates: bool = True

    @abstractmethod
    def _write(self, record: TenderRecord) -> UpsertOutcome:
        """Insert or fully overwrite the record. May raise."""
        pass

    def upsert(self, record: TenderRecord) -> UpsertResult:
        """Insert or replace by external_id. Never raises for a failed write."""
        try:
            outcome = self._write(record)
        except Exception as e:
            logger.warning("Error upserting %s: %s", record.external_id, e)
            return UpsertResult(
                external_id=record.external_id,
                outcome=UpsertOutcome.SKIPPED,
                error=str(e) or e.__class__.__name__,
            )
        if outcome is UpsertOutcome.UPDATED and not self.reports_updates:
            outcome = UpsertOutcome.INSERTED
        return UpsertResult(external_id=record.external_id, outcome=outcome)
