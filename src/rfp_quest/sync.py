"""Sync orchestration: paginate source → normalize → upsert → ledger."""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from rfp_quest.config import SyncSettings
from rfp_quest.connectors.base import BaseSource, format_timestamp
from rfp_quest.connectors.registry import ConnectorRegistry
from rfp_quest.models.raw import RawRelease
from rfp_quest.models.sync import (
    SyncCounts,
    SyncOptions,
    SyncSummary,
    UpsertOutcome,
    UpsertResult,
)
from rfp_quest.store.base import BaseTenderStore
from rfp_quest.store.ledger import SyncLedger
from rfp_quest.store.sqlite_store import TenderStore

logger = logging.getLogger(__name__)

PAGE_DELAY_SECONDS = 0.5
PROGRESS_EVERY = 100

# Raised by normalize() for a malformed release; isolated to that record.
_RECORD_ERRORS = (ValidationError, ValueError, TypeError, KeyError, AttributeError)


class SyncOrchestrator:
    """
    Drives one end-to-end sync run.
    Strictly sequential: a page is fully upserted before the next is requested,
    so counters and ledger totals are deterministic.
    """

    def __init__(
        self,
        source: BaseSource,
        store: BaseTenderStore,
        ledger: SyncLedger,
        *,
        page_delay: float = PAGE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._source = source
        self._store = store
        self._ledger = ledger
        self._page_delay = page_delay
        self._sleep = sleep
        self._clock = clock

    def resolve_window(self, options: SyncOptions) -> Optional[datetime]:
        """Lower time bound for the fetch; None means full sync."""
        if options.full_sync:
            return None
        return self._clock() - timedelta(days=options.window_days)

    def _params(self, options: SyncOptions, updated_from: Optional[datetime]) -> dict[str, Any]:
        return {
            "days": options.window_days,
            "full": options.full_sync,
            "limit": options.limit,
            "source": self._source.source_id,
            "updated_from": format_timestamp(updated_from) if updated_from else None,
        }

    def _process_record(self, raw: RawRelease) -> UpsertResult:
        """Normalize and upsert one release. Record-level failures come back as SKIPPED."""
        try:
            record = self._source.normalize(raw)
        except _RECORD_ERRORS as e:
            logger.warning("Skipping malformed release %s: %s", raw.ocid or "<no ocid>", e)
            return UpsertResult(external_id=raw.ocid, outcome=UpsertOutcome.SKIPPED, error=str(e))
        return self._store.upsert(record)

    def run(self, options: Optional[SyncOptions] = None) -> SyncSummary:
        """
        Run one sync. Returns the summary on completion.
        Any fetch or unexpected error marks the ledger entry as error and is re-raised.
        """
        options = options or SyncOptions()
        started = time.monotonic()
        updated_from = self.resolve_window(options)

        logger.info(
            "Starting tender sync from %s: days=%d, full=%s, limit=%s",
            self._source.source_id,
            options.window_days,
            options.full_sync,
            options.limit or "none",
        )
        if updated_from:
            logger.info("Fetching tenders updated from: %s", format_timestamp(updated_from))

        run = self._ledger.begin(self._params(options, updated_from))
        counts = SyncCounts()
        cursor: Optional[str] = None

        try:
            while True:
                page = self._source.fetch_page(cursor, updated_from)
                logger.info("Processing batch of %d records...", len(page.records))

                for raw in page.records:
                    if counts.limit_reached(options.limit):
                        break
                    result = self._process_record(raw)
                    counts = counts.record(result.outcome)
                    if counts.fetched % PROGRESS_EVERY == 0:
                        logger.info(
                            "Progress: %d processed, %d inserted, %d updated, %d skipped",
                            counts.fetched,
                            counts.inserted,
                            counts.updated,
                            counts.skipped,
                        )

                if not page.next_page_token or counts.limit_reached(options.limit):
                    break
                cursor = page.next_page_token
                self._sleep(self._page_delay)
        except Exception as e:
            logger.error("Sync run %s failed after %d records: %s", run.id, counts.fetched, e)
            self._ledger.fail(run.id, counts, str(e) or e.__class__.__name__)
            raise

        self._ledger.complete(run.id, counts)
        summary = SyncSummary.from_counts(run.id, counts, round(time.monotonic() - started, 3))
        logger.info(
            "Sync complete: %d fetched, %d inserted, %d updated, %d skipped",
            summary.fetched,
            summary.inserted,
            summary.updated,
            summary.skipped,
        )
        return summary


def build_orchestrator(settings: SyncSettings, **kwargs) -> SyncOrchestrator:
    """Wire connector, store and ledger from settings. kwargs passed to SyncOrchestrator."""
    connector_kwargs: dict[str, Any] = {
        "default_retry_after": settings.default_retry_after,
        "max_retries": settings.max_retries,
        "timeout": settings.request_timeout,
    }
    if settings.api_base_url:
        connector_kwargs["base_url"] = settings.api_base_url
    source = ConnectorRegistry.get(settings.source, **connector_kwargs)
    kwargs.setdefault("page_delay", settings.page_delay_seconds)
    return SyncOrchestrator(
        source,
        TenderStore(settings.db_path),
        SyncLedger(settings.db_path),
        **kwargs,
    )


def sync_tenders(
    settings: Optional[SyncSettings] = None,
    options: Optional[SyncOptions] = None,
) -> SyncSummary:
    """Run one sync with settings from the environment unless given."""
    settings = settings or SyncSettings.from_env()
    options = options or SyncOptions(window_days=settings.window_days)
    return build_orchestrator(settings).run(options)
