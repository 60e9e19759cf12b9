"""Abstract base class for release source connectors."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterator, Optional

from rfp_quest.models.raw import RawRelease, ReleasePage
from rfp_quest.models.tender import TenderRecord


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC timestamp for query strings and run params. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class BaseSource(ABC):
    """
    Standard interface for paginated tender sources.
    Connectors fetch one page at a time and normalize single releases;
    looping, persistence and run tracking belong to the sync orchestrator.
    """

    source_id: str = ""

    @abstractmethod
    def fetch_page(
        self,
        cursor_or_url: Optional[str] = None,
        updated_from: Optional[datetime] = None,
    ) -> ReleasePage:
        """
        Fetch one page of raw releases.
        cursor_or_url, when given, is used verbatim and already carries the prior filters.
        """
        pass

    @abstractmethod
    def normalize(self, raw: RawRelease) -> TenderRecord:
        """
        Convert raw release to TenderRecord.
        """
        pass

    def iter_pages(self, updated_from: Optional[datetime] = None) -> Iterator[ReleasePage]:
        """Yield pages in cursor order until the source reports no further page."""
        cursor: Optional[str] = None
        while True:
            page = self.fetch_page(cursor, updated_from)
            yield page
            if not page.next_page_token:
                return
            cursor = page.next_page_token
