"""Find a Tender connector using the public OCDS release packages API.

Find a Tender (find-tender.service.gov.uk) publishes UK public procurement
notices as OCDS release packages. The API is public and paginates with an
opaque `links.next` URL that already encodes the original query.

Rate limiting: 429/503 responses carry a Retry-After header. The connector
waits and retries the same request; there is no ceiling unless `max_retries`
is set.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Optional

import httpx

from rfp_quest.connectors.base import BaseSource, format_timestamp
from rfp_quest.connectors.errors import SourceUnavailableError, UpstreamError
from rfp_quest.models.raw import RawRelease, ReleasePage
from rfp_quest.models.tender import BuyerRef, DateWindow, TenderRecord, TenderValue

from .constants import (
    API_BASE_URL,
    DEFAULT_CURRENCY,
    DEFAULT_RETRY_AFTER_SECONDS,
    LIMIT_PARAM,
    OCID,
    PAGE_SIZE,
    RELEASE_DATE,
    RELEASE_ID,
    RELEASE_PACKAGES_PATH,
    RETRYABLE_STATUSES,
    TAG,
    TENDER,
    UNTITLED,
    UPDATED_FROM_PARAM,
)
from .parsers import (
    amount_of,
    derive_stage,
    extract_cpv_codes,
    extract_region,
    find_buyer,
    parse_retry_after,
    slugify,
)

logger = logging.getLogger(__name__)


class FindATenderConnector(BaseSource):
    """
    Connector for Find a Tender OCDS release packages.
    Fetches one page per call and normalizes single releases.
    """

    source_id = "find-a-tender"

    BASE_URL = API_BASE_URL
    WINDOW_PARAM = UPDATED_FROM_PARAM

    DEFAULT_HEADERS = {
        "User-Agent": "rfp-quest/0.1 (UK tender discovery; Open Government Licence)",
        "Accept": "application/json",
    }

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        base_url: Optional[str] = None,
        page_size: int = PAGE_SIZE,
        default_retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
        max_retries: Optional[int] = None,
        timeout: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            client: Optional httpx client
            base_url: Override API base URL (e.g. a sandbox or mirror)
            page_size: Releases per page (API accepts 1-100)
            default_retry_after: Wait used when a 429/503 carries no usable Retry-After
            max_retries: Retry ceiling for 429/503; None retries forever
            timeout: Request timeout in seconds for the default client
            sleep: Injected for tests
        """
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._page_size = page_size
        self._default_retry_after = default_retry_after
        self._max_retries = max_retries
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        return self._base_url + RELEASE_PACKAGES_PATH

    def _build_params(self, updated_from: Optional[datetime]) -> dict[str, str]:
        params = {LIMIT_PARAM: str(self._page_size)}
        if updated_from is not None:
            params[self.WINDOW_PARAM] = format_timestamp(updated_from)
        return params

    def _get(self, url: str, params: Optional[dict[str, str]] = None) -> httpx.Response:
        """GET with wait-and-retry on 429/503. Other statuses are returned to the caller."""
        attempts = 0
        while True:
            logger.debug("Fetching: %s params=%s", url, params)
            response = self._client.get(url, params=params)
            if response.status_code not in RETRYABLE_STATUSES:
                return response

            attempts += 1
            if self._max_retries is not None and attempts > self._max_retries:
                raise SourceUnavailableError(response.status_code, attempts, url)
            delay = parse_retry_after(
                response.headers.get("Retry-After"),
                default=self._default_retry_after,
            )
            logger.warning(
                "Rate limited by %s (HTTP %d, attempt %d). Waiting %.0fs...",
                self.source_id,
                response.status_code,
                attempts,
                delay,
            )
            self._sleep(delay)

    def fetch_page(
        self,
        cursor_or_url: Optional[str] = None,
        updated_from: Optional[datetime] = None,
    ) -> ReleasePage:
        """
        Fetch one release package page.
        A cursor URL takes precedence over updated_from; it already encodes the query.
        """
        url = cursor_or_url or self.endpoint
        params = None if cursor_or_url else self._build_params(updated_from)
        response = self._get(url, params=params)
        if not response.is_success:
            raise UpstreamError(response.status_code, response.text, url)

        payload = response.json() or {}
        releases = payload.get("releases") or []
        next_url = (payload.get("links") or {}).get("next") or None
        return ReleasePage(
            records=[RawRelease(data=r) for r in releases],
            next_page_token=next_url,
        )

    def normalize(self, raw: RawRelease) -> TenderRecord:
        """Convert an OCDS release to TenderRecord."""
        d = raw.data
        if not isinstance(d, dict):
            raise ValueError(f"Release is not an object: {type(d).__name__}")
        ocid = d.get(OCID)
        if not ocid:
            raise ValueError(f"Release has no ocid (id={d.get(RELEASE_ID)!r})")

        tender: dict[str, Any] = d.get(TENDER) or {}
        buyer = find_buyer(d)
        value = tender.get("value") or {}
        tender_period = tender.get("tenderPeriod") or {}
        contract_period = tender.get("contractPeriod") or {}
        title = tender.get("title") or UNTITLED

        return TenderRecord(
            external_id=ocid,
            revision_id=d.get(RELEASE_ID),
            source=self.source_id,
            title=title,
            slug=slugify(title, ocid),
            description=tender.get("description"),
            status=tender.get("status"),
            stage=derive_stage(d.get(TAG)),
            buyer=BuyerRef(id=buyer.get("id"), name=buyer.get("name")),
            value=TenderValue(
                amount=value.get("amount"),
                currency=value.get("currency") or DEFAULT_CURRENCY,
                min=amount_of(tender.get("minValue")),
                max=amount_of(tender.get("maxValue")),
            ),
            published_at=d.get(RELEASE_DATE),
            tender_window=DateWindow(
                start=tender_period.get("startDate"),
                end=tender_period.get("endDate"),
            ),
            contract_window=DateWindow(
                start=contract_period.get("startDate"),
                end=contract_period.get("endDate"),
            ),
            classification_codes=extract_cpv_codes(tender),
            region=extract_region(tender),
            raw=d,
        )
