"""Pytest fixtures for rfp-quest tests."""

import tempfile
from pathlib import Path
from typing import Any, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from rfp_quest.connectors.findatender import FindATenderConnector
from rfp_quest.models.raw import RawRelease, ReleasePage


def _json_response(
    payload: Optional[dict] = None,
    status_code: int = 200,
    headers: Optional[dict[str, str]] = None,
    text: Optional[str] = None,
) -> httpx.Response:
    """Build an httpx.Response without touching the network."""
    if text is not None:
        return httpx.Response(status_code, text=text, headers=headers)
    return httpx.Response(status_code, json=payload if payload is not None else {}, headers=headers)


def _make_release(ocid: str, **overrides: Any) -> dict[str, Any]:
    """Minimal OCDS release dict."""
    release: dict[str, Any] = {
        "ocid": ocid,
        "id": f"{ocid}-r1",
        "date": "2024-01-01T00:00:00Z",
        "tag": ["tender"],
        "tender": {"title": f"Tender {ocid}"},
        "buyer": {"name": "Council X"},
    }
    release.update(overrides)
    return release


class FakeSource(FindATenderConnector):
    """In-memory source: serves pre-built pages, reuses real normalization."""

    def __init__(self, pages: list[list[dict[str, Any]]]):
        super().__init__(client=MagicMock(), sleep=lambda _: None)
        self._pages = pages
        self.fetch_calls: list[tuple[Optional[str], Any]] = []

    def fetch_page(self, cursor_or_url=None, updated_from=None) -> ReleasePage:
        self.fetch_calls.append((cursor_or_url, updated_from))
        index = int(cursor_or_url.rsplit("=", 1)[1]) if cursor_or_url else 0
        next_token = f"https://example.test/page?cursor={index + 1}" if index + 1 < len(self._pages) else None
        return ReleasePage(
            records=[RawRelease(data=r) for r in self._pages[index]],
            next_page_token=next_token,
        )


@pytest.fixture
def sample_release() -> dict[str, Any]:
    """Realistic Find a Tender release for normalization tests."""
    return {
        "ocid": "ocds-h6vhtk-064991",
        "id": "ocds-h6vhtk-064991-2024-03-01",
        "date": "2024-03-01T09:30:00Z",
        "tag": ["tender"],
        "initiationType": "tender",
        "tender": {
            "id": "064991",
            "title": "Roof Repair & Maintenance Framework",
            "description": "Repairs to council housing roofs.",
            "status": "active",
            "tenderPeriod": {"startDate": "2024-03-01T00:00:00Z", "endDate": "2024-04-01T12:00:00Z"},
            "contractPeriod": {"startDate": "2024-06-01T00:00:00Z", "endDate": "2026-05-31T00:00:00Z"},
            "value": {"amount": 50000, "currency": "GBP"},
            "minValue": {"amount": 40000},
            "maxValue": {"amount": 60000},
            "items": [
                {"classification": {"scheme": "CPV", "id": "45261900", "description": "Roof repair"}},
                {"classification": {"scheme": "NUTS", "id": "UKH"}},
                {"classification": {"scheme": "CPV", "id": "45000000"}},
            ],
            "deliveryAddresses": [{"region": "UKH1"}, {"region": "UKH2"}],
        },
        "buyer": {"id": "GB-FTS-1234", "name": "Council X"},
    }


@pytest.fixture
def raw_release(sample_release: dict[str, Any]) -> RawRelease:
    return RawRelease(data=sample_release)


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)


@pytest.fixture
def mock_client() -> MagicMock:
    """httpx.Client stand-in; set .get.side_effect / .return_value per test."""
    return MagicMock(spec=httpx.Client)


@pytest.fixture
def sleeps() -> list[float]:
    """Collects requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def connector(mock_client: MagicMock, sleeps: list[float]) -> FindATenderConnector:
    return FindATenderConnector(client=mock_client, sleep=sleeps.append)
