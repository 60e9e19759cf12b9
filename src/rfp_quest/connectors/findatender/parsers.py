"""Parsing utilities for OCDS release data."""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

from rfp_quest.models.tender import Stage

from .constants import BUYER, BUYER_ROLE, CPV_SCHEME, DEFAULT_RETRY_AFTER_SECONDS, PARTIES

# Checked in order: a release tagged both "tender" and "award" is an award.
_STAGE_PRIORITY = (Stage.AWARD, Stage.TENDER, Stage.PLANNING)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")
_SLUG_MAX = 80


def derive_stage(tags: Optional[list[str]]) -> str:
    """
    Map OCDS release tags to a lifecycle stage.
    award > tender > planning, else the first tag verbatim, else unknown.
    """
    tags = list(tags or [])
    for stage in _STAGE_PRIORITY:
        if stage.value in tags:
            return stage.value
    if tags and tags[0]:
        return str(tags[0])
    return Stage.UNKNOWN.value


def extract_cpv_codes(tender: Optional[dict[str, Any]]) -> list[str]:
    """CPV classification ids from tender items, in source order; other schemes dropped."""
    codes: list[str] = []
    for item in (tender or {}).get("items") or []:
        classification = (item or {}).get("classification") or {}
        if classification.get("scheme") != CPV_SCHEME:
            continue
        code = classification.get("id")
        if code:
            codes.append(str(code))
    return codes


def extract_region(tender: Optional[dict[str, Any]]) -> Optional[str]:
    """Region of the first delivery address, if any."""
    addresses = (tender or {}).get("deliveryAddresses") or []
    if not addresses:
        return None
    return (addresses[0] or {}).get("region") or None


def find_buyer(release: dict[str, Any]) -> dict[str, Any]:
    """
    The release buyer block; falls back to the first party with the buyer role.
    Some notices only list the authority under parties.
    """
    buyer = release.get(BUYER)
    if buyer:
        return buyer
    for party in release.get(PARTIES) or []:
        if BUYER_ROLE in ((party or {}).get("roles") or []):
            return party
    return {}


def amount_of(block: Optional[dict[str, Any]]) -> Optional[float]:
    """`amount` from an OCDS value block; None when absent."""
    if not block:
        return None
    return block.get("amount")


def slugify(title: str, ocid: str) -> str:
    """
    URL slug for a tender page: lowercased title, max 80 chars, plus the last
    ocid segment for uniqueness (e.g. "roof-repair-064991").
    """
    base = _SLUG_STRIP.sub("-", (title or "").lower()).strip("-")[:_SLUG_MAX]
    suffix = ocid.split("-")[-1] if ocid else ""
    if not base:
        return suffix
    return f"{base}-{suffix}" if suffix else base


def parse_retry_after(value: Optional[str], default: float = DEFAULT_RETRY_AFTER_SECONDS) -> float:
    """
    Parse a Retry-After header: delta-seconds or an HTTP-date.
    Missing or unparseable values fall back to `default`.
    """
    if not value or not value.strip():
        return default
    value = value.strip()
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return default
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)
