"""Normalized tender record and its value objects."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Known lifecycle stages. Releases with other tags keep the raw tag as their stage."""

    PLANNING = "planning"
    TENDER = "tender"
    AWARD = "award"
    UNKNOWN = "unknown"


class BuyerRef(BaseModel):
    """Contracting authority named on a release."""

    id: Optional[str] = None
    name: Optional[str] = None


class TenderValue(BaseModel):
    """Estimated contract value. Amounts are passed through from source unmodified."""

    amount: Optional[float] = None
    currency: str = "GBP"
    min: Optional[float] = None
    max: Optional[float] = None


class DateWindow(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class TenderRecord(BaseModel):
    """Canonical tender record produced by all source connectors."""

    external_id: str = Field(..., description="OCDS ocid; the only identity field")
    revision_id: Optional[str] = Field(default=None, description="Source release id (informational)")
    source: str = Field(default="find-a-tender", description="Connector that produced the record")

    title: str = "Untitled"
    slug: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    stage: str = Stage.UNKNOWN.value

    buyer: BuyerRef = Field(default_factory=BuyerRef)
    value: TenderValue = Field(default_factory=TenderValue)

    published_at: Optional[datetime] = None
    tender_window: DateWindow = Field(default_factory=DateWindow)
    contract_window: DateWindow = Field(default_factory=DateWindow)

    classification_codes: list[str] = Field(default_factory=list)
    region: Optional[str] = None

    raw: dict[str, Any] = Field(default_factory=dict, description="Original release, stored verbatim")
