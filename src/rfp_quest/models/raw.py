"""Raw OCDS release representation before normalization."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawRelease(BaseModel):
    """
    Flexible raw record from a source connector.
    Wraps one OCDS release exactly as the API returned it; a malformed
    entry (null, string, list) is kept as-is and rejected at normalization.
    """

    model_config = ConfigDict(extra="allow")

    data: Any = Field(default_factory=dict)

    @property
    def ocid(self) -> Optional[str]:
        return self.data.get("ocid") if isinstance(self.data, dict) else None


class ReleasePage(BaseModel):
    """One page of releases plus the cursor for the next page (None when exhausted)."""

    records: list[RawRelease] = Field(default_factory=list)
    next_page_token: Optional[str] = None
