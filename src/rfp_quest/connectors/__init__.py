"""Source connectors for tender ingestion."""

from rfp_quest.connectors.base import BaseSource
from rfp_quest.connectors.errors import SourceUnavailableError, UpstreamError
from rfp_quest.connectors.registry import ConnectorRegistry

__all__ = ["BaseSource", "ConnectorRegistry", "SourceUnavailableError", "UpstreamError"]
