"""Find a Tender connector."""

from .connector import FindATenderConnector

__all__ = ["FindATenderConnector"]
