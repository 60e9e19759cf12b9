"""Errors raised by source connectors."""

from typing import Optional


class UpstreamError(RuntimeError):
    """Source API answered with a non-retryable, non-success status."""

    def __init__(self, status_code: int, body: str = "", url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"API error: {status_code} - {body[:200]}")


class SourceUnavailableError(RuntimeError):
    """Source kept returning 429/503 past the configured retry ceiling."""

    def __init__(self, status_code: int, attempts: int, url: Optional[str] = None):
        self.status_code = status_code
        self.attempts = attempts
        self.url = url
        super().__init__(f"Source unavailable: HTTP {status_code} after {attempts} attempts")
