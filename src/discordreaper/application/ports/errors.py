"""Error taxonomy shared by the pipeline and its adapters."""

from __future__ import annotations

from typing import Optional


class SourceError(RuntimeError):
    """Raised when the message source fails for a reason other than rate limiting."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(SourceError):
    """Raised when the source asks the caller to wait before retrying."""

    def __init__(self, retry_after: float, message: str = "Rate limited"):
        super().__init__(f"{message} (retry after {retry_after:.3f}s)", status_code=429)
        self.retry_after = retry_after


class DownloadError(RuntimeError):
    """Raised when an attachment cannot be fetched."""


class StorageError(RuntimeError):
    """Raised when a storage sink rejects or fails an upload."""


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""
