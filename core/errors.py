# core/errors.py
from typing import Optional


class ScrobbleDashError(Exception):
    pass


class ConfigurationError(ScrobbleDashError):
    """Credentials are missing or blank; the dashboard cannot fetch anything."""


class TransientFetchError(ScrobbleDashError):
    """Non-2xx reply, malformed payload or a dropped connection."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EnrichmentFailure(ScrobbleDashError):
    def __init__(self, artist: str, cause: Optional[BaseException] = None):
        super().__init__(f"artwork lookup failed for '{artist}': {cause}")
        self.artist = artist
        self.cause = cause


def truncate(text: Optional[str], limit: int = 300) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
