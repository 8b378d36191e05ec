"""Error taxonomy for the travel data core.

Every failure that crosses the core boundary is one of the classes below.
Each carries a stable `code` and the HTTP status a REST layer should map it
to, so the outer layer never has to inspect messages or upstream exceptions.
"""

from __future__ import annotations

from typing import Any, Optional


class TravelDataError(Exception):
    """Base class for all errors raised by the core."""

    code: str = "CM000"
    http_status: int = 500
    default_message: str = "Unexpected travel data error."

    def __init__(self, message: Optional[str] = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        """Return a JSON-safe description for an outer error handler."""
        payload = {"code": self.code, "message": self.message, "status": self.http_status}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidInput(TravelDataError):
    """Caller supplied out-of-range or blank parameters. Never retried."""
    code = "CM001"
    http_status = 400
    default_message = "Invalid request parameters."


class InvalidCategory(TravelDataError):
    """Spot category outside the supported set."""
    code = "SP002"
    http_status = 400
    default_message = "Unsupported spot category."


class SpotNotFound(TravelDataError):
    """The places provider answered, but knows no such place."""
    code = "SP001"
    http_status = 404
    default_message = "Spot not found."


class DataUnavailable(TravelDataError):
    """Upstream providers and every cache fallback are exhausted."""
    code = "EX002"
    http_status = 503
    default_message = "Requested data is currently unavailable."


class UpstreamError(TravelDataError):
    """A provider call failed after retries (transport, HTTP status or payload)."""
    code = "EX001"
    http_status = 502
    default_message = "External API call failed."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        provider: str = "unknown",
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        super().__init__(message, details=details)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["provider"] = self.provider
        if self.status_code is not None:
            payload["upstream_status"] = self.status_code
        return payload
