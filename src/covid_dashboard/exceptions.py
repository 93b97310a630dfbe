"""
Exception classes for the COVID-19 dashboard pipeline.

All exceptions inherit from DashboardError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DashboardError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DashboardError):
    """Raised when caller input is unusable (empty country code, bad date)."""

    pass


class NetworkError(DashboardError):
    """Raised when network operations fail."""

    pass


class RateLimitError(NetworkError):
    """Raised when an upstream API answers with HTTP 429."""

    pass


class ProtocolError(DashboardError):
    """Raised when a response body cannot be decoded as JSON."""

    pass


class MalformedPayloadError(ProtocolError):
    """Raised when a decoded payload matches none of the accepted shapes."""

    pass


class FetchError(DashboardError):
    """
    Raised at a pipeline stage boundary when retrieval fails.

    ``stage`` is either ``"countries"`` or ``"historical"``; the original
    failure is available as ``__cause__``.
    """

    def __init__(
        self,
        stage: str,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.stage = stage
        super().__init__(
            code=f"fetch_{stage}",
            message=message or f"Failed to fetch {stage} data",
            details=details,
        )
