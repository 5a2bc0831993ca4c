"""Custom Exception Hierarchy.

Typed exceptions raised by the request pipeline, the signer and the
feed relay. Nothing in this package retries; every error below is
terminal for the call that raised it.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Error codes for the Coinbase Pro client."""

    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    API_ERROR = "API_ERROR"
    ENCODING_ERROR = "ENCODING_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class CoinbaseProError(Exception):
    """Base exception for all Coinbase Pro client errors.

    Callers can catch this single type to handle every failure the
    library reports through its public surface.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.API_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or []


class TransportError(CoinbaseProError):
    """Raised when the network connection fails (HTTP or WebSocket)."""

    def __init__(self, message: str = "Transport failure"):
        super().__init__(message, ErrorCode.TRANSPORT_ERROR)


class APIError(CoinbaseProError):
    """Raised when the exchange answers with a status >= 300.

    Carries the status code and the server-provided message.
    """

    def __init__(self, status_code: int, message: str = ""):
        super().__init__(message, ErrorCode.API_ERROR)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.message} ({self.status_code})"


class EncodingError(CoinbaseProError):
    """Raised for malformed secrets and JSON encode/decode failures."""

    def __init__(self, message: str = "Encoding failed"):
        super().__init__(message, ErrorCode.ENCODING_ERROR)


class ValidationError(CoinbaseProError):
    """Raised when caller-supplied parameters fail local validation.

    Never reaches the network.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
    ):
        details = [{"field": field, "issue": message}] if field else None
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)
        self.field = field


class FeedClosed(Exception):
    """Raised by Feed.get() once the feed is closed and drained."""


class ShapeCaptureError(RuntimeError):
    """Raised by the development-mode wrapper when a payload cannot be
    decoded or re-encoded for shape capture.

    Deliberately outside CoinbaseProError: it signals a tooling bug and
    should surface immediately rather than be handled.
    """
