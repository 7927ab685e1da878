"""Domain exceptions mapped to the JSON error envelope.

Every error the API reports to a caller is an :class:`ApiError`. The app
factory registers a single handler that renders it as::

    {"error": {"type": ..., "code": ..., "message": ..., "details": {...}}}
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Domain-level base exception so we can map to JSON responses easily."""

    error_type: str = "TranscriptionError"
    default_status: int = 500
    default_code: str = "TRANSCRIPTION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = details

    def to_envelope(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": self.error_type,
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            body["details"] = self.details
        return {"error": body}


class ValidationError(ApiError):
    """The caller supplied missing or malformed input."""

    error_type = "ValidationError"
    default_status = 400
    default_code = "MISSING_INPUT"


class AuthenticationError(ApiError):
    """Missing, invalid or expired session token or nonce."""

    error_type = "AuthenticationError"
    default_status = 401
    default_code = "INVALID_TOKEN"


class TranscriptionError(ApiError):
    """The vendor call failed or returned an unusable shape."""

    error_type = "TranscriptionError"
    default_status = 500
    default_code = "TRANSCRIPTION_FAILED"


class DeepgramError(Exception):
    """Raised by the Deepgram client when the upstream call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MetadataError(Exception):
    """Raised when the starter metadata cannot be produced."""
