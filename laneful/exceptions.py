"""
exceptions.py - SDK exception hierarchy

Every error raised by the client, the email model and the webhook parser
derives from LanefulException and carries the HTTP status that a web layer
should answer with:

- ValidationException   -> 422 (bad client input)
- WebhookPayloadError   -> 400 (malformed webhook body)
- WebhookSignatureError -> 401 (missing/invalid webhook signature)
- ApiException          -> status returned by the API
- HttpException         -> transport failure (0), 404, undecodable body
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LanefulException(Exception):
    """
    Base exception for all SDK errors.

    Attributes:
        message: Human-readable explanation
        status_code: HTTP status code associated with the failure
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Error body suitable for a JSON response."""
        return {
            "error": self.message,
            "type": type(self).__name__,
            "status": self.status_code,
        }


class ValidationException(LanefulException):
    """Raised when input validation fails."""

    status_code = 422


class WebhookPayloadError(ValidationException):
    """Raised when a webhook payload is empty, malformed or fails event validation."""

    status_code = 400


class WebhookSignatureError(LanefulException):
    """Raised when a webhook request is missing a signature or the signature does not match."""

    status_code = 401


class ApiException(LanefulException):
    """Raised when the API returns an error response."""

    def __init__(self, message: str, status_code: int, error_message: str):
        super().__init__(message, status_code)
        self.error_message = error_message

    def __str__(self) -> str:
        return f"{self.message} ({self.status_code}): {self.error_message}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["detail"] = self.error_message
        return data


class HttpException(LanefulException):
    """Raised when HTTP communication fails. status_code is 0 when no response was received."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message, status_code)
