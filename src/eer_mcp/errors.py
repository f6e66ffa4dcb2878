"""Error taxonomy shared by the gateway, the normalizers and the tool layer.

Every error knows how to render itself as the structured failure payload that
tools return to MCP callers, so a failed invocation always produces a
well-formed response instead of an unhandled fault.
"""

from __future__ import annotations

from typing import Optional


class AdapterError(Exception):
    """Base class for all adapter failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def error_type(self) -> str:
        return type(self).__name__

    def to_result(self) -> dict:
        """Return the failure payload sent back to the caller."""
        return {
            "error": True,
            "errorType": self.error_type,
            "message": self.message,
        }


class ValidationError(AdapterError):
    """Tool input violates its declared contract.

    Raised before any backend request is made.
    """

    def __init__(self, field: str, message: str, expected: Optional[str] = None) -> None:
        self.field = field
        self.expected = expected
        text = f"Invalid value for '{field}': {message}"
        if expected:
            text += f" (expected: {expected})"
        super().__init__(text)

    def to_result(self) -> dict:
        result = super().to_result()
        result["field"] = self.field
        return result


class AuthError(AdapterError):
    """No session token is configured."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "SESSION_ID is not configured. Set it in the .env file or call update_session_id."
        )


class SessionExpiredError(AdapterError):
    """The backend reports that the session token is no longer valid."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "The session has expired. Update SESSION_ID with a fresh JSESSIONID "
            "(update_session_id tool or the .env file)."
        )


class BackendError(AdapterError):
    """The backend replied but reported a business failure."""


class NotFoundError(AdapterError):
    """The backend reported success but the expected payload is missing."""


class TransportError(AdapterError):
    """The backend could not be reached or returned an unreadable reply."""
