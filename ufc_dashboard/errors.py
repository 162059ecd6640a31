"""Exceptions raised by the dashboard client."""
from typing import Optional


class DashboardError(Exception):
    """Base exception for dashboard client errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AuthInvalid(DashboardError):
    """Credential is absent, malformed or expired. The session has been logged out."""

    def __init__(self, message: str = "Your session has expired. Please log in again.", reason: str = "expired"):
        super().__init__(message, details={"reason": reason})
        self.reason = reason


class TransientNetworkError(DashboardError):
    """A request kept failing after the retry budget was spent."""

    def __init__(self, resource: str, attempts: int, original_error: Optional[str] = None):
        super().__init__(
            message=f"{original_error or 'network error'} (gave up after {attempts} attempts)",
            details={"resource": resource, "attempts": attempts, "original_error": original_error}
        )
        self.resource = resource
        self.attempts = attempts


class ApiError(DashboardError):
    """The server rejected a request (non-retryable 4xx)."""

    def __init__(self, message: str, status_code: int, resource: Optional[str] = None):
        super().__init__(message, details={"status_code": status_code, "resource": resource})
        self.status_code = status_code
        self.resource = resource


class FormValidationError(DashboardError):
    """Client-side field checks failed; nothing was sent."""

    def __init__(self, messages: list[str]):
        super().__init__(
            message="; ".join(messages) or "Invalid input",
            details={"validation_errors": messages}
        )
        self.messages = messages


class StaleViewError(DashboardError):
    """A result arrived for a view that has already been closed."""
