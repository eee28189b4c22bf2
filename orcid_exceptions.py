"""
Custom exceptions for ORCID API operations.
"""

from typing import Optional


class ORCIDAPIError(Exception):
    """Base exception for all ORCID API-related errors."""

    pass


class ORCIDValidationError(ORCIDAPIError):
    """Raised when input validation fails."""

    pass


class UnsupportedPathError(ORCIDValidationError):
    """Raised when a resource path cannot be routed to a fetcher."""

    pass


class MissingCredentialError(ORCIDAPIError):
    """Raised when no bearer token is configured. No request is sent."""

    pass


class CancelledError(ORCIDAPIError):
    """Raised when the caller's cancel token fires while a call is suspended."""

    pass


class ORCIDNetworkError(ORCIDAPIError):
    """Raised when a request fails at the transport level and is not retried."""

    pass


class TransientError(ORCIDAPIError):
    """Retryable failure: connection error, timeout, HTTP 408, 429 or 5xx."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetriesExhaustedError(ORCIDAPIError):
    """Raised when every allowed attempt failed with a transient error."""

    def __init__(self, last_error: TransientError, attempts: int):
        super().__init__(f"max retries exceeded after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class RemoteRejectedError(ORCIDAPIError):
    """Raised for a non-retryable, non-200 response."""

    def __init__(self, status_code: int, body: bytes, reason: str = ""):
        self.status_code = status_code
        self.body = body
        self.reason = reason
        text = body.decode("utf-8", errors="replace") if body else ""
        super().__init__(f"HTTP {status_code} {reason}".rstrip() + f" - {text}")


class DecodeError(ORCIDAPIError):
    """Raised when API response data is malformed or has an unexpected shape."""

    pass
