"""
WooCommerce client error model.

Every failure the client reports derives from :class:`WooError`, which carries
a stable :class:`ErrorCode`, optional structured details and the underlying
cause. Errors raised by a single request are attributed to that request's slot
by the dispatcher; only configuration errors abort a dispatch before it starts.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List, Sequence
from enum import IntEnum


class ErrorCode(IntEnum):
    """Client error codes."""

    OK = 0
    UNKNOWN = 1

    # Setup errors (100-199)
    CONFIGURATION = 100
    QUEUE_BUSY = 101

    # Network errors (200-299)
    NETWORK_ERROR = 200
    HTTP_STATUS = 201

    # Payload errors (300-399)
    SERIALIZATION = 300
    COUNT_UNAVAILABLE = 301

    # Dispatch errors (400-499)
    REQUEST_EXHAUSTED = 400
    DISPATCH_FAILED = 401
    CANCELLED = 402


class WooError(Exception):
    """
    Base class for all client errors.

    Provides a code, free-form details and the exception that caused it.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a client error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ConfigurationError(WooError):
    """Operation attempted before initialization, or an invalid tuning parameter."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CONFIGURATION, details, cause)


class QueueBusyError(ConfigurationError):
    """The request queue was touched while a dispatch pass was running."""

    def __init__(self, message: str = "Request queue is being dispatched",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = ErrorCode.QUEUE_BUSY


class TransportError(WooError):
    """Network-level failure reaching the backend."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NETWORK_ERROR, details, cause)


class HTTPStatusError(WooError):
    """Backend answered with a status other than 200 or 201."""

    def __init__(self, status: int, body: bytes = b"", method: str = "", endpoint: str = ""):
        self.status = status
        self.body = body
        self.method = method
        self.endpoint = endpoint
        text = body.decode("utf-8", errors="replace") if body else ""
        super().__init__(
            f"{method} {endpoint} failed with HTTP {status}".strip(),
            ErrorCode.HTTP_STATUS,
            {"status": status, "body": text[:500]} if text else {"status": status},
        )

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def is_transient(self) -> bool:
        """5xx, request timeout and rate limiting may clear up on their own."""
        return self.is_server_error or self.status in (408, 429)


class SerializationError(WooError):
    """Payload could not be encoded."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.SERIALIZATION, details, cause)


class CountUnavailableError(WooError):
    """Total-count header missing or malformed."""

    def __init__(self, endpoint: str, header: str, value: Optional[str] = None,
                 cause: Optional[Exception] = None):
        self.endpoint = endpoint
        self.header = header
        self.value = value
        super().__init__(
            f"Unable to read total item count from {header} for {endpoint}",
            ErrorCode.COUNT_UNAVAILABLE,
            {"endpoint": endpoint, "header": header, "value": value},
            cause,
        )


class RequestExhaustedError(WooError):
    """A single request failed on every attempt it was allowed."""

    def __init__(self, endpoint: str, last_error: Exception, attempts: int):
        self.endpoint = endpoint
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"Request to {endpoint} failed after {attempts} attempt(s)",
            ErrorCode.REQUEST_EXHAUSTED,
            {"endpoint": endpoint, "attempts": attempts},
            last_error,
        )


class DispatchCancelledError(WooError):
    """The dispatch pass was cancelled before this request completed."""

    def __init__(self, message: str = "Dispatch cancelled", endpoint: Optional[str] = None):
        self.endpoint = endpoint
        super().__init__(message, ErrorCode.CANCELLED,
                         {"endpoint": endpoint} if endpoint else None)


class DispatchError(WooError):
    """
    Aggregate failure of a strict dispatch pass.

    ``results`` holds the raw bodies gathered in queue order, with ``None`` in
    every failed slot; ``errors`` maps slot index to the error for that slot.
    """

    def __init__(self, errors: Dict[int, Exception], results: Sequence[Optional[bytes]]):
        self.errors = dict(errors)
        self.results: List[Optional[bytes]] = list(results)
        first_index = min(self.errors) if self.errors else None
        first = self.errors.get(first_index) if first_index is not None else None
        super().__init__(
            f"{len(self.errors)} of {len(self.results)} requests failed",
            ErrorCode.DISPATCH_FAILED,
            {"failed_slots": sorted(self.errors)},
            first,
        )

    @property
    def first_error(self) -> Optional[Exception]:
        return self.cause


def is_retriable(error: Exception, retry_client_errors: bool = False) -> bool:
    """
    Check if an error is worth another attempt.

    Args:
        error: Exception raised by an attempt
        retry_client_errors: Also retry 4xx responses

    Returns:
        True if the request should be retried
    """
    if isinstance(error, TransportError):
        return True
    if isinstance(error, HTTPStatusError):
        return error.is_transient or retry_client_errors
    return False


__all__ = [
    "ErrorCode",
    "WooError",
    "ConfigurationError",
    "QueueBusyError",
    "TransportError",
    "HTTPStatusError",
    "SerializationError",
    "CountUnavailableError",
    "RequestExhaustedError",
    "DispatchCancelledError",
    "DispatchError",
    "is_retriable",
]
