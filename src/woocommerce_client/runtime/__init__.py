"""Runtime helpers for the WooCommerce client"""

from .errors import (
    ErrorCode,
    WooError,
    ConfigurationError,
    QueueBusyError,
    TransportError,
    HTTPStatusError,
    SerializationError,
    CountUnavailableError,
    RequestExhaustedError,
    DispatchCancelledError,
    DispatchError,
    is_retriable,
)

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
