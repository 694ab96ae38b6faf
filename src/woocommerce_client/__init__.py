"""
WooCommerce Python client public API surface.

Re-exports the connection, the request types, the dispatcher, the planners
and the error taxonomy so callers can ``from woocommerce_client import ...``.
"""

from .config import ConnectionConfig, Credentials
from .connection import Connection
from .dispatcher import Dispatcher, Outcome, ProgressBar
from .models import Attribute, Category, Image, Item, Product, Tag
from .planners import PagingMode, merge_pages, plan_batches, plan_pages, plan_resource_pages
from .recovery import ExponentialBackoff, FixedBackoff, RetryPolicy
from .request import BatchPostRequest, GetRequest, PostRequest, Request
from .runtime.errors import (
    ConfigurationError,
    CountUnavailableError,
    DispatchCancelledError,
    DispatchError,
    ErrorCode,
    HTTPStatusError,
    QueueBusyError,
    RequestExhaustedError,
    SerializationError,
    TransportError,
    WooError,
)
from .transport import HttpTransport, TransportResponse

__version__ = "0.1.0"

__all__ = [
    "Connection",
    "ConnectionConfig",
    "Credentials",
    "Dispatcher",
    "Outcome",
    "ProgressBar",
    "Request",
    "GetRequest",
    "PostRequest",
    "BatchPostRequest",
    "PagingMode",
    "plan_pages",
    "plan_resource_pages",
    "plan_batches",
    "merge_pages",
    "RetryPolicy",
    "ExponentialBackoff",
    "FixedBackoff",
    "HttpTransport",
    "TransportResponse",
    "Item",
    "Product",
    "Category",
    "Attribute",
    "Image",
    "Tag",
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
]
