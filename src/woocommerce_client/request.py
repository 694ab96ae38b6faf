"""
Request types executed by the dispatcher.

The variant set is closed: GET, single-item POST and batch POST. Each request
is an immutable value that knows how to serialize itself and how to send
itself through a connection under the connection's retry policy.
"""

from __future__ import annotations
import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Mapping, Optional, Tuple

from .runtime.errors import ConfigurationError, SerializationError

if TYPE_CHECKING:
    from .connection import Connection


def encode_item(item: Any) -> Any:
    """Turn a payload item into a JSON-ready value."""
    if hasattr(item, "to_payload"):
        return item.to_payload()
    if hasattr(item, "model_dump"):
        return item.model_dump(mode="json", exclude_none=True, by_alias=True)
    if isinstance(item, Mapping):
        return dict(item)
    raise SerializationError(
        f"Cannot serialize payload of type {type(item).__name__}",
        details={"type": type(item).__name__},
    )


def dumps(value: Any) -> bytes:
    try:
        return json.dumps(value, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Payload is not JSON serializable: {e}", cause=e) from e


def item_id(item: Any) -> Optional[int]:
    if hasattr(item, "get_id"):
        return item.get_id()
    if isinstance(item, Mapping):
        return item.get("id") or None
    return None


class Request(ABC):
    """Base class for a unit of work against the backend."""

    endpoint: str
    method: ClassVar[str] = "GET"

    @abstractmethod
    def body(self) -> bytes:
        """
        Serialize the request body.

        Raises:
            SerializationError: If the payload cannot be encoded
        """

    def send(self, connection: Connection, cancel_event: Optional[threading.Event] = None) -> bytes:
        """
        Send this request, retrying under the connection's policy.

        The body is serialized once, before the first attempt; a serialization
        failure is raised immediately and consumes no attempt.

        Raises:
            SerializationError: Payload could not be encoded
            RequestExhaustedError: Every allowed attempt failed
            DispatchCancelledError: cancel_event was set between attempts
        """
        payload = self.body()
        return connection.retry_policy.execute(
            lambda: connection.execute(self.method, self.endpoint, payload),
            label=f"{self.method} {self.endpoint}",
            cancel_event=cancel_event,
        )


@dataclass(frozen=True)
class GetRequest(Request):
    """GET an endpoint, typically one page of a collection."""
    endpoint: str

    def body(self) -> bytes:
        return b""


@dataclass(frozen=True)
class PostRequest(Request):
    """POST a single item to the products, attributes or categories endpoint."""
    endpoint: str
    payload: Any
    method: ClassVar[str] = "POST"

    def body(self) -> bytes:
        return dumps(encode_item(self.payload))


@dataclass(frozen=True)
class BatchPostRequest(Request):
    """
    Batch of creations, updates and deletions for one resource.

    Create items must not carry an id (the backend assigns it), update items
    must, and deletions are ids only. Empty lists are left out of the body.
    """
    endpoint: str
    create: Tuple[Any, ...] = ()
    update: Tuple[Any, ...] = ()
    delete: Tuple[int, ...] = ()
    method: ClassVar[str] = "POST"

    def __post_init__(self):
        # frozen: store tuples so the request stays immutable
        object.__setattr__(self, "create", tuple(self.create))
        object.__setattr__(self, "update", tuple(self.update))
        try:
            delete = tuple(int(i) for i in self.delete)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Delete ids must be integers: {e}",
                details={"endpoint": self.endpoint},
                cause=e,
            ) from e
        object.__setattr__(self, "delete", delete)

        for item in self.create:
            if item_id(item):
                raise ConfigurationError(
                    f"Create items must not carry an id, got {item_id(item)}",
                    details={"endpoint": self.endpoint},
                )
        for item in self.update:
            if not item_id(item):
                raise ConfigurationError(
                    "Update items must carry an id",
                    details={"endpoint": self.endpoint},
                )

    def __len__(self) -> int:
        return len(self.create) + len(self.update) + len(self.delete)

    def envelope(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.create:
            result["create"] = [encode_item(item) for item in self.create]
        if self.update:
            result["update"] = [encode_item(item) for item in self.update]
        if self.delete:
            result["delete"] = list(self.delete)
        return result

    def body(self) -> bytes:
        return dumps(self.envelope())


__all__ = [
    "Request",
    "GetRequest",
    "PostRequest",
    "BatchPostRequest",
    "encode_item",
]
