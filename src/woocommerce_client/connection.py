"""
Connection to a WooCommerce backend.

Holds credentials, the transport (and with it the cookie jar), the retry
policy and a single-use request queue. The queue is filled with ``push`` and
drained by ``execute_queue``; every dispatch pass empties it, whether the pass
succeeded or not.
"""

from __future__ import annotations
import logging
import threading
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from .config import ConnectionConfig, Credentials
from .dispatcher import Dispatcher, Outcome, ProgressBar, ProgressCallback
from .recovery.retry import RetryPolicy, policy_from_config
from .request import Request
from .runtime.errors import (
    ConfigurationError,
    CountUnavailableError,
    HTTPStatusError,
    QueueBusyError,
)
from .transport.http import HttpTransport, build_url


logger = logging.getLogger(__name__)

NOT_INITIALIZED = "Please initialize with your credentials first. Connection.init()"


class Connection:
    """
    Interface to the WooCommerce REST backend.

    Example:
        ```python
        conn = Connection()
        conn.init("https://shop.example.com", "ck_...", "cs_...")
        conn.push(GetRequest("/wp-json/wc/v3/products?per_page=10"))
        pages = conn.execute_queue(strict=False)
        ```
    """

    def __init__(self):
        self.initialized = False
        self.credentials: Optional[Credentials] = None
        self.config: Optional[ConnectionConfig] = None
        self.transport = None
        self.retry_policy: Optional[RetryPolicy] = None
        self._owns_transport = False
        self._queue: List[Request] = []
        self._queue_lock = threading.Lock()
        self._dispatching = False

    def init(
        self,
        domain: str,
        key: str,
        secret: str,
        batch_stride_size: Optional[int] = None,
        max_concurrent_requests: Optional[int] = None,
        max_retries: Optional[int] = None,
        transport=None,
        config: Optional[ConnectionConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> Connection:
        """
        Set credentials and tuning parameters. Must be called before anything else.

        Args:
            domain: Base URL of the shop, e.g. https://shop.example.com
            key: Consumer key
            secret: Consumer secret
            batch_stride_size: Max operations per batch request
            max_concurrent_requests: Worker count per dispatch pass
            max_retries: Attempts per request
            transport: Object with ``send(method, url, body, credentials)``;
                an HttpTransport is created when omitted
            config: Base configuration; explicit arguments override it
            retry_policy: Overrides the policy derived from the configuration

        Returns:
            self

        Raises:
            ConfigurationError: On missing credentials or invalid parameters
        """
        credentials = Credentials(domain, key, secret)
        credentials.validate()

        base = config or ConnectionConfig()
        overrides = {
            "batch_stride_size": batch_stride_size,
            "max_concurrent_requests": max_concurrent_requests,
            "max_retries": max_retries,
        }
        config = replace(base, **{k: v for k, v in overrides.items() if v is not None})

        # re-init: release the session this connection created before
        self.close()

        self.config = config
        self._owns_transport = transport is None
        if transport is None:
            transport = HttpTransport(
                timeout=config.timeout,
                verify_ssl=config.verify_ssl,
                user_agent=config.user_agent,
            )

        self.credentials = credentials
        self.transport = transport
        self.retry_policy = retry_policy or policy_from_config(self.config)
        self.initialized = True

        logger.info(
            f"Connection to {credentials.domain} initialized "
            f"(workers={self.config.max_concurrent_requests}, "
            f"retries={self.config.max_retries}, batch={self.config.batch_stride_size})"
        )
        return self

    def _require_init(self) -> None:
        if not self.initialized:
            raise ConfigurationError(NOT_INITIALIZED)

    @property
    def batch_stride_size(self) -> int:
        self._require_init()
        return self.config.batch_stride_size

    @property
    def max_concurrent_requests(self) -> int:
        self._require_init()
        return self.config.max_concurrent_requests

    @property
    def max_retries(self) -> int:
        self._require_init()
        return self.config.max_retries

    def build_link(self, endpoint: str) -> str:
        self._require_init()
        return build_url(self.credentials, endpoint)

    def _exchange(self, method: str, endpoint: str, body: bytes = b""):
        self._require_init()
        return self.transport.send(method, self.build_link(endpoint), body, self.credentials)

    def execute(self, method: str, endpoint: str, body: bytes = b"") -> bytes:
        """
        Perform one exchange and return the raw response body.

        Args:
            method: "GET" or "POST"
            endpoint: Path (and query) appended to the domain
            body: Raw request body

        Raises:
            ConfigurationError: Connection not initialized
            TransportError: Network failure
            HTTPStatusError: Status other than 200 or 201
        """
        response = self._exchange(method, endpoint, body)
        if response.status_code not in (200, 201):
            raise HTTPStatusError(response.status_code, response.body, method, endpoint)
        return response.body

    def count_items(self, endpoint: str) -> int:
        """
        Read the total item count of a collection from the response header.

        Args:
            endpoint: Collection endpoint, normally already limited to one item per page

        Raises:
            CountUnavailableError: Header missing or not an integer
            TransportError: Network failure
            HTTPStatusError: Status other than 200
        """
        self._require_init()
        header = self.config.total_header
        response = self._exchange("GET", endpoint)
        if response.status_code != 200:
            raise HTTPStatusError(response.status_code, response.body, "GET", endpoint)

        value = response.headers.get(header)
        if value is None:
            raise CountUnavailableError(endpoint, header)
        try:
            total = int(str(value).strip())
        except ValueError as e:
            raise CountUnavailableError(endpoint, header, value, cause=e) from e
        if total < 0:
            raise CountUnavailableError(endpoint, header, value)

        logger.debug(f"{endpoint} reports {total} items")
        return total

    # =========================================================================
    # Request queue
    # =========================================================================

    def push(self, request: Request) -> None:
        """
        Append a request to the queue for the next dispatch pass.

        Raises:
            ConfigurationError: Not initialized, or not a Request
            QueueBusyError: A dispatch pass is currently running
        """
        self._require_init()
        if not isinstance(request, Request):
            raise ConfigurationError(f"Expected a Request, got {type(request).__name__}")
        with self._queue_lock:
            if self._dispatching:
                raise QueueBusyError()
            self._queue.append(request)

    def push_many(self, requests: Iterable[Request]) -> None:
        for request in requests:
            self.push(request)

    @property
    def queue(self) -> Tuple[Request, ...]:
        self._require_init()
        with self._queue_lock:
            return tuple(self._queue)

    @property
    def queue_size(self) -> int:
        self._require_init()
        with self._queue_lock:
            return len(self._queue)

    def view_queue(self) -> List[bytes]:
        """
        Serialized bodies of the queued requests, as they would be sent.

        Raises:
            SerializationError: A queued payload cannot be encoded
        """
        return [request.body() for request in self.queue]

    def clear_queue(self) -> None:
        self._require_init()
        with self._queue_lock:
            if self._dispatching:
                raise QueueBusyError()
            self._queue = []

    def execute_queue_outcomes(
        self,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Outcome]:
        """
        Dispatch the queued requests and return per-slot outcomes.

        The queue is empty afterwards no matter how the pass ended.

        Raises:
            ConfigurationError: Not initialized
            QueueBusyError: Another pass is already running
        """
        self._require_init()
        dispatcher = Dispatcher(self, self.config.max_concurrent_requests)

        with self._queue_lock:
            if self._dispatching:
                raise QueueBusyError()
            self._dispatching = True
            jobs = self._queue

        try:
            return dispatcher.run(jobs, progress=progress, cancel_event=cancel_event)
        finally:
            with self._queue_lock:
                self._queue = []
                self._dispatching = False

    def execute_queue(
        self,
        strict: bool = True,
        verbose: bool = False,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Optional[bytes]]:
        """
        Execute all queued requests and return their raw responses in queue order.

        Args:
            strict: Raise DispatchError if any request failed
            verbose: Print a progress bar to stderr (ignored if progress is given)
            progress: Callback receiving (completed, total)
            cancel_event: Set to abort the pass between requests and retries

        Returns:
            One raw body per queued request; failed slots are None

        Raises:
            DispatchError: strict mode and at least one request failed;
                ``results`` holds the partial bodies
        """
        if progress is None and verbose:
            progress = ProgressBar()
        outcomes = self.execute_queue_outcomes(progress=progress, cancel_event=cancel_event)
        return Dispatcher.collect(outcomes, strict=strict)

    def close(self) -> None:
        """Close the transport if this connection created it."""
        if self._owns_transport and self.transport is not None:
            self.transport.close()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
