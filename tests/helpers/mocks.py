"""
Mock implementations for testing.

Provides a scripted, thread-safe transport so dispatcher and connection tests
run without a network.
"""

from __future__ import annotations
import json
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from woocommerce_client.runtime.errors import TransportError
from woocommerce_client.transport.http import TransportResponse


Call = Tuple[str, str, bytes]


class MockTransport:
    """
    Mock transport with configurable failures, delays and responses.

    By default every request succeeds with a body echoing the request path and
    query, which makes slot ordering easy to assert.
    """

    def __init__(self, total: Optional[int] = None):
        """
        Initialize mock transport.

        Args:
            total: Value served in the X-WP-Total header, None to omit it
        """
        self.total = total
        self.calls: List[Call] = []
        self.responder: Optional[Callable[[str, str, bytes], TransportResponse]] = None
        self._failures: Dict[str, List] = {}
        self._delays: Dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def set_failures(self, count: int, match: str = "", status: Optional[int] = None):
        """
        Fail the next ``count`` calls whose URL contains ``match``.

        Args:
            count: Number of failing calls
            match: URL substring selecting the calls
            status: HTTP status to answer with; None raises TransportError
        """
        with self._lock:
            self._failures[match] = [count, status]

    def set_delay(self, match: str, seconds: float):
        """Sleep before answering calls whose URL contains ``match``."""
        self._delays[match] = seconds

    def calls_matching(self, match: str) -> List[Call]:
        with self._lock:
            return [call for call in self.calls if match in call[1]]

    def send(self, method: str, url: str, body: bytes, credentials) -> TransportResponse:
        with self._lock:
            self.calls.append((method, url, body))
            failure = None
            for match, state in self._failures.items():
                if match in url and state[0] > 0:
                    state[0] -= 1
                    failure = state
                    break

        for match, seconds in self._delays.items():
            if match in url:
                time.sleep(seconds)

        if failure is not None:
            if failure[1] is None:
                raise TransportError(f"Mock network error for {url}")
            return TransportResponse(b'{"code":"mock_error"}', failure[1], {})

        if self.responder is not None:
            return self.responder(method, url, body)

        headers = {}
        if self.total is not None:
            headers["X-WP-Total"] = str(self.total)
        return TransportResponse(echo_path(url).encode("utf-8"), 200, headers)


def echo_path(url: str) -> str:
    """Path and query of a URL without the consumer credentials."""
    parsed = urlparse(url)
    query = [
        f"{k}={v[0]}" for k, v in parse_qs(parsed.query).items()
        if k not in ("consumer_key", "consumer_secret")
    ]
    return parsed.path + ("?" + "&".join(query) if query else "")


def products_page_responder(products: List[dict]):
    """Serve a product collection honouring offset/page and per_page."""

    def respond(method: str, url: str, body: bytes) -> TransportResponse:
        params = {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}
        per_page = int(params.get("per_page", 10))
        if "page" in params:
            start = (int(params["page"]) - 1) * per_page
        else:
            start = int(params.get("offset", 0))
        page = products[start:start + per_page]
        return TransportResponse(
            json.dumps(page).encode("utf-8"),
            200,
            {"X-WP-Total": str(len(products))},
        )

    return respond
