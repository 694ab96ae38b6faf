"""
HTTP transport for the WooCommerce REST API.

Performs single exchanges over a shared ``requests.Session``. The session's
cookie jar persists cookies between calls (the backend may pin a client to one
origin after the first exchange) and is internally locked, so concurrent
workers can share one transport.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlencode

import requests
from requests.auth import HTTPBasicAuth
from requests.structures import CaseInsensitiveDict

from ..config import Credentials
from ..runtime.errors import TransportError


logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Raw result of one HTTP exchange."""
    body: bytes
    status_code: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)

    @property
    def ok(self) -> bool:
        return self.status_code in (200, 201)


def build_url(credentials: Credentials, endpoint: str) -> str:
    """
    Resolve an endpoint against the credential domain.

    Secure URLs carry the consumer key and secret as query parameters instead
    of an Authorization header.
    """
    url = credentials.domain + endpoint
    if url.startswith("https"):
        url += "&" if "?" in url else "?"
        url += urlencode({
            "consumer_key": credentials.key,
            "consumer_secret": credentials.secret,
        })
    return url


class HttpTransport:
    """
    requests-based transport.

    Example:
        ```python
        transport = HttpTransport(timeout=10)
        response = transport.send("GET", url, b"", credentials)
        ```
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the transport.

        Args:
            session: Optional requests.Session for connection pooling
            timeout: Request timeout in seconds
            verify_ssl: Verify TLS certificates
            user_agent: User-Agent header value
        """
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._user_agent = user_agent

    @property
    def cookies(self) -> requests.cookies.RequestsCookieJar:
        return self._session.cookies

    def send(self, method: str, url: str, body: bytes, credentials: Credentials) -> TransportResponse:
        """
        Perform one HTTP exchange.

        Args:
            method: HTTP method
            url: Fully resolved URL (see build_url)
            body: Request body, may be empty
            credentials: Used for header auth on non-secure URLs

        Returns:
            TransportResponse with the raw body, status and headers

        Raises:
            TransportError: On any network-level failure
        """
        headers = {"Content-Type": "application/json"}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        auth = None
        if not url.startswith("https"):
            auth = HTTPBasicAuth(credentials.key, credentials.secret)

        try:
            response = self._session.request(
                method,
                url,
                data=body or None,
                headers=headers,
                auth=auth,
                timeout=self._timeout,
                verify=self._verify_ssl,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} request failed: {e}", cause=e) from e

        logger.debug(f"{method} {response.status_code} ({len(response.content)} bytes)")
        return TransportResponse(
            body=response.content,
            status_code=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
        )

    def close(self) -> None:
        """Close the HTTP session if owned by this transport."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
