"""Transport layer for the WooCommerce client."""

from .http import HttpTransport, TransportResponse, build_url

__all__ = ["HttpTransport", "TransportResponse", "build_url"]
