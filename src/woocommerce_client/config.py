"""
Connection configuration.

Credentials are immutable once created; tuning parameters are validated up
front so a bad value surfaces before any request is sent.
"""

from __future__ import annotations
from dataclasses import dataclass

from .runtime.errors import ConfigurationError


@dataclass(frozen=True)
class Credentials:
    """Backend base URL and the consumer key/secret pair."""

    domain: str
    key: str
    secret: str

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "domain", (self.domain or "").rstrip("/"))

    def validate(self) -> None:
        """Raise ConfigurationError unless domain, key and secret are all set."""
        missing = [name for name in ("domain", "key", "secret") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing credentials: {', '.join(missing)}",
                details={"missing": missing},
            )

    @property
    def is_secure(self) -> bool:
        return self.domain.startswith("https")

    def __repr__(self) -> str:
        return f"Credentials(domain={self.domain!r}, key={self.key[:6]!r}..., secret=***)"


@dataclass
class ConnectionConfig:
    """Configuration for a WooCommerce connection."""

    max_retries: int = 3
    batch_stride_size: int = 16
    max_concurrent_requests: int = 8
    page_size: int = 100
    timeout: float = 30.0
    retry_delay: float = 0.0
    retry_backoff: float = 2.0
    max_retry_delay: float = 30.0
    retry_client_errors: bool = False
    total_header: str = "X-WP-Total"
    verify_ssl: bool = True
    user_agent: str = "woocommerce-python-client/0.1.0"

    def __post_init__(self):
        """Validate configuration parameters."""
        for name in ("max_retries", "batch_stride_size", "max_concurrent_requests", "page_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.retry_delay < 0 or self.max_retry_delay < 0:
            raise ConfigurationError("retry delays must not be negative")
        if self.retry_backoff < 1:
            raise ConfigurationError("retry_backoff must be at least 1")
