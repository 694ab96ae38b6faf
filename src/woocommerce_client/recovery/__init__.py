"""
Error recovery components for the WooCommerce client.

Provides the retry policies every request runs under.
"""

from .retry import RetryPolicy, ExponentialBackoff, FixedBackoff, policy_from_config

__all__ = [
    "RetryPolicy",
    "ExponentialBackoff",
    "FixedBackoff",
    "policy_from_config",
]
