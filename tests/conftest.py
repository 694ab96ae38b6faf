"""
Test bootstrap:
- Make tests/helpers importable as ``helpers``
- Provide connection and transport fixtures
"""
import pathlib
import sys

import pytest

TESTS_DIR = pathlib.Path(__file__).parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from helpers import MockTransport  # noqa: E402

from woocommerce_client import Connection  # noqa: E402


@pytest.fixture
def transport():
    """Mock transport reporting 25 items in every collection."""
    return MockTransport(total=25)


@pytest.fixture
def connection(transport):
    """Initialized connection over the mock transport."""
    conn = Connection()
    conn.init(
        "https://shop.example.com",
        "ck_test",
        "cs_test",
        batch_stride_size=16,
        max_concurrent_requests=4,
        max_retries=3,
        transport=transport,
    )
    return conn


@pytest.fixture
def http_connection(transport):
    """Initialized connection to a plain-http domain."""
    conn = Connection()
    conn.init("http://shop.local", "ck_test", "cs_test", transport=transport)
    return conn
