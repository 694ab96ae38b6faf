"""
Tests for retry policies and error classification.
"""

import threading
from unittest.mock import Mock, patch

import pytest

from woocommerce_client.recovery.retry import ExponentialBackoff, FixedBackoff, policy_from_config
from woocommerce_client.config import ConnectionConfig
from woocommerce_client.runtime.errors import (
    DispatchCancelledError,
    HTTPStatusError,
    RequestExhaustedError,
    SerializationError,
    TransportError,
    is_retriable,
)


def flaky(failures, error=None, result=b"ok"):
    """Callable failing ``failures`` times before returning ``result``."""
    state = {"calls": 0}

    def func():
        state["calls"] += 1
        if state["calls"] <= failures:
            raise error or TransportError("down")
        return result

    func.state = state
    return func


class TestFixedBackoff:

    def test_first_attempt_success(self):
        policy = FixedBackoff(max_attempts=3)
        func = flaky(0)
        assert policy.execute(func, "GET /x") == b"ok"
        assert func.state["calls"] == 1
        assert policy.get_stats()["total_retries"] == 0

    def test_success_on_last_attempt(self):
        policy = FixedBackoff(max_attempts=3)
        func = flaky(2)
        assert policy.execute(func, "GET /x") == b"ok"
        assert func.state["calls"] == 3

    def test_exhaustion_wraps_last_error(self):
        policy = FixedBackoff(max_attempts=3)
        last = TransportError("third")
        errors = iter([TransportError("first"), TransportError("second"), last])

        def func():
            raise next(errors)

        with pytest.raises(RequestExhaustedError) as exc_info:
            policy.execute(func, "GET /x")

        assert exc_info.value.last_error is last
        assert exc_info.value.attempts == 3
        assert exc_info.value.endpoint == "GET /x"
        assert policy.get_stats()["total_failures"] == 1

    def test_single_attempt_policy(self):
        policy = FixedBackoff(max_attempts=1)
        func = flaky(1)
        with pytest.raises(RequestExhaustedError):
            policy.execute(func)
        assert func.state["calls"] == 1

    def test_permanent_error_stops_early(self):
        policy = FixedBackoff(max_attempts=5)
        func = flaky(5, error=HTTPStatusError(400, b"bad"))
        with pytest.raises(RequestExhaustedError) as exc_info:
            policy.execute(func)
        assert func.state["calls"] == 1
        assert exc_info.value.last_error.status == 400

    def test_client_errors_retried_when_enabled(self):
        policy = FixedBackoff(max_attempts=3, retry_client_errors=True)
        func = flaky(2, error=HTTPStatusError(409))
        assert policy.execute(func) == b"ok"

    def test_delay_between_attempts(self):
        policy = FixedBackoff(max_attempts=2, delay=0.25)
        with patch("woocommerce_client.recovery.retry.time.sleep") as sleep:
            policy.execute(flaky(1))
        sleep.assert_called_once_with(0.25)


class TestExponentialBackoff:

    def test_delays_grow(self):
        policy = ExponentialBackoff(base_delay=0.1, factor=2.0, max_delay=0.3, jitter=False)
        assert policy.calculate_delay(1) == pytest.approx(0.1)
        assert policy.calculate_delay(2) == pytest.approx(0.2)
        assert policy.calculate_delay(3) == pytest.approx(0.3)

    def test_jitter_stays_close(self):
        policy = ExponentialBackoff(jitter=True, jitter_factor=0.1)
        for _ in range(20):
            assert 0.95 <= policy.add_jitter(1.0) <= 1.05


class TestCancellation:

    def test_cancelled_before_first_attempt(self):
        cancel = threading.Event()
        cancel.set()
        func = Mock(return_value=b"ok")

        with pytest.raises(DispatchCancelledError):
            FixedBackoff().execute(func, "GET /x", cancel_event=cancel)
        func.assert_not_called()

    def test_cancelled_between_attempts(self):
        cancel = threading.Event()

        def func():
            cancel.set()
            raise TransportError("down")

        with pytest.raises(DispatchCancelledError):
            FixedBackoff(max_attempts=5).execute(func, "GET /x", cancel_event=cancel)


class TestClassification:

    @pytest.mark.parametrize("error,expected", [
        (TransportError("x"), True),
        (HTTPStatusError(500), True),
        (HTTPStatusError(503), True),
        (HTTPStatusError(429), True),
        (HTTPStatusError(408), True),
        (HTTPStatusError(400), False),
        (HTTPStatusError(404), False),
        (SerializationError("x"), False),
        (ValueError("x"), False),
    ])
    def test_is_retriable(self, error, expected):
        assert is_retriable(error) is expected

    def test_policy_from_config(self):
        assert isinstance(policy_from_config(ConnectionConfig()), FixedBackoff)
        policy = policy_from_config(ConnectionConfig(retry_delay=0.1, max_retries=5))
        assert isinstance(policy, ExponentialBackoff)
        assert policy.max_attempts == 5
