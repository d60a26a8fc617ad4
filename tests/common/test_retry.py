"""
Retry executor tests
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from x402_sbc.utils import retry as retry_module
from x402_sbc.utils.retry import RetryOptions, backoff_delay, is_retryable, with_retry


@pytest.fixture
def sleeps(monkeypatch):
    """Record requested back-off delays"""
    recorded = []

    async def _record(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry_module, "_sleep", _record)
    return recorded


def test_backoff_second_delay_doubles():
    options = RetryOptions(initial_delay=100, backoff_multiplier=2, max_delay=10_000)
    assert backoff_delay(0, options) == 100
    assert backoff_delay(1, options) == 200
    assert backoff_delay(2, options) == 400


def test_backoff_never_exceeds_max_delay():
    options = RetryOptions(initial_delay=100, backoff_multiplier=2, max_delay=1_000)
    assert all(backoff_delay(i, options) <= 1_000 for i in range(50))
    assert backoff_delay(49, options) == 1_000


def test_retryable_tokens_match_message_or_type_name():
    tokens = ("ECONNRESET", "ConnectError")
    assert is_retryable(RuntimeError("socket hang up: ECONNRESET"), tokens)
    assert is_retryable(httpx.ConnectError("refused"), tokens)
    assert not is_retryable(ValueError("bad input"), tokens)


def test_retryable_tokens_are_case_sensitive():
    assert not is_retryable(RuntimeError("econnreset"), ("ECONNRESET",))


@pytest.mark.anyio
async def test_returns_first_success(sleeps):
    operation = AsyncMock(return_value="ok")
    assert await with_retry(operation, "op") == "ok"
    assert operation.await_count == 1
    assert sleeps == []


@pytest.mark.anyio
async def test_retries_transient_errors_then_succeeds(sleeps):
    operation = AsyncMock(side_effect=[RuntimeError("ETIMEDOUT"), RuntimeError("ETIMEDOUT"), 42])
    options = RetryOptions(max_attempts=3, initial_delay=0.1, backoff_multiplier=2)

    assert await with_retry(operation, "op", options) == 42
    assert operation.await_count == 3
    assert sleeps == [0.1, 0.2]


@pytest.mark.anyio
async def test_non_retryable_error_fails_immediately(sleeps):
    operation = AsyncMock(side_effect=ValueError("invalid signature"))

    with pytest.raises(ValueError, match="invalid signature"):
        await with_retry(operation, "op")
    assert operation.await_count == 1
    assert sleeps == []


@pytest.mark.anyio
async def test_exhaustion_surfaces_last_error_without_trailing_sleep(sleeps):
    errors = [RuntimeError(f"NETWORK_ERROR {i}") for i in (1, 2, 3)]
    operation = AsyncMock(side_effect=errors)

    with pytest.raises(RuntimeError, match="NETWORK_ERROR 3"):
        await with_retry(operation, "op", RetryOptions(max_attempts=3))
    assert operation.await_count == 3
    assert len(sleeps) == 2


@pytest.mark.anyio
async def test_httpx_transport_errors_are_retried_by_default(sleeps):
    request = httpx.Request("GET", "https://api.example.com")
    operation = AsyncMock(side_effect=[httpx.ConnectError("boom", request=request), "ok"])

    assert await with_retry(operation, "op") == "ok"
    assert sleeps == [1.0]
