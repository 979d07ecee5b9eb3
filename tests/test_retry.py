"""Tests for the navigation retry policy."""
from unittest.mock import AsyncMock

import pytest

from browser_kit.engine.retry import RetryPolicy, navigate_with_retry


def _page(side_effect=None):
    page = AsyncMock()
    page.goto = AsyncMock(side_effect=side_effect)
    return page


def test_defaults():
    policy = RetryPolicy()
    assert policy.max_attempts == 3
    assert policy.backoff_ms == 2000
    assert policy.timeout_ms == 30000
    assert policy.wait_until == "domcontentloaded"


async def test_first_attempt_success_does_not_sleep():
    page = _page()
    sleep = AsyncMock()
    await navigate_with_retry(page, "https://example.com", RetryPolicy(), sleep=sleep)
    page.goto.assert_awaited_once_with("https://example.com", wait_until="domcontentloaded", timeout=30000)
    sleep.assert_not_awaited()


async def test_fails_twice_then_succeeds():
    page = _page([RuntimeError("boom 1"), RuntimeError("boom 2"), None])
    sleep = AsyncMock()
    await navigate_with_retry(page, "https://example.com", RetryPolicy(), sleep=sleep)
    assert page.goto.await_count == 3
    assert sleep.await_count == 2
    sleep.assert_awaited_with(2.0)


async def test_exhaustion_raises_last_failure():
    page = _page([RuntimeError("first"), RuntimeError("second"), RuntimeError("third")])
    sleep = AsyncMock()
    with pytest.raises(RuntimeError, match="third"):
        await navigate_with_retry(page, "https://example.com", RetryPolicy(), sleep=sleep)
    assert page.goto.await_count == 3
    # No backoff after the final attempt
    assert sleep.await_count == 2


async def test_custom_policy():
    page = _page(RuntimeError("down"))
    sleep = AsyncMock()
    policy = RetryPolicy(max_attempts=5, backoff_ms=100, timeout_ms=5000, wait_until="load")
    with pytest.raises(RuntimeError):
        await navigate_with_retry(page, "https://example.com", policy, sleep=sleep)
    assert page.goto.await_count == 5
    page.goto.assert_awaited_with("https://example.com", wait_until="load", timeout=5000)
    sleep.assert_awaited_with(0.1)


async def test_zero_attempts_still_tries_once():
    page = _page()
    await navigate_with_retry(page, "https://example.com", RetryPolicy(max_attempts=0), sleep=AsyncMock())
    assert page.goto.await_count == 1
