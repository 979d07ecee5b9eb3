"""Navigation retry policy shared by launch and navigate."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-backoff retry settings for ``page.goto``.

    ``timeout_ms`` bounds each attempt; ``wait_until`` is the Playwright
    load state that counts as success (DOM ready, not network idle).
    """
    max_attempts: int = 3
    backoff_ms: int = 2000
    timeout_ms: int = 30000
    wait_until: str = "domcontentloaded"


async def navigate_with_retry(
    page: Any,
    url: str,
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> None:
    """Navigate *page* to *url*, retrying per *policy*.

    Sleeps ``backoff_ms`` between attempts (never after the last one) and
    re-raises the last underlying exception once attempts are exhausted.
    """
    attempts = max(1, policy.max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            await page.goto(url, wait_until=policy.wait_until, timeout=policy.timeout_ms)
            if attempt > 1:
                log.info("Navigation to %s succeeded on attempt %d", url, attempt)
            return
        except Exception as e:
            if attempt >= attempts:
                log.warning("Navigation to %s failed after %d attempts: %s", url, attempts, e)
                raise
            log.warning(f"Navigation attempt {attempt}/{attempts} to {url} failed ({e}), "
                        f"retrying in {policy.backoff_ms}ms")
            await sleep(policy.backoff_ms / 1000)
