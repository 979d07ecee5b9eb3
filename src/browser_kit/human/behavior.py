"""Human-like timing for browser automation.

Delays go through a pluggable policy so tests (and callers that do not care
about timing fingerprints) can switch them off entirely with NoDelays.
"""

import asyncio
import logging
import math
import random
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

log = logging.getLogger(__name__)


def _safe_float(val, default: float) -> float:
    try:
        f = float(val)
        if math.isfinite(f):
            return f
    except (TypeError, ValueError):
        pass
    return default


@runtime_checkable
class HumanizationPolicy(Protocol):
    """Delay generator consulted before navigations and between keystrokes."""

    async def pause(self, low: float, high: float) -> float:
        """Wait a random duration in [low, high] seconds; returns the delay."""
        ...

    async def keystroke(self) -> float:
        """Wait between two typed characters; returns the delay."""
        ...


class RandomDelays:
    """Uniform pauses and log-normal keystroke gaps.

    Log-normal matches human typing rhythm: mostly quick key presses with
    the occasional longer hesitation.
    """

    def __init__(self, *, rng: random.Random | None = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                 keystroke_low: float = 0.05, keystroke_high: float = 0.15,
                 sigma: float = 0.3):
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._key_low = keystroke_low
        self._key_high = keystroke_high
        self._sigma = max(0.01, _safe_float(sigma, 0.3))

    async def pause(self, low: float, high: float) -> float:
        low = max(_safe_float(low, 0.0), 0.0)
        high = max(_safe_float(high, low), 0.0)
        if high < low:
            low, high = high, low
        delay = self._rng.uniform(low, high)
        await self._sleep(delay)
        log.debug(f"    pause {delay:.2f}s")
        return delay

    async def keystroke(self) -> float:
        low, high = self._key_low, self._key_high
        mu = math.log(max((low + high) / 2, 0.001))
        delay = self._rng.lognormvariate(mu, self._sigma)
        # Clamp to reasonable range (0.5x low to 2x high)
        delay = max(low * 0.5, min(delay, high * 2))
        await self._sleep(delay)
        return delay


class NoDelays:
    """Policy that never sleeps."""

    async def pause(self, low: float, high: float) -> float:
        return 0.0

    async def keystroke(self) -> float:
        return 0.0


async def human_type(page: Any, selector: str, text: str, policy: HumanizationPolicy) -> None:
    """Focus *selector* and type *text* one character at a time.

    An empty *text* only focuses the element.
    """
    await page.focus(selector)
    for ch in text:
        await page.keyboard.type(ch)
        await policy.keystroke()
    log.debug(f"    typed {len(text)} chars into {selector}")
