"""Tests for humanization policies."""
import random
from unittest.mock import AsyncMock, MagicMock

from browser_kit.human import HumanizationPolicy, NoDelays, RandomDelays, human_type


def test_policies_satisfy_protocol():
    assert isinstance(RandomDelays(), HumanizationPolicy)
    assert isinstance(NoDelays(), HumanizationPolicy)


async def test_random_pause_within_range():
    sleep = AsyncMock()
    policy = RandomDelays(rng=random.Random(3), sleep=sleep)
    for _ in range(20):
        delay = await policy.pause(1.0, 3.0)
        assert 1.0 <= delay <= 3.0
    assert sleep.await_count == 20


async def test_random_pause_swapped_bounds():
    policy = RandomDelays(rng=random.Random(3), sleep=AsyncMock())
    delay = await policy.pause(3.0, 1.0)
    assert 1.0 <= delay <= 3.0


async def test_keystroke_is_clamped():
    policy = RandomDelays(rng=random.Random(5), sleep=AsyncMock(), keystroke_low=0.05, keystroke_high=0.15)
    for _ in range(50):
        delay = await policy.keystroke()
        assert 0.025 <= delay <= 0.3


async def test_no_delays_never_sleeps():
    policy = NoDelays()
    assert await policy.pause(1.0, 3.0) == 0.0
    assert await policy.keystroke() == 0.0


async def test_human_type_per_character():
    page = MagicMock()
    page.focus = AsyncMock()
    page.keyboard.type = AsyncMock()
    policy = MagicMock()
    policy.keystroke = AsyncMock(return_value=0.0)

    await human_type(page, "#q", "hi!", policy)
    page.focus.assert_awaited_once_with("#q")
    assert [c.args[0] for c in page.keyboard.type.await_args_list] == ["h", "i", "!"]
    assert policy.keystroke.await_count == 3
