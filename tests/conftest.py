"""Shared fakes — no real browser is ever launched by the test suite."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from browser_kit.engine.manager import SessionManager
from browser_kit.human.behavior import NoDelays


def make_page(html="<html><body>ok</body></html>", text="hello"):
    page = MagicMock()
    page.goto = AsyncMock(return_value=None)
    page.content = AsyncMock(return_value=html)
    page.wait_for_selector = AsyncMock(return_value=MagicMock())
    page.click = AsyncMock(return_value=None)
    page.focus = AsyncMock(return_value=None)
    page.keyboard.type = AsyncMock(return_value=None)
    page.evaluate = AsyncMock(return_value=None)
    page.eval_on_selector = AsyncMock(return_value=text)
    return page


def make_browser():
    browser = MagicMock()
    browser.close = AsyncMock(return_value=None)
    return browser


class FakeLauncher:
    """Hands out a fresh (browser, page) pair per launch and records them."""

    def __init__(self):
        self.start = AsyncMock()
        self.stop = AsyncMock()
        self.launched: list[tuple] = []
        self.fail_with: Exception | None = None
        self.page_factory = make_page

    async def launch(self):
        if self.fail_with is not None:
            raise self.fail_with
        pair = (make_browser(), self.page_factory())
        self.launched.append(pair)
        return pair


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return AsyncMock(return_value=None)


@pytest.fixture
def manager(launcher, clock, sleep):
    return SessionManager(launcher, humanizer=NoDelays(), clock=clock, sleep=sleep)
