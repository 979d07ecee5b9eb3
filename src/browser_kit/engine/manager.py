"""Session lifecycle manager.

Owns the registry of live sessions and is the only component that starts or
closes browsers. Every public coroutine either returns a plain value or
raises a :class:`~browser_kit.engine.errors.BrowserKitError` subclass;
Playwright exceptions never leak past this module.

Requires an injected launcher; tests pass a fake one instead of Playwright.
"""
import asyncio
import logging
import re
import time
from contextlib import contextmanager
from typing import Any, Awaitable, Callable

from playwright.async_api import TimeoutError as PlaywrightTimeout

from ..browser.session import Session, close_browser
from ..human.behavior import HumanizationPolicy, NoDelays, RandomDelays, human_type
from ..telemetry.logger import SessionEventLogger
from .errors import (
    BrowserKitError,
    EngineError,
    LaunchError,
    NavigationError,
    SelectorTimeout,
    SessionNotFound,
)
from .registry import SessionRegistry
from .retry import RetryPolicy, navigate_with_retry

log = logging.getLogger(__name__)

PRE_NAVIGATION_DELAY = (1.0, 3.0)

SCROLL_INTO_VIEW_JS = """
(sel) => {
    const element = document.querySelector(sel);
    if (element) {
        element.scrollIntoView({ behavior: 'smooth' });
    }
}
"""

TEXT_CONTENT_JS = "(el) => el.textContent || ''"

_MILLIS_RE = re.compile(r"[0-9]{1,18}")


def timestamp_from_id(session_id: str) -> int | None:
    """Return the epoch-milliseconds suffix of ``<prefix>_<millis>`` ids.

    Ids without an underscore or with a suffix that is not a plain ASCII
    number of at most 18 digits yield None.
    """
    if "_" not in session_id:
        return None
    tail = session_id.rsplit("_", 1)[1]
    if not _MILLIS_RE.fullmatch(tail):
        return None
    return int(tail)


@contextmanager
def _engine_errors():
    """Translate Playwright failures raised inside the block."""
    try:
        yield
    except BrowserKitError:
        raise
    except PlaywrightTimeout as e:
        raise SelectorTimeout(str(e)) from e
    except Exception as e:
        raise EngineError(str(e)) from e


class SessionManager:
    """Creates, serves, and tears down browser sessions keyed by caller id."""

    def __init__(
        self,
        launcher: Any,
        *,
        registry: SessionRegistry | None = None,
        retry: RetryPolicy | None = None,
        humanizer: HumanizationPolicy | None = None,
        action_timeout_ms: int = 10000,
        wait_timeout_ms: int = 30000,
        idle_timeout_s: float = 30 * 60,
        reap_interval_s: float = 5 * 60,
        idle_basis: str = "last_activity",
        event_logger: SessionEventLogger | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._launcher = launcher
        self._registry = registry if registry is not None else SessionRegistry()
        self._retry = retry or RetryPolicy()
        self._humanizer = humanizer or RandomDelays()
        self._action_timeout_ms = action_timeout_ms
        self._wait_timeout_ms = wait_timeout_ms
        self._idle_timeout_s = idle_timeout_s
        self._reap_interval_s = reap_interval_s
        self._idle_basis = idle_basis
        self._events = event_logger or SessionEventLogger("disabled")
        self._clock = clock
        self._sleep = sleep
        self._reaper: asyncio.Task | None = None
        self._closing = False

    @classmethod
    def from_settings(cls, settings, launcher: Any = None) -> "SessionManager":
        """Wire a manager (and, unless given, a Playwright launcher) from Settings."""
        if launcher is None:
            from ..browser.chrome import BrowserLauncher
            launcher = BrowserLauncher(
                headless=settings.headless,
                chrome_path=settings.chrome_path,
                stealth_js_path=settings.stealth_js_path,
            )
        return cls(
            launcher,
            retry=RetryPolicy(
                max_attempts=settings.nav_max_attempts,
                backoff_ms=settings.nav_backoff_ms,
                timeout_ms=settings.nav_timeout_ms,
            ),
            humanizer=RandomDelays() if settings.humanize else NoDelays(),
            action_timeout_ms=settings.action_timeout_ms,
            wait_timeout_ms=settings.wait_timeout_ms,
            idle_timeout_s=settings.idle_timeout_s,
            reap_interval_s=settings.reap_interval_s,
            idle_basis=settings.idle_basis,
            event_logger=SessionEventLogger(time.strftime("%Y%m%d-%H%M%S"), settings.event_log_dir),
        )

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def count(self) -> int:
        return len(self._registry)

    def sessions(self) -> list[dict]:
        return [session.summary() for _, session in self._registry.entries()]

    # ── Service lifecycle ───────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the engine driver and the idle reaper."""
        self._closing = False
        await self._launcher.start()
        self.start_reaper()

    async def stop(self) -> None:
        """Close every session, then stop the engine driver."""
        await self.shutdown_all()
        await self._launcher.stop()
        self._events.close()

    def start_reaper(self) -> None:
        if self._reaper is not None and not self._reaper.done():
            return
        self._reaper = asyncio.create_task(self._reap_loop())
        log.info("Idle reaper started (every %ss, timeout %ss, basis %s)",
                 self._reap_interval_s, self._idle_timeout_s, self._idle_basis)

    async def stop_reaper(self) -> None:
        task, self._reaper = self._reaper, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _reap_loop(self) -> None:
        while True:
            await self._sleep(self._reap_interval_s)
            try:
                await self.reap_idle()
            except Exception:
                log.exception("Idle reaper tick failed")

    # ── Session lifecycle ───────────────────────────────────────────────────

    def _require(self, session_id: str) -> Session:
        session = self._registry.get(session_id)
        if session is None:
            raise SessionNotFound()
        session.touch(self._clock())
        return session

    async def launch(self, session_id: str, url: str) -> Session:
        """Start a fresh browser for *session_id* and navigate it to *url*.

        An existing session under the same id is closed first; a failure to
        close it is logged and does not block the new launch.
        """
        t0 = time.monotonic()
        async with self._registry.lock(session_id):
            existing = self._registry.remove(session_id)
            if existing is not None:
                log.info(f"Replacing existing session {session_id}")
                clean = await close_browser(existing.browser, session_id)
                self._events.log_close(session_id, "replaced", clean)

            try:
                browser, page = await self._launcher.launch()
            except Exception as e:
                self._events.log_launch(session_id, url, False, time.monotonic() - t0,
                                        replaced=existing is not None, error=str(e))
                raise LaunchError(str(e)) from e

            try:
                await navigate_with_retry(page, url, self._retry, sleep=self._sleep)
            except Exception as e:
                await close_browser(browser, session_id)
                self._events.log_launch(session_id, url, False, time.monotonic() - t0,
                                        replaced=existing is not None, error=str(e))
                raise LaunchError(str(e)) from e

            if self._closing:
                clean = await close_browser(browser, session_id)
                self._events.log_close(session_id, "shutdown", clean)
                raise LaunchError("Service is shutting down")

            now = self._clock()
            session = Session(session_id, browser, page, created_at=now,
                              last_activity=now, current_url=url)
            self._registry.put(session_id, session)

        elapsed = time.monotonic() - t0
        self._events.log_launch(session_id, url, True, elapsed, replaced=existing is not None)
        log.info(f"Launched session {session_id} at {url} [{elapsed:.1f}s]")
        return session

    async def navigate(self, session_id: str, url: str) -> None:
        session = self._require(session_id)
        t0 = time.monotonic()
        await self._humanizer.pause(*PRE_NAVIGATION_DELAY)
        try:
            await navigate_with_retry(session.page, url, self._retry, sleep=self._sleep)
        except Exception as e:
            self._events.log_navigate(session_id, url, False, time.monotonic() - t0, error=str(e))
            raise NavigationError(str(e)) from e
        session.current_url = url
        session.touch(self._clock())
        self._events.log_navigate(session_id, url, True, time.monotonic() - t0)

    async def close(self, session_id: str) -> None:
        """Close and forget *session_id*. The id is gone even if close fails."""
        async with self._registry.lock(session_id):
            session = self._registry.remove(session_id)
            if session is None:
                raise SessionNotFound()
            try:
                await session.browser.close()
            except Exception as e:
                self._events.log_close(session_id, "closed", False)
                raise EngineError(str(e)) from e
        self._events.log_close(session_id, "closed", True)
        log.info(f"Closed session {session_id}")

    # ── Page interaction ────────────────────────────────────────────────────

    async def _wait_attached(self, page: Any, selector: str, timeout_ms: int) -> None:
        await page.wait_for_selector(selector, state="attached", timeout=timeout_ms)

    async def page_html(self, session_id: str) -> str:
        session = self._require(session_id)
        with _engine_errors():
            return await session.page.content()

    async def click(self, session_id: str, selector: str) -> None:
        session = self._require(session_id)
        with _engine_errors():
            await self._wait_attached(session.page, selector, self._action_timeout_ms)
        with _engine_errors():
            await session.page.click(selector, timeout=self._action_timeout_ms)

    async def fill(self, session_id: str, selector: str, value: str) -> None:
        """Type *value* into *selector* with per-character jitter."""
        session = self._require(session_id)
        with _engine_errors():
            await self._wait_attached(session.page, selector, self._action_timeout_ms)
        with _engine_errors():
            await human_type(session.page, selector, value, self._humanizer)

    async def wait_for(self, session_id: str, selector: str, timeout_ms: int | None = None) -> None:
        session = self._require(session_id)
        timeout = self._wait_timeout_ms if timeout_ms is None else timeout_ms
        with _engine_errors():
            await self._wait_attached(session.page, selector, timeout)

    async def scroll_to(self, session_id: str, selector: str) -> None:
        session = self._require(session_id)
        with _engine_errors():
            await self._wait_attached(session.page, selector, self._action_timeout_ms)
        with _engine_errors():
            await session.page.evaluate(SCROLL_INTO_VIEW_JS, selector)

    async def extract_text(self, session_id: str, selector: str) -> str:
        session = self._require(session_id)
        with _engine_errors():
            await self._wait_attached(session.page, selector, self._action_timeout_ms)
        with _engine_errors():
            text = await session.page.eval_on_selector(selector, TEXT_CONTENT_JS)
        return text or ""

    # ── Eviction and shutdown ───────────────────────────────────────────────

    def session_age(self, session: Session, now: float) -> float | None:
        """Seconds since the session was last considered active.

        None means the age is unknown and the session must not be evicted.
        """
        if self._idle_basis == "session_id":
            created_ms = timestamp_from_id(session.id)
            if created_ms is None:
                return None
            return now - created_ms / 1000
        return now - session.last_activity

    def _is_idle(self, session: Session, now: float) -> bool:
        age = self.session_age(session, now)
        return age is not None and age > self._idle_timeout_s

    async def reap_idle(self) -> list[str]:
        """Evict every session idle for longer than the timeout.

        Returns the evicted ids. Sessions closed or replaced concurrently are
        skipped; close failures are logged and the sweep continues.
        """
        t0 = time.monotonic()
        entries = self._registry.entries()
        evicted: list[str] = []
        for session_id, session in entries:
            if not self._is_idle(session, self._clock()):
                continue
            async with self._registry.lock(session_id):
                # Re-check: the entry may have been closed, replaced or used meanwhile.
                if self._registry.get(session_id) is not session:
                    continue
                if not self._is_idle(session, self._clock()):
                    continue
                self._registry.remove(session_id)
                clean = await close_browser(session.browser, session_id)
            self._events.log_close(session_id, "evicted", clean)
            evicted.append(session_id)
            log.info(f"Evicted idle session {session_id}")
        if entries:
            self._events.log_reap(len(entries), evicted, time.monotonic() - t0)
        return evicted

    async def shutdown_all(self) -> int:
        """Close every session, tolerating individual failures.

        Returns the number of sessions that were open. Launches still in
        flight close their own browser and fail with LaunchError.
        """
        self._closing = True
        await self.stop_reaper()
        entries = self._registry.entries()
        if entries:
            log.info("Shutting down %d session(s)...", len(entries))
        closed = 0
        for session_id, _ in entries:
            async with self._registry.lock(session_id):
                session = self._registry.remove(session_id)
                if session is None:
                    continue
                clean = await close_browser(session.browser, session_id)
            self._events.log_close(session_id, "shutdown", clean)
            closed += 1
        return closed
