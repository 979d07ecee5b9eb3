"""Browser engine adapter: Chrome discovery and per-session launch.

Each session gets its own browser process. The launcher owns the shared
Playwright driver; browsers it hands out are owned by the caller.
"""
import logging
import os
import platform
import shutil
from typing import Any

from playwright.async_api import async_playwright

from .stealth import apply_stealth, context_options, random_profile

log = logging.getLogger(__name__)

LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
)

# Playwright adds this by default; it sets navigator.webdriver and the infobar.
IGNORED_DEFAULT_ARGS = ("--enable-automation",)


def find_system_chrome() -> str | None:
    """Find Chrome or Edge binary on the system.

    Returns the path to the browser executable, or None if not found.
    """
    system = platform.system()
    if system == "Darwin":
        candidates = [
            "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
            "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
            "/Applications/Chromium.app/Contents/MacOS/Chromium",
        ]
    elif system == "Linux":
        candidates = [
            "google-chrome",
            "google-chrome-stable",
            "chromium-browser",
            "chromium",
            "microsoft-edge",
        ]
    else:
        return None

    for candidate in candidates:
        if system == "Darwin":
            if os.path.isfile(candidate):
                return candidate
        else:
            path = shutil.which(candidate)
            if path:
                return path
    return None


def resolve_executable(chrome_path: str) -> str | None:
    """Turn the CHROME_PATH setting into an executable path.

    ``""`` means Playwright's bundled Chromium, ``"auto"`` means discover a
    system browser (falling back to bundled), anything else is used as-is.
    """
    if not chrome_path:
        return None
    if chrome_path == "auto":
        found = find_system_chrome()
        if not found:
            log.warning("No system Chrome found, using Playwright Chromium")
        return found
    return chrome_path


class BrowserLauncher:
    """Starts one headless browser plus one stealth-configured page per call."""

    def __init__(self, *, headless: bool = True, chrome_path: str = "", stealth_js_path: str = ""):
        self._headless = headless
        self._executable = resolve_executable(chrome_path)
        self._stealth_js_path = stealth_js_path
        self._manager = None
        self._playwright = None

    async def start(self) -> None:
        if self._playwright is not None:
            return
        self._manager = async_playwright()
        self._playwright = await self._manager.start()
        log.info("Playwright driver started")

    async def stop(self) -> None:
        if self._playwright is None:
            return
        try:
            await self._playwright.stop()
        finally:
            self._playwright = None
            self._manager = None
        log.info("Playwright driver stopped")

    async def launch(self) -> tuple[Any, Any]:
        """Launch a browser and open its single page.

        Returns ``(browser, page)``. The browser is closed again if page
        setup fails, so a raised exception never leaks a process.
        """
        if self._playwright is None:
            await self.start()
        options: dict[str, Any] = {
            "headless": self._headless,
            "args": list(LAUNCH_ARGS),
            "ignore_default_args": list(IGNORED_DEFAULT_ARGS),
        }
        if self._executable:
            options["executable_path"] = self._executable
        browser = await self._playwright.chromium.launch(**options)
        try:
            profile = random_profile(browser.version)
            context = await browser.new_context(**context_options(profile))
            await apply_stealth(context, profile, self._stealth_js_path)
            page = await context.new_page()
        except Exception:
            try:
                await browser.close()
            except Exception as e:
                log.warning(f"Failed to close browser after setup error: {e}")
            raise
        log.info("Launched %s browser (version %s)", "headless" if self._headless else "headed", browser.version)
        return browser, page
