"""Fingerprint-evasion configuration for headless Chromium.

Every value here is opaque configuration handed to Playwright: the context
options (user agent, viewport, headers, locale) and an init script that
masks the usual automation markers before any page JS runs.
"""
import json
import logging
import os
import random
from dataclasses import dataclass, field
from typing import Any

from .ua import pick_user_agent, platform_of

log = logging.getLogger(__name__)

VIEWPORT_WIDTH_RANGE = (1280, 1920)
VIEWPORT_HEIGHT_RANGE = (720, 1080)

STEALTH_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate, br",
    "Upgrade-Insecure-Requests": "1",
}

# Cache keyed by absolute path.
_stealth_js_cache: dict[str, str] = {}


@dataclass(frozen=True)
class StealthProfile:
    user_agent: str
    viewport: dict[str, int]
    headers: dict[str, str] = field(default_factory=lambda: dict(STEALTH_HEADERS))
    locale: str = "en-US"
    hardware_concurrency: int = 8
    device_memory: int = 8


def random_profile(chrome_version: str = "", rng: random.Random | None = None) -> StealthProfile:
    """Pick a user agent from the fixed pool and a viewport within bounds."""
    rng = rng or random.Random()
    return StealthProfile(
        user_agent=pick_user_agent(chrome_version, rng),
        viewport={
            "width": rng.randint(*VIEWPORT_WIDTH_RANGE),
            "height": rng.randint(*VIEWPORT_HEIGHT_RANGE),
        },
        hardware_concurrency=rng.choice((4, 8, 12, 16)),
        device_memory=rng.choice((4, 8, 16)),
    )


def context_options(profile: StealthProfile) -> dict[str, Any]:
    """Keyword arguments for ``browser.new_context`` carrying *profile*."""
    return {
        "user_agent": profile.user_agent,
        "viewport": dict(profile.viewport),
        "extra_http_headers": dict(profile.headers),
        "locale": profile.locale,
    }


def _load_stealth_js(path: str) -> str:
    """Load a stealth JS file from disk, with caching.

    Returns ``""`` if *path* is empty/falsy or does not point to a file.
    """
    if not path:
        return ""
    abs_path = os.path.abspath(path)
    if abs_path in _stealth_js_cache:
        return _stealth_js_cache[abs_path]
    if not os.path.isfile(abs_path):
        log.warning("Stealth JS file not found: %s", abs_path)
        _stealth_js_cache[abs_path] = ""
        return ""
    with open(abs_path, "r", encoding="utf-8") as f:
        content = f.read()
    _stealth_js_cache[abs_path] = content
    return content


def build_stealth_shim(profile: StealthProfile) -> str:
    """Build the init script that hides automation markers for *profile*."""
    platform_js = json.dumps(platform_of(profile.user_agent))
    languages_js = json.dumps([profile.locale, profile.locale.split("-")[0]])
    width = profile.viewport["width"]
    height = profile.viewport["height"]
    return f"""
    (() => {{
        // -- navigator.webdriver (the primary automation flag) --
        Object.defineProperty(navigator, 'webdriver', {{
            get: () => undefined, configurable: true,
        }});

        // -- navigator.plugins / mimeTypes (empty in headless) --
        Object.defineProperty(navigator, 'plugins', {{
            get: () => [1, 2, 3, 4, 5], configurable: true,
        }});
        Object.defineProperty(navigator, 'mimeTypes', {{
            get: () => [1, 2, 3], configurable: true,
        }});

        // -- navigator.languages / platform --
        Object.defineProperty(navigator, 'languages', {{
            get: () => {languages_js}, configurable: true,
        }});
        Object.defineProperty(navigator, 'platform', {{
            get: () => {platform_js}, configurable: true,
        }});

        // -- hardware --
        Object.defineProperty(navigator, 'hardwareConcurrency', {{
            get: () => {profile.hardware_concurrency}, configurable: true,
        }});
        Object.defineProperty(navigator, 'deviceMemory', {{
            get: () => {profile.device_memory}, configurable: true,
        }});

        // -- window.chrome (missing in headless) --
        if (!window.chrome) {{
            window.chrome = {{ runtime: {{}}, loadTimes: function() {{}}, csi: function() {{}} }};
        }}

        // -- navigator.permissions (headless inconsistency fix) --
        if (navigator.permissions) {{
            const _origQuery = navigator.permissions.query.bind(navigator.permissions);
            navigator.permissions.query = function(desc) {{
                if (desc.name === 'notifications') {{
                    return Promise.resolve({{
                        state: Notification.permission === 'default'
                            ? 'prompt' : Notification.permission,
                        onchange: null,
                    }});
                }}
                return _origQuery(desc);
            }};
        }}

        // -- screen and outer window (outer === inner is headless tell) --
        Object.defineProperty(screen, 'width', {{
            get: () => {width}, configurable: true,
        }});
        Object.defineProperty(screen, 'height', {{
            get: () => {height}, configurable: true,
        }});
        Object.defineProperty(window, 'outerWidth', {{
            get: () => window.innerWidth, configurable: true,
        }});
        Object.defineProperty(window, 'outerHeight', {{
            get: () => window.innerHeight + 85, configurable: true,
        }});
    }})();
    """


async def apply_stealth(context: Any, profile: StealthProfile, stealth_js_path: str = "") -> None:
    """Register the stealth scripts on *context* so they run before page JS.

    *stealth_js_path* is an optional path to an extra ``stealth.min.js``.
    """
    stealth_js = _load_stealth_js(stealth_js_path)
    if stealth_js:
        await context.add_init_script(stealth_js)
    await context.add_init_script(build_stealth_shim(profile))
    log.debug("Stealth init scripts installed (ua=%s, viewport=%s)", profile.user_agent, profile.viewport)
