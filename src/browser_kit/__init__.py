"""browser-kit — REST service for stealth headless-browser sessions.

Provides a session registry and lifecycle manager over Playwright Chromium
(launch, navigate, interact, extract, close, idle eviction), light
fingerprint evasion, and a FastAPI surface exposing it over HTTP.
"""
from .config import Settings  # noqa: F401
from .engine.errors import ErrorKind, BrowserKitError  # noqa: F401
from .engine.manager import SessionManager  # noqa: F401

__version__ = "0.1.0"
