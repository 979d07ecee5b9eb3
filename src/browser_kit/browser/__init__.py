"""browser — Playwright engine adapter and stealth configuration.

Zero HTTP dependencies; everything here can be driven directly.
"""
from .chrome import BrowserLauncher, find_system_chrome, LAUNCH_ARGS  # noqa: F401
from .session import Session, close_browser  # noqa: F401
from .stealth import StealthProfile, random_profile, build_stealth_shim, apply_stealth  # noqa: F401
from .ua import build_user_agent, pick_user_agent  # noqa: F401
