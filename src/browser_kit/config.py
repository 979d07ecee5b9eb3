"""Service configuration.

Values come from the environment, optionally seeded from a ``.env`` file in
the working directory.
"""
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

IDLE_BASES = ("last_activity", "session_id")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    # Browser
    headless: bool = True
    chrome_path: str = ""      # "" = bundled Chromium, "auto" = discover system Chrome
    stealth_js_path: str = ""

    # Navigation retry
    nav_max_attempts: int = 3
    nav_backoff_ms: int = 2000
    nav_timeout_ms: int = 30000

    # Element waits
    action_timeout_ms: int = 10000
    wait_timeout_ms: int = 30000

    # Idle reaper
    idle_timeout_s: float = 30 * 60
    reap_interval_s: float = 5 * 60
    idle_basis: str = "last_activity"

    humanize: bool = True
    max_body_bytes: int = 50 * 1024 * 1024
    event_log_dir: str = ""

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "Settings":
        """Build settings from the process environment (and ``.env``)."""
        load_dotenv(env_file or find_dotenv(usecwd=True))
        idle_basis = os.getenv("IDLE_BASIS", cls.idle_basis)
        if idle_basis not in IDLE_BASES:
            raise ValueError(f"IDLE_BASIS must be one of {IDLE_BASES}, got {idle_basis!r}")
        return cls(
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            headless=_env_bool("HEADLESS", cls.headless),
            chrome_path=os.getenv("CHROME_PATH", cls.chrome_path),
            stealth_js_path=os.getenv("STEALTH_JS_PATH", cls.stealth_js_path),
            nav_max_attempts=int(os.getenv("NAV_MAX_ATTEMPTS", str(cls.nav_max_attempts))),
            nav_backoff_ms=int(os.getenv("NAV_BACKOFF_MS", str(cls.nav_backoff_ms))),
            nav_timeout_ms=int(os.getenv("NAV_TIMEOUT_MS", str(cls.nav_timeout_ms))),
            action_timeout_ms=int(os.getenv("ACTION_TIMEOUT_MS", str(cls.action_timeout_ms))),
            wait_timeout_ms=int(os.getenv("WAIT_TIMEOUT_MS", str(cls.wait_timeout_ms))),
            idle_timeout_s=float(os.getenv("IDLE_TIMEOUT_S", str(cls.idle_timeout_s))),
            reap_interval_s=float(os.getenv("REAP_INTERVAL_S", str(cls.reap_interval_s))),
            idle_basis=idle_basis,
            humanize=_env_bool("HUMANIZE", cls.humanize),
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(cls.max_body_bytes))),
            event_log_dir=os.getenv("EVENT_LOG_DIR", cls.event_log_dir),
        )
