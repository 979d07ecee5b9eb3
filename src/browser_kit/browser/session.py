"""Session value and browser teardown helper.

A session owns exactly one browser process and holds a reference to the
single page opened in it. Timestamps are tracked server-side so idle
eviction does not depend on the caller's id format.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any

log = logging.getLogger(__name__)


@dataclass
class Session:
    id: str
    browser: Any
    page: Any
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    current_url: str = ""

    def touch(self, now: float | None = None) -> None:
        """Mark the session as used (resets the idle clock)."""
        self.last_activity = time.time() if now is None else now

    def summary(self) -> dict:
        return {
            "sessionId": self.id,
            "createdAt": self.created_at,
            "lastActivity": self.last_activity,
            "url": self.current_url,
        }


async def close_browser(browser: Any, session_id: str = "") -> bool:
    """Close *browser*, logging instead of raising.

    Returns True when the close call completed cleanly.
    """
    if browser is None:
        return True
    try:
        await browser.close()
        return True
    except Exception as e:
        log.warning(f"Failed to close browser for session {session_id!r} cleanly: {e}")
        return False
