"""In-memory session registry.

Single source of truth for which sessions are live. All access happens on
one asyncio event loop, so plain dict operations are atomic; the per-id
locks exist for multi-step sequences (launch's close-then-replace, close,
eviction) that await the browser in between.
"""
import asyncio
import weakref

from ..browser.session import Session


class SessionRegistry:
    """Maps session id -> Session, plus one asyncio.Lock per id."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        # Locks live only while some coroutine holds or awaits them.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def put(self, session_id: str, session: Session) -> None:
        """Install *session*, overwriting any existing entry."""
        self._sessions[session_id] = session

    def remove(self, session_id: str) -> Session | None:
        """Drop the entry for *session_id*; returns it, or None if absent."""
        return self._sessions.pop(session_id, None)

    def entries(self) -> list[tuple[str, Session]]:
        """Snapshot of (id, session) pairs, safe to iterate while mutating."""
        return list(self._sessions.items())

    def clear(self) -> None:
        self._sessions.clear()

    def lock(self, session_id: str) -> asyncio.Lock:
        """Return the lock serializing lifecycle changes for *session_id*."""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
