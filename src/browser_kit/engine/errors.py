"""Typed error kinds for session operations.

The manager maps Playwright exceptions into these so the HTTP layer can
translate them uniformly without inspecting message strings.
"""
from enum import Enum


class ErrorKind(Enum):
    """Normalized failure categories raised by session operations."""
    VALIDATION = "validation"                # missing/invalid request field
    SESSION_NOT_FOUND = "session_not_found"  # unknown or closed session id
    NAVIGATION = "navigation"                # all goto attempts failed
    LAUNCH = "launch"                        # browser start or first navigation failed
    SELECTOR_TIMEOUT = "selector_timeout"    # element never attached
    ENGINE = "engine"                        # any other browser failure


_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.SESSION_NOT_FOUND: 404,
}


class BrowserKitError(Exception):
    """Exception carrying an ErrorKind for boundary translation."""

    kind = ErrorKind.ENGINE

    def __init__(self, message: str = "", kind: ErrorKind | None = None):
        if kind is not None:
            self.kind = kind
        super().__init__(message or self.kind.value)

    @property
    def message(self) -> str:
        return str(self)

    @property
    def status_code(self) -> int:
        return _STATUS.get(self.kind, 500)


class ValidationError(BrowserKitError):
    kind = ErrorKind.VALIDATION


class SessionNotFound(BrowserKitError):
    kind = ErrorKind.SESSION_NOT_FOUND

    def __init__(self, message: str = "Session not found"):
        super().__init__(message)


class NavigationError(BrowserKitError):
    kind = ErrorKind.NAVIGATION


class LaunchError(BrowserKitError):
    kind = ErrorKind.LAUNCH


class SelectorTimeout(BrowserKitError):
    kind = ErrorKind.SELECTOR_TIMEOUT


class EngineError(BrowserKitError):
    kind = ErrorKind.ENGINE
