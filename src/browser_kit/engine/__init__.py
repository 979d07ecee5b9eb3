"""engine — session registry, lifecycle management, and retry policy."""
from .errors import (  # noqa: F401
    ErrorKind,
    BrowserKitError,
    ValidationError,
    SessionNotFound,
    NavigationError,
    LaunchError,
    SelectorTimeout,
    EngineError,
)
from .registry import SessionRegistry  # noqa: F401
from .retry import RetryPolicy, navigate_with_retry  # noqa: F401
from .manager import SessionManager  # noqa: F401
