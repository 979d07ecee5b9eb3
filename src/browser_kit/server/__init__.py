"""server — FastAPI surface over the session manager."""
from .app import create_app, build_app  # noqa: F401
