"""telemetry — best-effort structured event logs."""
from .logger import SessionEventLogger  # noqa: F401
