"""Structured JSONL event logging for session lifecycles."""
import json
import logging
import os
import time

log = logging.getLogger(__name__)


class SessionEventLogger:
    """Writes one JSON line per lifecycle event to a per-run JSONL file.

    All logging is best-effort: methods never raise exceptions.
    Supports context-manager protocol for automatic close.

    With an empty ``log_dir`` the logger is disabled and every method is a
    no-op.
    """

    def __init__(self, run_id: str, log_dir: str = ""):
        self._run_id = run_id
        self._f = None
        if not log_dir:
            return
        try:
            os.makedirs(log_dir, exist_ok=True)
            path = os.path.join(log_dir, f"sessions_{run_id}.jsonl")
            self._f = open(path, "a", encoding="utf-8")
        except Exception as e:
            log.warning(f"SessionEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def enabled(self) -> bool:
        return self._f is not None

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["run_id"] = self._run_id
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning(f"SessionEventLogger: write failed: {e}")

    def log_launch(self, session_id: str, url: str, ok: bool, duration: float,
                   replaced: bool = False, error: str | None = None):
        self._write({
            "event": "launch",
            "session_id": session_id,
            "url": url,
            "ok": ok,
            "replaced": replaced,
            "duration": duration,
            "error": error,
        })

    def log_navigate(self, session_id: str, url: str, ok: bool, duration: float,
                     error: str | None = None):
        self._write({
            "event": "navigate",
            "session_id": session_id,
            "url": url,
            "ok": ok,
            "duration": duration,
            "error": error,
        })

    def log_close(self, session_id: str, reason: str, clean: bool):
        """Log a session teardown.

        Valid ``reason`` values:
        - ``closed``: explicit close request
        - ``replaced``: a new launch reused the id
        - ``evicted``: idle reaper
        - ``shutdown``: process termination
        """
        self._write({
            "event": "close",
            "session_id": session_id,
            "reason": reason,
            "clean": clean,
        })

    def log_reap(self, checked: int, evicted: list[str], duration: float):
        self._write({
            "event": "reap",
            "checked": checked,
            "evicted": evicted,
            "duration": duration,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
