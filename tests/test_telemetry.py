"""Tests for SessionEventLogger — telemetry contract tests."""
import json
import os
import tempfile

from browser_kit.telemetry.logger import SessionEventLogger


def _read_events(tmpdir):
    files = os.listdir(tmpdir)
    assert len(files) == 1
    with open(os.path.join(tmpdir, files[0])) as f:
        return [json.loads(line) for line in f]


def test_basic_event_logging():
    """Events are written to JSONL with correct fields."""
    with tempfile.TemporaryDirectory() as tmpdir:
        logger = SessionEventLogger("run123", log_dir=tmpdir)
        logger.log_launch("s1_1000", "https://example.com", True, 1.25)
        logger.close()

        assert os.listdir(tmpdir)[0] == "sessions_run123.jsonl"
        events = _read_events(tmpdir)
        assert len(events) == 1
        event = events[0]
        assert event["event"] == "launch"
        assert event["run_id"] == "run123"
        assert event["session_id"] == "s1_1000"
        assert event["ok"] is True
        assert event["replaced"] is False
        assert event["error"] is None
        assert "ts" in event


def test_all_event_types():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SessionEventLogger("run1", log_dir=tmpdir) as logger:
            logger.log_launch("a", "https://a", False, 0.5, replaced=True, error="boom")
            logger.log_navigate("a", "https://b", True, 0.2)
            logger.log_close("a", "evicted", False)
            logger.log_reap(3, ["a"], 0.01)
        events = _read_events(tmpdir)
    assert [e["event"] for e in events] == ["launch", "navigate", "close", "reap"]
    assert events[0]["error"] == "boom"
    assert events[2]["reason"] == "evicted"
    assert events[2]["clean"] is False
    assert events[3]["evicted"] == ["a"]


def test_disabled_without_log_dir():
    logger = SessionEventLogger("run1")
    assert not logger.enabled
    # Never raises
    logger.log_launch("a", "https://a", True, 0.1)
    logger.close()


def test_never_raises_on_bad_dir():
    """Logger should not raise even with an unwritable path."""
    logger = SessionEventLogger("run1", log_dir="/dev/null/impossible")
    assert not logger.enabled
    logger.log_close("a", "closed", True)
    logger.close()


def test_write_after_close_is_noop():
    with tempfile.TemporaryDirectory() as tmpdir:
        logger = SessionEventLogger("run1", log_dir=tmpdir)
        logger.close()
        logger.log_close("a", "closed", True)
        with open(os.path.join(tmpdir, "sessions_run1.jsonl")) as f:
            assert f.read() == ""
