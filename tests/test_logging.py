"""
Tests for logging helpers.
"""

import json

import pytest
from structlog.testing import capture_logs

import common.logging as app_logging
from common.config import Config
from common.logging import TimedLogger, get_logger, pretty_renderer


def test_timed_logger_records_elapsed_time():
    """Test TimedLogger logs its event with elapsed_ms and context."""
    with capture_logs() as logs:
        logger = get_logger("test")
        with TimedLogger(logger, "receipt_scan", image_size=42) as timer:
            pass

    assert timer.elapsed_ms is not None and timer.elapsed_ms >= 0
    assert len(logs) == 1
    entry = logs[0]
    assert entry["event"] == "receipt_scan"
    assert entry["log_level"] == "info"
    assert entry["elapsed_ms"] == timer.elapsed_ms
    assert entry["succeeded"] is True
    assert entry["image_size"] == 42


def test_timed_logger_marks_failures():
    """Test an exception inside the block is logged as unsuccessful and propagates."""
    with capture_logs() as logs:
        logger = get_logger("test")
        with pytest.raises(RuntimeError):
            with TimedLogger(logger, "gateway_invoke"):
                raise RuntimeError("boom")

    assert logs[0]["succeeded"] is False


def test_pretty_renderer_json_by_default(monkeypatch):
    """Test entries render as JSON unless pretty print is enabled."""
    monkeypatch.setattr(app_logging, "_config", Config())

    rendered = pretty_renderer(None, None, {"event": "started", "port": 8000})

    assert json.loads(rendered) == {"event": "started", "port": 8000}


def test_pretty_renderer_pretty(monkeypatch):
    """Test pretty mode prints one field per line and hides the level."""
    monkeypatch.setattr(app_logging, "_config", Config(enable_pretty_print=True))

    rendered = pretty_renderer(None, None, {"event": "started", "level": "info", "port": 8000})

    assert rendered.splitlines()[0] == "EVENT: started"
    assert "port: 8000" in rendered
    assert "level" not in rendered
