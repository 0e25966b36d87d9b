"""Tests for logging setup and ContextualLogger."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from tvhome.log_config.logger import ContextualLogger, setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    def test_creates_rotating_file(self, tmp_path, restore_root) -> None:
        setup_logging("DEBUG", str(tmp_path / "logs"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        logging.getLogger("tvhome.test").info("hello")
        for h in root.handlers:
            h.flush()
        assert "hello" in (tmp_path / "logs" / "tvhome.log").read_text(encoding="utf-8")

    def test_repeat_call_replaces_handlers(self, tmp_path, restore_root) -> None:
        setup_logging("INFO", str(tmp_path))
        setup_logging("INFO", str(tmp_path))
        assert len(logging.getLogger().handlers) == 2

    def test_unknown_level_defaults_to_info(self, tmp_path, restore_root) -> None:
        setup_logging("chatty", str(tmp_path))
        assert logging.getLogger().level == logging.INFO


class TestContextualLogger:
    def test_prefix(self, caplog: pytest.LogCaptureFixture) -> None:
        log = ContextualLogger(logging.getLogger("tvhome.ctx"), cascade="power-off")
        with caplog.at_level(logging.INFO, logger="tvhome.ctx"):
            log.info("attempt %s", "x")
        assert "[cascade=power-off] attempt x" in caplog.text

    def test_bind_adds_context(self, caplog: pytest.LogCaptureFixture) -> None:
        log = ContextualLogger(logging.getLogger("tvhome.ctx"), cascade="a").bind(strategy="b")
        with caplog.at_level(logging.WARNING, logger="tvhome.ctx"):
            log.warning("failed")
        assert "[cascade=a] [strategy=b] failed" in caplog.text
