from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from hover_tooltip import logging_utils
from hover_tooltip.tooltip_config import TooltipSettings


@pytest.fixture
def _restore_root_logger(monkeypatch):
    monkeypatch.delenv(logging_utils.PROPAGATE_ENV_VAR, raising=False)
    logger = logging.getLogger(logging_utils.ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


def test_resolve_logs_dir_prefers_env(tmp_path, monkeypatch):
    monkeypatch.setenv(logging_utils.LOG_DIR_ENV_VAR, str(tmp_path / "custom"))

    target = logging_utils.resolve_logs_dir()
    assert target == tmp_path / "custom" / "HoverTooltip"
    assert target.is_dir()


def test_resolve_logs_dir_uses_xdg_state(tmp_path, monkeypatch):
    monkeypatch.delenv(logging_utils.LOG_DIR_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))

    assert logging_utils.resolve_logs_dir("Tips") == tmp_path / "state" / "Tips"


def test_rotating_handler_uses_settings_limits(tmp_path):
    settings = TooltipSettings(log_retention=3, log_max_bytes=8192)
    handler = logging_utils.build_rotating_file_handler(settings, tmp_path / "logs")
    try:
        assert isinstance(handler, RotatingFileHandler)
        assert handler.backupCount == 2
        assert handler.maxBytes == 8192
        assert handler.baseFilename.endswith(logging_utils.LOG_FILENAME)
        assert (tmp_path / "logs").is_dir()
    finally:
        handler.close()


def test_rotating_handler_keeps_single_file_when_retention_is_one(tmp_path):
    handler = logging_utils.build_rotating_file_handler(TooltipSettings(log_retention=1), tmp_path)
    try:
        assert handler.backupCount == 0
    finally:
        handler.close()


def test_resolve_log_level():
    assert logging_utils.resolve_log_level(True) == logging.DEBUG
    assert logging_utils.resolve_log_level(False) == logging.INFO


def test_configure_logging_attaches_single_handler(tmp_path, _restore_root_logger):
    logger = logging_utils.configure_logging(TooltipSettings(debug=True), log_dir=tmp_path)
    logging_utils.configure_logging(TooltipSettings(debug=True), log_dir=tmp_path)

    ours = [h for h in logger.handlers if getattr(h, "_hover_tooltip_handler", False)]
    assert len(ours) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False

    logging.getLogger("HoverTooltip.Engine").debug("hello from engine")
    ours[0].flush()
    assert "hello from engine" in (tmp_path / logging_utils.LOG_FILENAME).read_text(encoding="utf-8")


def test_configure_logging_propagation_env(tmp_path, monkeypatch, _restore_root_logger):
    monkeypatch.setenv(logging_utils.PROPAGATE_ENV_VAR, "true")

    logger = logging_utils.configure_logging(TooltipSettings(), log_dir=tmp_path)
    assert logger.propagate is True
    assert logger.level == logging.INFO
