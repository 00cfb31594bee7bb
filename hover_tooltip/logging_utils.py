from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from hover_tooltip.tooltip_config import TooltipSettings

ROOT_LOGGER_NAME = "HoverTooltip"
LOG_FILENAME = "hover_tooltip.log"
LOG_DIR_ENV_VAR = "HOVER_TOOLTIP_LOG_DIR"
PROPAGATE_ENV_VAR = "HOVER_TOOLTIP_PROPAGATE_LOGS"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_logs_dir(log_dir_name: str = "HoverTooltip") -> Path:
    """
    Resolve the directory to store tooltip logs.

    Strategy:
    - Use HOVER_TOOLTIP_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home)
    candidates.append(cache_home)
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(settings: TooltipSettings, log_dir: Path) -> RotatingFileHandler:
    """File handler for ``hover_tooltip.log`` that keeps ``settings.log_retention`` files in total."""
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=max(1, settings.log_max_bytes),
        backupCount=max(0, settings.log_retention - 1),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._hover_tooltip_handler = True  # type: ignore[attr-defined]
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_logging(settings: TooltipSettings, *, log_dir: Optional[Path] = None) -> logging.Logger:
    """Attach the rotating file handler to the package logger once and set its level."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolve_log_level(settings.debug))
    logger.propagate = os.environ.get(PROPAGATE_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}
    if not any(getattr(handler, "_hover_tooltip_handler", False) for handler in logger.handlers):
        logger.addHandler(build_rotating_file_handler(settings, log_dir or resolve_logs_dir()))
    return logger
