"""Settings loader for the hover tooltip engine."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

SETTINGS_ENV_VAR = "HOVER_TOOLTIP_SETTINGS"
DEBUG_ENV_VAR = "HOVER_TOOLTIP_DEBUG"
SETTINGS_FILENAME = "tooltip_settings.json"

_TRUE_TOKENS = {"1", "true", "yes", "on"}
_FALSE_TOKENS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class TooltipSettings:
    loading_delay_ms: int = 500
    throttle_ms: int = 50
    anchor_gap_px: int = 5
    doc_max_chars: int = 300
    marker_class: str = "sg-tooltip"
    clickable_class: str = "sg-clickable"
    loading_text: str = "Loading..."
    log_retention: int = 5
    log_max_bytes: int = 512 * 1024
    debug: bool = False


_DEFAULTS = TooltipSettings()


def _coerce_int(value: Any, default: int, *, minimum: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, numeric)


def _coerce_text(value: Any, default: str) -> str:
    if not isinstance(value, str):
        return default
    token = value.strip()
    return token or default


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    return default


def settings_from_mapping(data: Mapping[str, Any]) -> TooltipSettings:
    """Build settings from a decoded JSON object, ignoring unknown keys."""

    return TooltipSettings(
        loading_delay_ms=_coerce_int(data.get("loading_delay_ms"), _DEFAULTS.loading_delay_ms, minimum=0),
        throttle_ms=_coerce_int(data.get("throttle_ms"), _DEFAULTS.throttle_ms, minimum=1),
        anchor_gap_px=_coerce_int(data.get("anchor_gap_px"), _DEFAULTS.anchor_gap_px, minimum=0),
        doc_max_chars=_coerce_int(data.get("doc_max_chars"), _DEFAULTS.doc_max_chars, minimum=1),
        marker_class=_coerce_text(data.get("marker_class"), _DEFAULTS.marker_class),
        clickable_class=_coerce_text(data.get("clickable_class"), _DEFAULTS.clickable_class),
        loading_text=_coerce_text(data.get("loading_text"), _DEFAULTS.loading_text),
        log_retention=_coerce_int(data.get("log_retention"), _DEFAULTS.log_retention, minimum=1),
        log_max_bytes=_coerce_int(data.get("log_max_bytes"), _DEFAULTS.log_max_bytes, minimum=4096),
        debug=_coerce_bool(data.get("debug"), _DEFAULTS.debug),
    )


def resolve_settings_path(default_dir: Path) -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return default_dir / SETTINGS_FILENAME


def load_tooltip_settings(path: Optional[Path]) -> TooltipSettings:
    """Read settings JSON; a missing or malformed file yields defaults."""

    data: Any = {}
    if path is not None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (FileNotFoundError, OSError, json.JSONDecodeError):
            data = {}
    settings = settings_from_mapping(data if isinstance(data, dict) else {})
    if _coerce_bool(os.environ.get(DEBUG_ENV_VAR), False):
        settings = replace(settings, debug=True)
    return settings
