from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional

_EVENTS_LOGGER = logging.getLogger("HoverTooltip.Events")

EventSink = Callable[[str, str, str, Optional[Mapping[str, Any]]], None]


class LoggingEventSink:
    """Writes each event as one JSON line on the events logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or _EVENTS_LOGGER
        self._level = level

    def __call__(
        self,
        category: str,
        action: str,
        label: str,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        record = {"category": category, "action": action, "label": label}
        if properties:
            record["properties"] = dict(properties)
        self._logger.log(self._level, "event %s", json.dumps(record, sort_keys=True, default=str))


class EventLogger:
    """Fire-and-forget front for hover analytics; a failing sink never reaches the caller."""

    def __init__(self, sink: EventSink | None = None) -> None:
        self._sink: EventSink = sink or LoggingEventSink()

    def log_event_for_category(
        self,
        category: str,
        action: str,
        label: str,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        try:
            self._sink(category, action, label, properties)
        except Exception as exc:
            _EVENTS_LOGGER.warning("Dropped %s/%s/%s event: %s", category, action, label, exc)
