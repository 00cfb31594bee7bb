from .doc_render import render_doc_html, render_markdown, truncate_html
from .event_logger import EventLogger, LoggingEventSink
from .surface import HoverContext, Rect, TooltipContent
from .throttle import Throttler
from .tooltip_config import TooltipSettings, load_tooltip_settings
from .tooltip_engine import EngineState, TooltipEngine

__all__ = [
    "EngineState",
    "EventLogger",
    "HoverContext",
    "LoggingEventSink",
    "Rect",
    "Throttler",
    "TooltipContent",
    "TooltipEngine",
    "TooltipSettings",
    "load_tooltip_settings",
    "render_doc_html",
    "render_markdown",
    "truncate_html",
]
