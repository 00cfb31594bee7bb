"""Hover tooltip state machine: loading delay, content display, and anchoring."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from hover_tooltip.doc_render import render_markdown, truncate_html
from hover_tooltip.event_logger import EventLogger
from hover_tooltip.surface import HoverContext, HoverTarget, TooltipContent, TooltipHost, TooltipSurface
from hover_tooltip.throttle import AfterCancelFn, AfterFn, Throttler
from hover_tooltip.tooltip_config import TooltipSettings

_ENGINE_LOGGER = logging.getLogger("HoverTooltip.Engine")

POINTER_CURSOR = "pointer"


@dataclass
class EngineState:
    context: HoverContext = field(default_factory=HoverContext)
    title: Optional[str] = None
    doc: Optional[str] = None
    is_loading: bool = False
    loading_timer: object | None = None


class TooltipEngine:
    """Owns the page's single tooltip surface and decides what it shows and where.

    Every state change funnels into a throttled ``render`` so that quick pointer
    movement across many targets does not flash intermediate tooltips.
    """

    def __init__(
        self,
        host: TooltipHost,
        *,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        settings: TooltipSettings | None = None,
        event_logger: EventLogger | None = None,
        markdown_renderer: Callable[[str], str] | None = None,
        html_truncator: Callable[[str, int], str] | None = None,
    ) -> None:
        self._host = host
        self._after = after
        self._after_cancel = after_cancel
        self._settings = settings or TooltipSettings()
        self._events = event_logger or EventLogger()
        self._render_markdown = markdown_renderer or render_markdown
        self._truncate_html = html_truncator or truncate_html

        self.state = EngineState()
        self._surface: TooltipSurface | None = None
        self._loading_node: object | None = None
        self.render = Throttler(
            self._render,
            self._settings.throttle_ms,
            after=after,
            after_cancel=after_cancel,
            logger=_ENGINE_LOGGER.debug,
        )

    @property
    def settings(self) -> TooltipSettings:
        return self._settings

    @property
    def surface(self) -> TooltipSurface | None:
        return self._surface

    @property
    def loading_node(self) -> object | None:
        return self._loading_node

    def initialize(self) -> None:
        if self._surface is not None or self._loading_node is not None:
            return
        surface = self._host.create_surface(self._settings.marker_class)
        surface.hide()
        self._surface = surface
        self._loading_node = self._host.create_loading_node(self._settings.loading_text)
        _ENGINE_LOGGER.debug("Tooltip surface created (marker=%s)", self._settings.marker_class)

    def set_hover_context(
        self,
        target: Optional[HoverTarget],
        logging_properties: Optional[Mapping[str, Any]],
    ) -> None:
        self.state.context = HoverContext(target=target, logging_properties=logging_properties)

    def clear_hover_context(self) -> None:
        self.set_hover_context(None, None)
        self.set_tooltip_content(None, None)
        self.hide()

    def schedule_loading_indicator(self) -> None:
        self._cancel_loading_indicator()
        self.state.loading_timer = self._after(self._settings.loading_delay_ms, self._on_loading_timer)

    def _on_loading_timer(self) -> None:
        self.state.loading_timer = None
        self.state.is_loading = True
        self.render(self.state.context.target)

    def _cancel_loading_indicator(self) -> None:
        handle = self.state.loading_timer
        self.state.loading_timer = None
        if handle is not None:
            try:
                self._after_cancel(handle)
            except Exception:
                pass
        self.state.is_loading = False

    def set_tooltip_content(self, data: Optional[TooltipContent], target: Optional[HoverTarget]) -> None:
        self._cancel_loading_indicator()
        if data is None:
            self.state.title = None
            self.state.doc = None
        else:
            self.state.title = data.title
            self.state.doc = data.doc or None
        self.render(target)

    def hide(self) -> None:
        surface = self._surface
        if surface is None:
            _ENGINE_LOGGER.warning("Tooltip hide requested before initialize; ignoring")
            return
        surface.clear()
        surface.hide()

    def _render(self, target: Optional[HoverTarget]) -> None:
        surface = self._surface
        if surface is None:
            _ENGINE_LOGGER.warning("Tooltip render requested before initialize; ignoring")
            return
        self.hide()
        if target is None:
            return

        state = self.state
        if not state.is_loading:
            if not state.title:
                return
            surface.append(self._host.create_title_node(state.title))
            if state.doc:
                html = self._truncate_html(self._render_markdown(state.doc), self._settings.doc_max_chars)
                surface.append(self._host.create_doc_node(html))
            self._events.log_event_for_category(
                "Def",
                "Hover",
                "HighlightDef",
                state.context.logging_properties,
            )
            self._mark_clickable(target)
        else:
            surface.append(self._loading_node)

        # Horizontal anchor goes in before measuring; wrapping depends on it.
        rect = target.bounding_rect()
        scroll_x, scroll_y = self._host.scroll_offset()
        surface.set_left(rect.left + scroll_x)
        surface.set_top(rect.top - (surface.measure_height() + self._settings.anchor_gap_px) + scroll_y)
        surface.show()

    def _mark_clickable(self, target: HoverTarget) -> None:
        target.set_cursor(POINTER_CURSOR)
        classes = target.class_names()
        clickable = self._settings.clickable_class
        if clickable not in classes:
            target.set_class_names(f"{classes} {clickable}".strip())
