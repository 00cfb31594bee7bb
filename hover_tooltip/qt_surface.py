"""PyQt6 host for the tooltip engine: a QScrollArea page plays the role of the document."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple

from PyQt6.QtCore import QEvent, QObject, QPoint, Qt, QTimer
from PyQt6.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget

from hover_tooltip.event_logger import EventLogger
from hover_tooltip.logging_utils import configure_logging
from hover_tooltip.surface import Rect, TooltipContent
from hover_tooltip.tooltip_config import TooltipSettings, load_tooltip_settings, resolve_settings_path
from hover_tooltip.tooltip_engine import TooltipEngine

_QT_LOGGER = logging.getLogger("HoverTooltip.Qt")

_PERSISTENT_PROPERTY = "hoverTooltipPersistent"

TOOLTIP_STYLE = """
QFrame#HoverTooltip {
    background-color: #2D2D30;
    border: 1px solid #555;
    color: rgba(213, 229, 242, 255);
    font-family: "Helvetica Neue", Helvetica, Arial, sans-serif;
    font-size: 12px;
}
QLabel#HoverTooltipTitle {
    font-family: Menlo, Monaco, Consolas, "Courier New", monospace;
    color: rgba(213, 229, 242, 255);
}
QLabel#HoverTooltipDoc {
    border-top: 1px solid rgba(255, 255, 255, 204);
    margin-top: 5px;
    padding-top: 10px;
    color: rgba(213, 229, 242, 255);
}
QLabel#HoverTooltipLoading {
    color: rgba(213, 229, 242, 255);
}
QScrollArea#HoverTooltipScroll, QWidget#HoverTooltipContent {
    background: transparent;
    border: none;
}
"""

_CURSORS = {
    "pointer": Qt.CursorShape.PointingHandCursor,
    "default": Qt.CursorShape.ArrowCursor,
    "text": Qt.CursorShape.IBeamCursor,
}


class QtScheduler:
    """``after``/``after_cancel`` pair backed by single-shot QTimers."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent
        self._timers: set[QTimer] = set()

    def after(self, ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)

        def _fire() -> None:
            self._release(timer)
            callback()

        timer.timeout.connect(_fire)
        self._timers.add(timer)
        timer.start(max(0, int(ms)))
        return timer

    def after_cancel(self, handle: object) -> None:
        if isinstance(handle, QTimer):
            handle.stop()
            self._release(handle)

    def _release(self, timer: QTimer) -> None:
        if timer in self._timers:
            self._timers.discard(timer)
            timer.deleteLater()

    @property
    def active_count(self) -> int:
        return len(self._timers)


class QtHoverTarget:
    """Adapts a page widget to the engine's hover-target interface."""

    def __init__(self, widget: QWidget, viewport: QWidget) -> None:
        self.widget = widget
        self._viewport = viewport

    def bounding_rect(self) -> Rect:
        origin = self.widget.mapTo(self._viewport, QPoint(0, 0))
        return Rect(origin.x(), origin.y(), self.widget.width(), self.widget.height())

    def set_cursor(self, cursor: str) -> None:
        self.widget.setCursor(_CURSORS.get(cursor, Qt.CursorShape.ArrowCursor))

    def class_names(self) -> str:
        value = self.widget.property("class")
        return str(value) if value else ""

    def set_class_names(self, value: str) -> None:
        self.widget.setProperty("class", value)
        style = self.widget.style()
        if style is not None:
            style.unpolish(self.widget)
            style.polish(self.widget)


class QtTooltipSurface(QFrame):
    """The floating tooltip frame, positioned in page coordinates."""

    MAX_WIDTH = 500
    MAX_HEIGHT = 250

    def __init__(self, parent: QWidget, marker_class: str) -> None:
        super().__init__(parent)
        self.setObjectName("HoverTooltip")
        self.setProperty("class", marker_class)
        self.setStyleSheet(TOOLTIP_STYLE)
        self.setMaximumSize(self.MAX_WIDTH, self.MAX_HEIGHT)

        # Content taller than MAX_HEIGHT scrolls instead of being clipped.
        scroll = QScrollArea(self)
        scroll.setObjectName("HoverTooltipScroll")
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        scroll.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        content = QWidget()
        content.setObjectName("HoverTooltipContent")
        layout = QVBoxLayout(content)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(0)
        scroll.setWidget(content)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.addWidget(scroll)

        self._scroll = scroll
        self._content = content
        self._layout = layout
        self._nodes: list[QWidget] = []

    @property
    def scroll_area(self) -> QScrollArea:
        return self._scroll

    def content_widget(self) -> QWidget:
        return self._content

    def nodes(self) -> list[QWidget]:
        return list(self._nodes)

    def append(self, node: object) -> None:
        if not isinstance(node, QWidget):
            raise TypeError(f"tooltip nodes must be QWidgets, got {type(node).__name__}")
        self._layout.addWidget(node)
        node.show()
        self._nodes.append(node)

    def clear(self) -> None:
        nodes, self._nodes = self._nodes, []
        for node in nodes:
            self._layout.removeWidget(node)
            node.hide()
            node.setParent(None)
            if not node.property(_PERSISTENT_PROPERTY):
                node.deleteLater()

    def set_left(self, value: float) -> None:
        self.move(int(round(value)), self.y())

    def set_top(self, value: float) -> None:
        self.move(self.x(), int(round(value)))

    def content_height(self) -> int:
        self._layout.activate()
        return self._content.sizeHint().height()

    def measure_height(self) -> float:
        hint = self._content.sizeHint()
        frame = 2 * self.frameWidth()
        height = self.content_height() + frame
        width = hint.width() + frame
        if height > self.MAX_HEIGHT:
            width += self._scroll.verticalScrollBar().sizeHint().width()
        self.resize(min(width, self.MAX_WIDTH), min(height, self.MAX_HEIGHT))
        return float(self.height())

    def show(self) -> None:  # type: ignore[override]
        super().show()
        self.raise_()


class QtPageHost:
    """Creates tooltip nodes on a scroll area's page widget and reports its scroll offset."""

    def __init__(self, scroll_area: QScrollArea) -> None:
        page = scroll_area.widget()
        if page is None:
            raise ValueError("scroll area has no page widget")
        self._scroll_area = scroll_area
        self._page = page

    def create_surface(self, marker_class: str) -> QtTooltipSurface:
        surface = QtTooltipSurface(self._page, marker_class)
        surface.hide()
        return surface

    def create_loading_node(self, text: str) -> QLabel:
        label = QLabel(text)
        label.setObjectName("HoverTooltipLoading")
        label.setProperty(_PERSISTENT_PROPERTY, True)
        return label

    def create_title_node(self, text: str) -> QLabel:
        label = QLabel()
        label.setObjectName("HoverTooltipTitle")
        label.setTextFormat(Qt.TextFormat.PlainText)
        label.setWordWrap(True)
        label.setText(text)
        return label

    def create_doc_node(self, html: str) -> QLabel:
        label = QLabel()
        label.setObjectName("HoverTooltipDoc")
        label.setTextFormat(Qt.TextFormat.RichText)
        label.setWordWrap(True)
        label.setOpenExternalLinks(False)
        label.setText(html)
        return label

    def scroll_offset(self) -> Tuple[float, float]:
        return (
            float(self._scroll_area.horizontalScrollBar().value()),
            float(self._scroll_area.verticalScrollBar().value()),
        )

    def target_for(self, widget: QWidget) -> QtHoverTarget:
        return QtHoverTarget(widget, self._scroll_area.viewport())


Resolver = Callable[[QWidget, Callable[[Optional[TooltipContent]], None]], None]


class HoverEventFilter(QObject):
    """Drives the engine from Enter/Leave events on page widgets."""

    def __init__(
        self,
        engine: TooltipEngine,
        host: QtPageHost,
        resolver: Resolver,
        logging_properties: Callable[[QWidget], Optional[Mapping[str, Any]]] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._host = host
        self._resolver = resolver
        self._logging_properties = logging_properties

    def eventFilter(self, obj, event) -> bool:  # type: ignore[override]
        if not isinstance(obj, QWidget):
            return False
        kind = event.type()
        if kind == QEvent.Type.Enter:
            self.hover(obj)
        elif kind == QEvent.Type.Leave:
            self._engine.clear_hover_context()
        return False

    def hover(self, widget: QWidget) -> None:
        target = self._host.target_for(widget)
        props = self._logging_properties(widget) if self._logging_properties else None
        self._engine.set_hover_context(target, props)
        self._engine.schedule_loading_indicator()

        def deliver(content: Optional[TooltipContent]) -> None:
            if self._engine.state.context.target is not target:
                _QT_LOGGER.debug("Dropping tooltip content for stale target %s", widget.objectName())
                return
            self._engine.set_tooltip_content(content, target)

        self._resolver(widget, deliver)


def build_engine(
    scroll_area: QScrollArea,
    settings: TooltipSettings | None = None,
    event_logger: EventLogger | None = None,
    *,
    config_dir: Path | None = None,
    log_dir: Path | None = None,
) -> tuple[TooltipEngine, QtPageHost]:
    """
    Create and initialize an engine bound to ``scroll_area``'s page.

    Without explicit ``settings`` they are read from ``tooltip_settings.json`` in
    ``config_dir`` (or the working directory, or ``HOVER_TOOLTIP_SETTINGS``).
    Passing ``log_dir`` attaches the rotating file handler to the package logger.
    """
    if settings is None:
        settings = load_tooltip_settings(resolve_settings_path(config_dir or Path.cwd()))
    if log_dir is not None:
        configure_logging(settings, log_dir=log_dir)
    _QT_LOGGER.debug("Building tooltip engine (debug=%s)", settings.debug)
    host = QtPageHost(scroll_area)
    scheduler = QtScheduler(scroll_area)
    engine = TooltipEngine(
        host,
        after=scheduler.after,
        after_cancel=scheduler.after_cancel,
        settings=settings,
        event_logger=event_logger,
    )
    engine.initialize()
    return engine, host
