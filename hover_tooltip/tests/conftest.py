from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest

from hover_tooltip.event_logger import EventLogger
from hover_tooltip.surface import Rect
from hover_tooltip.tooltip_engine import TooltipEngine


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


class ManualClock:
    """after/after_cancel harness that only fires timers when advanced."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._seq = 0
        self._timers: dict[str, tuple[int, int, Callable[[], None]]] = {}
        self.scheduled: list[tuple[str, int]] = []
        self.cancelled: list[str] = []

    def after(self, ms: int, cb: Callable[[], None]) -> str:
        self._seq += 1
        handle = f"h{self._seq}"
        self._timers[handle] = (self.now_ms + ms, self._seq, cb)
        self.scheduled.append((handle, ms))
        return handle

    def cancel(self, handle: str) -> None:
        self.cancelled.append(handle)
        self._timers.pop(handle, None)

    def advance(self, ms: int) -> None:
        deadline = self.now_ms + ms
        while True:
            due = sorted((when, seq, handle) for handle, (when, seq, _cb) in self._timers.items() if when <= deadline)
            if not due:
                break
            when, _seq, handle = due[0]
            _when, _s, cb = self._timers.pop(handle)
            self.now_ms = when
            cb()
        self.now_ms = deadline

    def time(self) -> float:
        return self.now_ms / 1000.0

    @property
    def pending(self) -> int:
        return len(self._timers)


@dataclass
class FakeNode:
    kind: str
    text: str


class FakeSurface:
    def __init__(self, marker_class: str, *, padding: float = 10.0, line_height: float = 15.0) -> None:
        self.marker_class = marker_class
        self.children: list[FakeNode] = []
        self.visible = True
        self.left: Optional[float] = None
        self.top: Optional[float] = None
        self.padding = padding
        self.line_height = line_height
        self.shown: list[list[FakeNode]] = []
        self.left_when_measured: Optional[float] = None

    def append(self, node: object) -> None:
        assert isinstance(node, FakeNode)
        self.children.append(node)

    def clear(self) -> None:
        self.children = []

    def show(self) -> None:
        self.visible = True
        self.shown.append(list(self.children))

    def hide(self) -> None:
        self.visible = False

    def set_left(self, value: float) -> None:
        self.left = value

    def set_top(self, value: float) -> None:
        self.top = value

    def measure_height(self) -> float:
        self.left_when_measured = self.left
        return self.padding + self.line_height * len(self.children)


class FakeHost:
    def __init__(self) -> None:
        self.surfaces: list[FakeSurface] = []
        self.loading_nodes: list[FakeNode] = []
        self.scroll = (0.0, 0.0)

    def create_surface(self, marker_class: str) -> FakeSurface:
        surface = FakeSurface(marker_class)
        self.surfaces.append(surface)
        return surface

    def create_loading_node(self, text: str) -> FakeNode:
        node = FakeNode("loading", text)
        self.loading_nodes.append(node)
        return node

    def create_title_node(self, text: str) -> FakeNode:
        return FakeNode("title", text)

    def create_doc_node(self, html: str) -> FakeNode:
        return FakeNode("doc", html)

    def scroll_offset(self) -> tuple[float, float]:
        return self.scroll


@dataclass
class FakeTarget:
    rect: Rect
    classes: str = ""
    cursor: Optional[str] = None
    class_writes: int = 0

    def bounding_rect(self) -> Rect:
        return self.rect

    def set_cursor(self, cursor: str) -> None:
        self.cursor = cursor

    def class_names(self) -> str:
        return self.classes

    def set_class_names(self, value: str) -> None:
        self.classes = value
        self.class_writes += 1


@dataclass
class RecordingSink:
    events: list[tuple[str, str, str, Any]] = field(default_factory=list)

    def __call__(self, category, action, label, properties=None) -> None:
        self.events.append((category, action, label, properties))


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(host: FakeHost, clock: ManualClock, sink: RecordingSink) -> TooltipEngine:
    instance = TooltipEngine(
        host,
        after=clock.after,
        after_cancel=clock.cancel,
        event_logger=EventLogger(sink),
    )
    instance.initialize()
    return instance


@pytest.fixture
def make_target() -> Callable[..., FakeTarget]:
    def _make(left: float = 100.0, top: float = 200.0, classes: str = "") -> FakeTarget:
        return FakeTarget(Rect(left, top, 40.0, 16.0), classes=classes)

    return _make
