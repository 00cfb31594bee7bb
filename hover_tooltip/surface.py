"""Data types and host interfaces the tooltip engine renders through."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Tuple


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class TooltipContent:
    title: str
    doc: Optional[str] = None

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> Optional["TooltipContent"]:
        """Build content from a resolver payload, or None when nothing is usable."""
        if not payload:
            return None
        title = payload.get("title")
        if title is None:
            return None
        doc = payload.get("doc")
        return cls(title=str(title), doc=str(doc) if doc else None)


@dataclass(frozen=True)
class HoverContext:
    target: Optional["HoverTarget"] = None
    logging_properties: Optional[Mapping[str, Any]] = None


class HoverTarget(Protocol):
    """An element on the page the pointer is over. The engine never owns it."""

    def bounding_rect(self) -> Rect: ...

    def set_cursor(self, cursor: str) -> None: ...

    def class_names(self) -> str: ...

    def set_class_names(self, value: str) -> None: ...


class TooltipSurface(Protocol):
    """The single floating element that shows loading text or content."""

    def append(self, node: object) -> None: ...

    def clear(self) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def set_left(self, value: float) -> None: ...

    def set_top(self, value: float) -> None: ...

    def measure_height(self) -> float: ...


class TooltipHost(Protocol):
    """Page environment that creates tooltip nodes and reports scroll state."""

    def create_surface(self, marker_class: str) -> TooltipSurface: ...

    def create_loading_node(self, text: str) -> object: ...

    def create_title_node(self, text: str) -> object: ...

    def create_doc_node(self, html: str) -> object: ...

    def scroll_offset(self) -> Tuple[float, float]: ...
