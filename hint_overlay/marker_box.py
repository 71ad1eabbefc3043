"""Rendering contracts for marker boxes plus a headless implementation (pure, no Qt)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple


class MarkerBox(Protocol):
    """Visual box drawn for one marker; one sub-box per hint character."""

    def set_characters(self, chars: Sequence[str]) -> None: ...

    def set_char_matched(self, index: int, matched: bool) -> None: ...

    def rendered_size(self) -> Tuple[float, float]: ...

    def move(self, x: float, y: float) -> None: ...

    def set_visible(self, visible: bool) -> None: ...

    def set_highlighted(self, highlighted: bool) -> None: ...

    def set_z_order(self, z_order: int) -> None: ...


class MarkerContext(Protocol):
    """Creates and removes marker boxes on some rendering surface."""

    def create_box(self, element_type: str) -> MarkerBox: ...

    def remove_box(self, box: MarkerBox) -> None: ...


@dataclass(eq=False)
class HeadlessMarkerBox:
    """Records marker presentation state and estimates its size from fixed metrics."""

    element_type: str
    char_width: float = 8.0
    char_height: float = 14.0
    padding: float = 2.0
    chars: List[str] = field(default_factory=list)
    matched_chars: List[bool] = field(default_factory=list)
    pos: Optional[Tuple[float, float]] = None
    visible: bool = True
    highlighted: bool = False
    z_order: int = 0
    attached: bool = True

    def set_characters(self, chars: Sequence[str]) -> None:
        self.chars = list(chars)
        self.matched_chars = [False] * len(self.chars)

    def set_char_matched(self, index: int, matched: bool) -> None:
        self.matched_chars[index] = matched

    def rendered_size(self) -> Tuple[float, float]:
        width = len(self.chars) * self.char_width + 2 * self.padding
        height = self.char_height + 2 * self.padding
        return width, height

    def move(self, x: float, y: float) -> None:
        self.pos = (x, y)

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    def set_highlighted(self, highlighted: bool) -> None:
        self.highlighted = highlighted

    def set_z_order(self, z_order: int) -> None:
        self.z_order = z_order

    def matched_text(self) -> str:
        return "".join(ch for ch, done in zip(self.chars, self.matched_chars) if done)


class HeadlessMarkerContext:
    """Marker context that keeps boxes in a list instead of drawing them."""

    def __init__(self, *, char_width: float = 8.0, char_height: float = 14.0, padding: float = 2.0) -> None:
        self._char_width = char_width
        self._char_height = char_height
        self._padding = padding
        self.boxes: List[HeadlessMarkerBox] = []

    def create_box(self, element_type: str) -> HeadlessMarkerBox:
        box = HeadlessMarkerBox(
            element_type=element_type,
            char_width=self._char_width,
            char_height=self._char_height,
            padding=self._padding,
        )
        self.boxes.append(box)
        return box

    def remove_box(self, box: MarkerBox) -> None:
        self.boxes = [existing for existing in self.boxes if existing is not box]
        if isinstance(box, HeadlessMarkerBox):
            box.attached = False
