"""Hint marker entity: geometry, z-order and incremental hint matching."""
from __future__ import annotations

import logging
import math
from typing import Optional

from hint_overlay.errors import MarkerNotPositionedError
from hint_overlay.geometry import Anchor, ElementShape, Rect, clamp
from hint_overlay.logging_utils import LOGGER_NAME
from hint_overlay.marker_box import MarkerBox, MarkerContext

_LOGGER = logging.getLogger(LOGGER_NAME)


class HintMarker:
    """One labelled overlay box bound to a candidate page element.

    The marker owns the typed-prefix state for its hint (``hint_index``), the
    rectangle it occupies in unzoomed viewport space (``position``) and its
    draw order (``z_order``). Drawing is delegated to a ``MarkerBox`` created
    from the supplied context.
    """

    def __init__(self, shape: ElementShape, context: MarkerContext) -> None:
        self.shape = shape
        self.weight = shape.area
        self.width = 0.0
        self.height = 0.0
        self.hint = ""
        self.hint_index = 0
        self.zoom = 1.0
        self.viewport: Optional[Rect] = None
        self.position: Optional[Rect] = None
        self.original_position: Optional[Anchor] = None
        self.z_order = 0
        self.matched = False
        self._context = context
        self._box: MarkerBox = context.create_box(shape.element_type)

    def __repr__(self) -> str:
        return f"HintMarker(hint={self.hint!r}, index={self.hint_index}, z={self.z_order}, position={self.position})"

    @property
    def box(self) -> MarkerBox:
        return self._box

    # Hint matching -------------------------------------------------------

    def set_hint(self, hint: str) -> None:
        self.hint = hint
        self.hint_index = 0
        self._box.set_characters(list(hint))

    def match_hint_char(self, char: str) -> bool:
        """Accept ``char`` if it is the next unmatched hint character."""
        if self.hint_index >= len(self.hint) or self.hint[self.hint_index] != char:
            return False
        self._box.set_char_matched(self.hint_index, True)
        self.hint_index += 1
        return True

    def delete_hint_char(self) -> None:
        if self.hint_index <= 0:
            return
        self.hint_index -= 1
        self._box.set_char_matched(self.hint_index, False)

    def is_matched(self) -> bool:
        return self.hint_index == len(self.hint)

    def mark_matched(self, matched: bool) -> None:
        self.matched = matched
        self._box.set_highlighted(matched)

    # Visibility ----------------------------------------------------------

    def show(self) -> None:
        self.set_visibility(True)

    def hide(self) -> None:
        self.set_visibility(False)

    def set_visibility(self, visible: bool) -> None:
        self._box.set_visible(visible)

    # Geometry ------------------------------------------------------------

    def set_position(self, viewport: Rect, zoom: float) -> None:
        """Centre the marker on the shape's non-covered point and place it.

        The box must already carry its hint characters so the rendered size is
        meaningful.
        """
        self.viewport = viewport
        self.zoom = zoom
        rendered_width, rendered_height = self._box.rendered_size()
        self.width = rendered_width / zoom
        self.height = rendered_height / zoom
        point = self.shape.non_covered_point
        left = point.x + point.offset.left
        top = point.y - math.ceil(self.height / 2) + point.offset.top
        self.original_position = Anchor(left=left, top=top)
        self.move_to(left, top)

    def move_to(self, left: float, top: float) -> None:
        viewport = self.viewport
        if viewport is None:
            raise MarkerNotPositionedError("move_to called before set_position")
        left = clamp(left, viewport.left, viewport.right - self.width)
        top = clamp(top, viewport.top, viewport.bottom - self.height)
        self._box.move(left * self.zoom, top * self.zoom)
        self.position = Rect(left=left, top=top, right=left + self.width, bottom=top + self.height)

    def update_position(self, dx: float, dy: float) -> None:
        anchor = self.original_position
        if anchor is None:
            raise MarkerNotPositionedError("update_position called before set_position")
        self.move_to(anchor.left + dx, anchor.top + dy)

    # Lifecycle -----------------------------------------------------------

    def set_z_order(self, z_order: int) -> None:
        self.z_order = z_order
        self._box.set_z_order(z_order)

    def reset(self) -> None:
        self.set_hint(self.hint)
        self.show()

    def detach(self) -> None:
        _LOGGER.debug("Detaching marker %r", self.hint)
        self._context.remove_box(self._box)
