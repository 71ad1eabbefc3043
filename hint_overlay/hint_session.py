"""Routes typed characters, scrolling and rotate requests to a set of hint markers."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from hint_overlay.debug_config import DebugConfig
from hint_overlay.geometry import ElementShape, Rect
from hint_overlay.hint_marker import HintMarker
from hint_overlay.logging_utils import LOGGER_NAME, propagation_requested
from hint_overlay.marker_box import MarkerContext
from hint_overlay.overlap_resolver import rotate_overlapping_markers
from hint_overlay.settings import HintOverlaySettings

_LOGGER = logging.getLogger(LOGGER_NAME)
_LOGGER.propagate = propagation_requested()


@dataclass
class _Keystroke:
    char: str
    accepted: List[HintMarker] = field(default_factory=list)
    rejected: List[HintMarker] = field(default_factory=list)


class HintSession:
    """Owns the markers of one hint-mode session.

    Candidates are the markers whose hint still starts with everything typed
    so far. Rejected markers are hidden (when ``hide_unmatched`` is set) and
    come back when the keystroke that rejected them is deleted.
    """

    def __init__(
        self,
        context: MarkerContext,
        settings: Optional[HintOverlaySettings] = None,
        debug_config: Optional[DebugConfig] = None,
    ) -> None:
        self._context = context
        self._settings = settings or HintOverlaySettings()
        self._debug = debug_config or DebugConfig()
        self._markers: List[HintMarker] = []
        self._history: List[_Keystroke] = []

    @property
    def markers(self) -> List[HintMarker]:
        return list(self._markers)

    @property
    def typed(self) -> str:
        return "".join(stroke.char for stroke in self._history)

    def candidates(self) -> List[HintMarker]:
        if self._history:
            return list(self._history[-1].accepted)
        return list(self._markers)

    def visible_markers(self) -> List[HintMarker]:
        """Markers currently drawn: the candidates, or all markers when rejected ones stay shown."""
        if self._settings.hide_unmatched:
            return self.candidates()
        return list(self._markers)

    def add_markers(self, shapes: Sequence[ElementShape], hints: Sequence[str]) -> List[HintMarker]:
        if len(shapes) != len(hints):
            raise ValueError(f"got {len(shapes)} shapes but {len(hints)} hints")
        created: List[HintMarker] = []
        for shape, hint in zip(shapes, hints):
            marker = HintMarker(shape, self._context)
            marker.set_hint(hint)
            marker.set_z_order(len(self._markers))
            self._markers.append(marker)
            created.append(marker)
        _LOGGER.debug("Added %d markers (total=%d)", len(created), len(self._markers))
        return created

    def layout(self, viewport: Rect, zoom: float) -> None:
        for marker in self._markers:
            marker.set_position(viewport, zoom)
        self._restack()

    def scroll(self, dx: float, dy: float) -> None:
        for marker in self._markers:
            marker.update_position(dx, dy)

    def type_char(self, char: str) -> Optional[HintMarker]:
        """Feed one character; returns the marker it completed, if any.

        A character no candidate accepts is ignored.
        """
        candidates = self.candidates()
        accepted = [marker for marker in candidates if marker.match_hint_char(char)]
        if not accepted:
            if self._debug.trace_hints:
                _LOGGER.debug("Ignoring %r after %r: no candidate accepts it", char, self.typed)
            return None
        accepted_ids = {id(marker) for marker in accepted}
        rejected = [marker for marker in candidates if id(marker) not in accepted_ids]
        if self._settings.hide_unmatched:
            for marker in rejected:
                marker.hide()
        self._history.append(_Keystroke(char=char, accepted=accepted, rejected=rejected))
        self._refresh_highlight()
        if self._debug.trace_hints:
            _LOGGER.debug("Typed %r: %d candidates remain", self.typed, len(accepted))
        for marker in accepted:
            if marker.is_matched():
                _LOGGER.debug("Marker %r fully matched", marker.hint)
                return marker
        return None

    def delete_char(self) -> None:
        if not self._history:
            return
        stroke = self._history.pop()
        for marker in stroke.accepted:
            marker.delete_hint_char()
        if self._settings.hide_unmatched:
            for marker in stroke.rejected:
                marker.show()
        self._refresh_highlight()
        if self._debug.trace_hints:
            _LOGGER.debug("Deleted %r; typed is now %r", stroke.char, self.typed)

    def rotate(self, forward: bool = True) -> List[List[HintMarker]]:
        """Rotate z-order among overlapping visible markers and restack the surface."""
        stacks = rotate_overlapping_markers(self.visible_markers(), forward)
        if self._debug.trace_rotations:
            for stack in stacks:
                if len(stack) > 1:
                    _LOGGER.debug(
                        "Stack %s -> z %s",
                        [marker.hint for marker in stack],
                        [marker.z_order for marker in stack],
                    )
        self._restack()
        return stacks

    def restart(self) -> None:
        """Clear typed progress on every marker and show them all again."""
        self._history = []
        for marker in self._markers:
            marker.reset()
            if marker.matched:
                marker.mark_matched(False)

    def close(self) -> None:
        for marker in self._markers:
            marker.detach()
        _LOGGER.debug("Closed hint session with %d markers", len(self._markers))
        self._markers = []
        self._history = []

    def _refresh_highlight(self) -> None:
        candidates = self.candidates()
        lone = None
        if self._settings.highlight_last_candidate and self._history and len(candidates) == 1:
            lone = candidates[0]
        for marker in self._markers:
            wanted = marker is lone
            if marker.matched != wanted:
                marker.mark_matched(wanted)

    def _restack(self) -> None:
        restack = getattr(self._context, "restack", None)
        if callable(restack):
            restack()
