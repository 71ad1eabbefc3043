"""Hint marker overlay: incremental hint matching and overlap stack rotation."""

from hint_overlay.geometry import Anchor, ElementShape, FrameOffset, NonCoveredPoint, Rect
from hint_overlay.hint_marker import HintMarker
from hint_overlay.overlap_resolver import get_stack_for, partition_stacks, rotate_overlapping_markers

__all__ = [
    "Anchor",
    "ElementShape",
    "FrameOffset",
    "HintMarker",
    "NonCoveredPoint",
    "Rect",
    "get_stack_for",
    "partition_stacks",
    "rotate_overlapping_markers",
]
