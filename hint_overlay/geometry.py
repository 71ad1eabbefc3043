"""Geometry value types shared by hint markers and the overlap resolver (pure, no Qt)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from hint_overlay.errors import ShapeFormatError


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into ``[low, high]``, applying ``min`` before ``max``.

    When ``high < low`` the result is ``low``; an oversized marker pins to the
    viewport's top-left corner instead of failing.
    """
    return max(min(value, high), low)


@dataclass(frozen=True)
class FrameOffset:
    left: float = 0.0
    top: float = 0.0


@dataclass(frozen=True)
class NonCoveredPoint:
    x: float
    y: float
    offset: FrameOffset = FrameOffset()


@dataclass(frozen=True)
class Anchor:
    left: float
    top: float


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def overlaps(self, other: "Rect") -> bool:
        """Inclusive overlap test; rectangles sharing only an edge overlap."""
        return (
            self.bottom >= other.top
            and self.top <= other.bottom
            and self.right >= other.left
            and self.left <= other.right
        )

    def contains(self, other: "Rect") -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class ElementShape:
    """Geometry of one candidate element as reported by the page."""

    area: float
    non_covered_point: NonCoveredPoint
    element_type: str = "link"

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ElementShape":
        """Build a shape from a camelCase JSON mapping.

        Expected keys: ``area``, ``nonCoveredPoint`` (``x``, ``y`` and an
        optional ``offset`` with ``left``/``top``) and an optional ``type``.
        """
        if not isinstance(payload, Mapping):
            raise ShapeFormatError(f"shape must be an object, got {type(payload).__name__}")
        point = payload.get("nonCoveredPoint")
        if "area" not in payload or not isinstance(point, Mapping):
            raise ShapeFormatError("shape requires 'area' and 'nonCoveredPoint'")
        offset_raw = point.get("offset") or {}
        try:
            offset = FrameOffset(
                left=float(offset_raw.get("left", 0.0)),
                top=float(offset_raw.get("top", 0.0)),
            )
            ncp = NonCoveredPoint(x=float(point["x"]), y=float(point["y"]), offset=offset)
            area = float(payload["area"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ShapeFormatError(f"invalid shape geometry: {exc}") from exc
        element_type = str(payload.get("type") or "link")
        return cls(area=area, non_covered_point=ncp, element_type=element_type)
