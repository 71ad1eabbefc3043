"""Exception types raised by the hint overlay package."""
from __future__ import annotations


class HintOverlayError(Exception):
    """Base class for hint overlay errors."""


class MarkerNotPositionedError(HintOverlayError, RuntimeError):
    """Raised when a marker is moved before ``set_position`` gave it a viewport."""


class ShapeFormatError(HintOverlayError, ValueError):
    """Raised when an element shape mapping is missing required geometry."""
