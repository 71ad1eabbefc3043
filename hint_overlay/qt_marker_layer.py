"""PyQt6 rendering surface for hint markers."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QKeyEvent
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QWidget

from hint_overlay.debug_config import DebugConfig
from hint_overlay.logging_utils import LOGGER_NAME
from hint_overlay.marker_box import MarkerBox
from hint_overlay.settings import HintOverlaySettings

_LOGGER = logging.getLogger(LOGGER_NAME)

_BOX_STYLE = (
    "QFrame#HintMarker {{ background: {background}; border: 1px solid {border}; border-radius: 2px; }}"
)
_CHAR_STYLE = "color: {color}; background: transparent; font-weight: bold;"
_PENDING_COLOR = "#302505"
_MATCHED_COLOR = "#d4ac3a"


class QtMarkerBox:
    """One marker frame holding a QLabel per hint character."""

    def __init__(self, parent: QWidget, element_type: str, *, font_point_size: float = 10.0, outline: bool = False) -> None:
        self.element_type = element_type
        self.z_order = 0
        self._outline = outline
        self._font = QFont()
        self._font.setPointSizeF(font_point_size)
        self._labels: List[QLabel] = []
        self._highlighted = False
        frame = QFrame(parent)
        frame.setObjectName("HintMarker")
        frame.setProperty("elementType", element_type)
        frame.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        layout = QHBoxLayout(frame)
        layout.setContentsMargins(2, 1, 2, 1)
        layout.setSpacing(0)
        self.widget = frame
        self._layout = layout
        self._apply_frame_style()

    def set_characters(self, chars: Sequence[str]) -> None:
        for label in self._labels:
            self._layout.removeWidget(label)
            label.hide()
            label.deleteLater()
        self._labels = []
        for char in chars:
            label = QLabel(char.upper(), self.widget)
            label.setFont(self._font)
            label.setStyleSheet(_CHAR_STYLE.format(color=_PENDING_COLOR))
            self._layout.addWidget(label)
            self._labels.append(label)
        self.widget.adjustSize()

    def set_char_matched(self, index: int, matched: bool) -> None:
        color = _MATCHED_COLOR if matched else _PENDING_COLOR
        self._labels[index].setStyleSheet(_CHAR_STYLE.format(color=color))

    def rendered_size(self) -> Tuple[float, float]:
        hint = self.widget.sizeHint()
        return float(hint.width()), float(hint.height())

    def move(self, x: float, y: float) -> None:
        self.widget.move(int(round(x)), int(round(y)))

    def set_visible(self, visible: bool) -> None:
        self.widget.setVisible(visible)

    def set_highlighted(self, highlighted: bool) -> None:
        self._highlighted = highlighted
        self._apply_frame_style()

    def set_z_order(self, z_order: int) -> None:
        self.z_order = z_order

    def _apply_frame_style(self) -> None:
        background = "#fff785" if self._highlighted else "#ffe680"
        border = "#ff00ff" if self._outline else "#c38a22"
        self.widget.setStyleSheet(_BOX_STYLE.format(background=background, border=border))


class QtMarkerLayer(QWidget):
    """Transparent widget hosting marker boxes, positioned at the top-frame origin."""

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        font_point_size: float = 10.0,
        marker_outline: bool = False,
    ) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self._font_point_size = font_point_size
        self._marker_outline = marker_outline
        self._boxes: List[QtMarkerBox] = []
        self._key_handler: Optional[Callable[[str], None]] = None

    @classmethod
    def from_settings(
        cls,
        settings: HintOverlaySettings,
        debug_config: Optional[DebugConfig] = None,
        parent: Optional[QWidget] = None,
    ) -> "QtMarkerLayer":
        debug_config = debug_config or DebugConfig()
        return cls(
            parent,
            font_point_size=settings.font_point_size,
            marker_outline=debug_config.marker_outline,
        )

    @property
    def font_point_size(self) -> float:
        return self._font_point_size

    @property
    def marker_outline(self) -> bool:
        return self._marker_outline

    def set_key_handler(self, handler: Optional[Callable[[str], None]]) -> None:
        """Forward the text of each key press to ``handler``."""
        self._key_handler = handler

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        text = event.text()
        if self._key_handler is not None and text:
            self._key_handler(text)
            event.accept()
            return
        super().keyPressEvent(event)

    @property
    def boxes(self) -> List[QtMarkerBox]:
        return list(self._boxes)

    def create_box(self, element_type: str) -> QtMarkerBox:
        box = QtMarkerBox(
            self,
            element_type,
            font_point_size=self._font_point_size,
            outline=self._marker_outline,
        )
        box.widget.show()
        self._boxes.append(box)
        return box

    def remove_box(self, box: MarkerBox) -> None:
        self._boxes = [existing for existing in self._boxes if existing is not box]
        if isinstance(box, QtMarkerBox):
            box.widget.hide()
            box.widget.setParent(None)
            box.widget.deleteLater()

    def restack(self) -> None:
        """Raise boxes in ascending z-order so the highest value ends up on top."""
        ordered = sorted(self._boxes, key=lambda box: box.z_order)
        for box in ordered:
            box.widget.raise_()
        _LOGGER.debug("Restacked %d marker boxes", len(ordered))
