"""Configuration helpers for the hint overlay."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict


@dataclass
class HintOverlaySettings:
    """Marker metrics and session behaviour loaded from hint_overlay_settings.json."""

    char_width: float = 8.0
    char_height: float = 14.0
    padding: float = 2.0
    font_point_size: float = 10.0
    log_retention: int = 5
    hide_unmatched: bool = True
    highlight_last_candidate: bool = True


def load_settings(settings_path: Path) -> HintOverlaySettings:
    """Read settings from JSON, keeping defaults for missing or invalid fields."""
    defaults = HintOverlaySettings()
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return defaults

    try:
        data: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        return defaults
    if not isinstance(data, dict):
        return defaults

    def _float(key: str, fallback: float, *, allow_zero: bool = False) -> float:
        try:
            value = float(data.get(key, fallback))
        except (TypeError, ValueError):
            return fallback
        if value > 0 or (allow_zero and value == 0):
            return value
        return fallback

    retention = defaults.log_retention
    try:
        retention = int(data.get("log_retention", retention))
    except (TypeError, ValueError):
        retention = defaults.log_retention

    return HintOverlaySettings(
        char_width=_float("char_width", defaults.char_width),
        char_height=_float("char_height", defaults.char_height),
        padding=_float("padding", defaults.padding, allow_zero=True),
        font_point_size=_float("font_point_size", defaults.font_point_size),
        log_retention=max(1, retention),
        hide_unmatched=bool(data.get("hide_unmatched", defaults.hide_unmatched)),
        highlight_last_candidate=bool(data.get("highlight_last_candidate", defaults.highlight_last_candidate)),
    )
