"""Debug configuration loader for hint overlay tracing."""

from __future__ import annotations

import json
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEV_MODE_ENV_VAR = "HINT_OVERLAY_DEV_MODE"


def is_dev_build() -> bool:
    value = os.getenv(DEV_MODE_ENV_VAR)
    if value is None:
        return False
    token = value.strip().lower()
    if token in {"1", "true", "yes", "on"}:
        return True
    return False


DEBUG_CONFIG_ENABLED = is_dev_build()


@dataclass(frozen=True)
class DebugConfig:
    trace_rotations: bool = False
    trace_hints: bool = False
    marker_outline: bool = False


def load_dev_settings(path: Path) -> DebugConfig:
    """Load dev-mode-only flags from dev_settings.json."""

    if not DEBUG_CONFIG_ENABLED:
        return DebugConfig()
    defaults = {
        "trace_rotations": False,
        "trace_hints": False,
        "marker_outline": False,
    }
    raw_data: dict[str, Any] = {}
    needs_write = False
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError:
        raw_data = deepcopy(defaults)
        needs_write = True
    else:
        try:
            loaded = json.loads(raw_text)
        except json.JSONDecodeError:
            raw_data = deepcopy(defaults)
            needs_write = True
        else:
            raw_data = loaded if isinstance(loaded, dict) else {}
            if not isinstance(loaded, dict):
                needs_write = True

    data: dict[str, Any] = deepcopy(raw_data)
    for key, default_value in defaults.items():
        if key not in data:
            data[key] = default_value
            needs_write = True

    # Older files grouped the trace switches under "tracing".
    tracing_section = data.get("tracing")
    if isinstance(tracing_section, dict):
        trace_rotations = bool(tracing_section.get("rotations", data.get("trace_rotations", False)))
        trace_hints = bool(tracing_section.get("hints", data.get("trace_hints", False)))
    else:
        trace_rotations = bool(data.get("trace_rotations", False))
        trace_hints = bool(data.get("trace_hints", False))

    normalized = DebugConfig(
        trace_rotations=trace_rotations,
        trace_hints=trace_hints,
        marker_outline=bool(data.get("marker_outline", False)),
    )

    if needs_write:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except Exception:
            pass

    return normalized
