#!/usr/bin/env python3
"""Lay out hint markers for a JSON list of element shapes and print or show their stacks."""
from __future__ import annotations

import argparse
import itertools
import json
import logging
import string
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from hint_overlay import debug_config as dev_mode
from hint_overlay.debug_config import DEV_MODE_ENV_VAR, DebugConfig
from hint_overlay.errors import ShapeFormatError
from hint_overlay.geometry import ElementShape, Rect
from hint_overlay.hint_marker import HintMarker
from hint_overlay.hint_session import HintSession
from hint_overlay.logging_utils import LOGGER_NAME, configure_logging
from hint_overlay.marker_box import HeadlessMarkerContext
from hint_overlay.overlap_resolver import partition_stacks
from hint_overlay.settings import HintOverlaySettings, load_settings

DEFAULT_VIEWPORT = (0.0, 0.0, 1280.0, 800.0)
ROTATE_FORWARD_KEY = " "
ROTATE_BACKWARD_KEY = ","
BACKSPACE_KEY = "\x08"
RESTART_KEY = "\x1b"

_LOGGER = logging.getLogger(LOGGER_NAME)


def label_hints(count: int, alphabet: str = string.ascii_lowercase) -> List[str]:
    """Fixed-length labels (a, b, ... or aa, ab, ...) so no label prefixes another."""
    if count <= 0:
        return []
    length = 1
    while len(alphabet) ** length < count:
        length += 1
    combos = itertools.product(alphabet, repeat=length)
    return ["".join(combo) for combo in itertools.islice(combos, count)]


def load_shapes(path: Path) -> List[ElementShape]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("shapes", [])
    if not isinstance(data, list):
        raise ShapeFormatError("shapes file must hold a list or an object with 'shapes'")
    return [ElementShape.from_mapping(entry) for entry in data]


def route_key(session: HintSession, text: str) -> Optional[HintMarker]:
    """Apply one key press to ``session``; returns the marker it completed, if any.

    Space rotates forward, comma rotates backward, backspace deletes the last
    character and escape restarts. Anything else is typed as a hint character.
    """
    if text == ROTATE_FORWARD_KEY:
        session.rotate(True)
    elif text == ROTATE_BACKWARD_KEY:
        session.rotate(False)
    elif text == BACKSPACE_KEY:
        session.delete_char()
    elif text == RESTART_KEY:
        session.restart()
    elif len(text) == 1 and text.isprintable():
        return session.type_char(text.lower())
    return None


def _format_rect(rect: Optional[Rect]) -> str:
    if rect is None:
        return "(unplaced)"
    return "({:.1f}, {:.1f}, {:.1f}, {:.1f})".format(*rect.as_tuple())


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("shapes", type=Path, help="JSON file with a list of element shapes")
    common.add_argument(
        "--viewport",
        nargs=4,
        type=float,
        metavar=("LEFT", "TOP", "RIGHT", "BOTTOM"),
        default=list(DEFAULT_VIEWPORT),
        help="Viewport rectangle in page units",
    )
    common.add_argument("--zoom", type=float, default=1.0, help="Zoom factor in effect")
    common.add_argument("--hints", nargs="*", help="Hint strings, one per shape (default: generated labels)")
    common.add_argument("--settings", type=Path, help="Path to hint_overlay_settings.json")
    common.add_argument(
        "--dev-settings",
        type=Path,
        help=f"Path to dev_settings.json (read only when {DEV_MODE_ENV_VAR}=1)",
    )
    common.add_argument("--debug", action="store_true", help="Write a debug log to the default log directory")
    common.add_argument("--log-dir", type=Path, help="Write a debug log to this directory")

    parser = argparse.ArgumentParser(prog="hint-overlay", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)
    stacks = subparsers.add_parser(
        "stacks", parents=[common], help="Print overlapping marker stacks and their z-order"
    )
    stacks.add_argument("--rotate", type=int, default=0, help="Number of rotations to apply before printing")
    stacks.add_argument("--backward", action="store_true", help="Rotate backward instead of forward")
    subparsers.add_parser("show", parents=[common], help="Draw the markers in a window and read hint keys")
    return parser.parse_args(argv)


def _load_configuration(args: argparse.Namespace) -> Tuple[HintOverlaySettings, DebugConfig]:
    settings = load_settings(args.settings) if args.settings else HintOverlaySettings()
    if args.debug or args.log_dir is not None:
        configure_logging(True, log_dir=args.log_dir, retention=settings.log_retention)
    if not args.dev_settings:
        return settings, DebugConfig()
    if not dev_mode.DEBUG_CONFIG_ENABLED:
        _LOGGER.debug(
            "%s ignored (release mode). Export %s=1 to enable trace toggles.",
            args.dev_settings,
            dev_mode.DEV_MODE_ENV_VAR,
        )
    return settings, dev_mode.load_dev_settings(args.dev_settings)


def _prepare(args: argparse.Namespace) -> Optional[Tuple[List[ElementShape], List[str]]]:
    try:
        shapes = load_shapes(args.shapes)
    except (OSError, json.JSONDecodeError, ShapeFormatError) as exc:
        print(f"Failed to read shapes from {args.shapes}: {exc}", file=sys.stderr)
        return None
    hints = list(args.hints) if args.hints else label_hints(len(shapes))
    if len(hints) != len(shapes):
        print(f"Expected {len(shapes)} hints, got {len(hints)}", file=sys.stderr)
        return None
    if args.zoom <= 0:
        print("Zoom must be positive", file=sys.stderr)
        return None
    return shapes, hints


def _run_stacks(
    args: argparse.Namespace,
    settings: HintOverlaySettings,
    debug_config: DebugConfig,
    shapes: Sequence[ElementShape],
    hints: Sequence[str],
) -> int:
    context = HeadlessMarkerContext(
        char_width=settings.char_width,
        char_height=settings.char_height,
        padding=settings.padding,
    )
    session = HintSession(context, settings, debug_config)
    session.add_markers(shapes, hints)
    session.layout(Rect(*args.viewport), args.zoom)

    stacks = None
    for _ in range(max(0, args.rotate)):
        stacks = session.rotate(not args.backward)
    if stacks is None:
        markers = session.markers
        groups = partition_stacks([marker.position for marker in markers])  # type: ignore[misc]
        stacks = [[markers[index] for index in group] for group in groups]

    for number, stack in enumerate(stacks, start=1):
        print(f"stack {number} ({len(stack)} marker{'s' if len(stack) != 1 else ''}):")
        for marker in sorted(stack, key=lambda item: item.z_order, reverse=True):
            print(f"  {marker.hint:<6} z={marker.z_order:<4} {_format_rect(marker.position)}")
    session.close()
    return 0


def _run_show(
    args: argparse.Namespace,
    settings: HintOverlaySettings,
    debug_config: DebugConfig,
    shapes: Sequence[ElementShape],
    hints: Sequence[str],
) -> int:  # pragma: no cover - needs a display
    from PyQt6.QtWidgets import QApplication

    from hint_overlay.qt_marker_layer import QtMarkerLayer

    app = QApplication.instance() or QApplication(sys.argv)
    viewport = Rect(*args.viewport)
    layer = QtMarkerLayer.from_settings(settings, debug_config)
    layer.setWindowTitle("hint-overlay")
    layer.resize(int(round(viewport.width * args.zoom)), int(round(viewport.height * args.zoom)))
    session = HintSession(layer, settings, debug_config)
    session.add_markers(shapes, hints)
    session.layout(viewport, args.zoom)

    def _on_key(text: str) -> None:
        completed = route_key(session, text)
        if completed is not None:
            print(completed.hint)
            app.quit()

    layer.set_key_handler(_on_key)
    layer.show()
    layer.setFocus()
    exit_code = app.exec()
    session.close()
    _LOGGER.info("Hint overlay window exiting with code %s", exit_code)
    return int(exit_code)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings, debug_config = _load_configuration(args)
    prepared = _prepare(args)
    if prepared is None:
        return 2
    shapes, hints = prepared
    if args.command == "show":
        return _run_show(args, settings, debug_config, shapes, hints)
    return _run_stacks(args, settings, debug_config, shapes, hints)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
