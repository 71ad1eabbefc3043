from __future__ import annotations

import json
from logging.handlers import RotatingFileHandler

from hint_overlay import cli, debug_config, logging_utils
from hint_overlay.geometry import ElementShape, NonCoveredPoint, Rect
from hint_overlay.hint_session import HintSession
from hint_overlay.marker_box import HeadlessMarkerContext


def _write_shapes(path, shapes):
    path.write_text(json.dumps(shapes), encoding="utf-8")
    return path


def _shape(x, y, **extra):
    payload = {"area": 100, "nonCoveredPoint": {"x": x, "y": y, "offset": {"left": 0, "top": 0}}}
    payload.update(extra)
    return payload


def _rows(output: str) -> dict[str, int]:
    rows = {}
    for line in output.splitlines():
        if line.startswith("  "):
            parts = line.split()
            rows[parts[0]] = int(parts[1].split("=", 1)[1])
    return rows


def test_label_hints_are_fixed_length():
    assert cli.label_hints(3) == ["a", "b", "c"]
    labels = cli.label_hints(30)
    assert len(labels) == 30
    assert {len(label) for label in labels} == {2}
    assert cli.label_hints(0) == []


def test_stacks_lists_partition_without_rotating(tmp_path, capsys):
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100), _shape(105, 105), _shape(500, 500)])

    assert cli.main(["stacks", str(path)]) == 0

    out = capsys.readouterr().out
    assert "stack 1 (2 markers):" in out
    assert "stack 2 (1 marker):" in out
    assert _rows(out) == {"a": 0, "b": 1, "c": 2}


def test_stacks_applies_requested_rotations(tmp_path, capsys):
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100), _shape(105, 105), _shape(500, 500)])

    assert cli.main(["stacks", str(path), "--rotate", "1", "--hints", "jj", "jk", "kj"]) == 0

    assert _rows(capsys.readouterr().out) == {"jj": 1, "jk": 0, "kj": 2}


def test_stacks_accepts_wrapped_shape_list(tmp_path, capsys):
    path = tmp_path / "shapes.json"
    path.write_text(json.dumps({"shapes": [_shape(10, 10, type="input")]}), encoding="utf-8")

    assert cli.main(["stacks", str(path), "--viewport", "0", "0", "100", "100"]) == 0
    assert "stack 1 (1 marker):" in capsys.readouterr().out


def test_stacks_reports_unreadable_file(tmp_path, capsys):
    assert cli.main(["stacks", str(tmp_path / "missing.json")]) == 2
    assert "Failed to read shapes" in capsys.readouterr().err


def test_stacks_reports_malformed_shape(tmp_path, capsys):
    path = _write_shapes(tmp_path / "shapes.json", [{"area": 1}])
    assert cli.main(["stacks", str(path)]) == 2
    assert "nonCoveredPoint" in capsys.readouterr().err


def test_stacks_rejects_hint_count_mismatch(tmp_path, capsys):
    path = _write_shapes(tmp_path / "shapes.json", [_shape(1, 1), _shape(50, 50)])
    assert cli.main(["stacks", str(path), "--hints", "a"]) == 2
    assert "Expected 2 hints" in capsys.readouterr().err


def _handlers(logger):
    return [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]


def test_log_dir_uses_retention_from_settings(tmp_path, capsys, clean_logger):
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100)])
    settings_path = tmp_path / "hint_overlay_settings.json"
    settings_path.write_text(json.dumps({"log_retention": 3}), encoding="utf-8")

    assert cli.main(["stacks", str(path), "--settings", str(settings_path), "--log-dir", str(tmp_path / "logs")]) == 0

    handlers = _handlers(clean_logger)
    assert [h.backupCount for h in handlers] == [2]
    assert (tmp_path / "logs" / logging_utils.LOG_FILENAME).exists()


def test_debug_flag_logs_to_default_directory(monkeypatch, tmp_path, capsys, clean_logger):
    monkeypatch.setenv(logging_utils.LOG_DIR_ENV_VAR, str(tmp_path / "default"))
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100)])

    assert cli.main(["stacks", str(path), "--debug"]) == 0

    log_file = tmp_path / "default" / "HintOverlay" / logging_utils.LOG_FILENAME
    assert "Hint overlay logging to" in log_file.read_text(encoding="utf-8")


def test_without_debug_flags_no_file_handler_is_added(tmp_path, capsys, clean_logger):
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100)])
    before = _handlers(clean_logger)

    assert cli.main(["stacks", str(path)]) == 0

    assert _handlers(clean_logger) == before


def test_dev_settings_enable_rotation_trace(monkeypatch, tmp_path, capsys, clean_logger):
    monkeypatch.setattr(debug_config, "DEBUG_CONFIG_ENABLED", True)
    dev_path = tmp_path / "dev_settings.json"
    dev_path.write_text(json.dumps({"trace_rotations": True}), encoding="utf-8")
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100), _shape(105, 105)])
    args = ["stacks", str(path), "--rotate", "1", "--dev-settings", str(dev_path), "--log-dir", str(tmp_path / "logs")]

    assert cli.main(args) == 0

    text = (tmp_path / "logs" / logging_utils.LOG_FILENAME).read_text(encoding="utf-8")
    assert "Stack ['a', 'b'] -> z [1, 0]" in text
    # Missing keys are written back next to the user's value.
    written = json.loads(dev_path.read_text(encoding="utf-8"))
    assert written["trace_rotations"] is True
    assert written["marker_outline"] is False


def test_dev_settings_are_ignored_outside_dev_mode(monkeypatch, tmp_path, capsys, clean_logger):
    monkeypatch.setattr(debug_config, "DEBUG_CONFIG_ENABLED", False)
    dev_path = tmp_path / "dev_settings.json"
    dev_path.write_text(json.dumps({"trace_rotations": True}), encoding="utf-8")
    path = _write_shapes(tmp_path / "shapes.json", [_shape(100, 100), _shape(105, 105)])
    args = ["stacks", str(path), "--rotate", "1", "--dev-settings", str(dev_path), "--log-dir", str(tmp_path / "logs")]

    assert cli.main(args) == 0

    text = (tmp_path / "logs" / logging_utils.LOG_FILENAME).read_text(encoding="utf-8")
    assert "-> z [1, 0]" not in text
    assert "ignored (release mode)" in text


def _key_session():
    session = HintSession(HeadlessMarkerContext())
    markers = session.add_markers(
        [ElementShape(area=1.0, non_covered_point=NonCoveredPoint(x=x, y=y)) for x, y in ((10, 20), (15, 25))],
        ["aa", "ab"],
    )
    session.layout(Rect(0.0, 0.0, 800.0, 600.0), 1.0)
    return session, markers


def test_route_key_types_deletes_and_restarts():
    session, (aa, ab) = _key_session()

    assert cli.route_key(session, "A") is None
    assert session.typed == "a"
    assert cli.route_key(session, cli.BACKSPACE_KEY) is None
    assert session.typed == ""

    cli.route_key(session, "a")
    assert cli.route_key(session, "b") is ab

    cli.route_key(session, cli.RESTART_KEY)
    assert session.typed == ""
    assert (aa.hint_index, ab.hint_index) == (0, 0)


def test_route_key_rotates_in_both_directions():
    session, (aa, ab) = _key_session()

    cli.route_key(session, cli.ROTATE_FORWARD_KEY)
    assert (aa.z_order, ab.z_order) == (1, 0)
    cli.route_key(session, cli.ROTATE_BACKWARD_KEY)
    assert (aa.z_order, ab.z_order) == (0, 1)
    assert session.typed == ""
