from __future__ import annotations

import pytest

from hint_overlay.debug_config import DebugConfig
from hint_overlay.geometry import ElementShape, NonCoveredPoint, Rect
from hint_overlay.hint_session import HintSession
from hint_overlay.marker_box import HeadlessMarkerContext
from hint_overlay.settings import HintOverlaySettings

VIEWPORT = Rect(0.0, 0.0, 800.0, 600.0)


class _RestackingContext(HeadlessMarkerContext):
    def __init__(self) -> None:
        super().__init__()
        self.restacks = 0

    def restack(self) -> None:
        self.restacks += 1


def _shape(x: float, y: float) -> ElementShape:
    return ElementShape(area=10.0, non_covered_point=NonCoveredPoint(x=x, y=y))


def _session(settings: HintOverlaySettings | None = None, context=None):
    context = context or HeadlessMarkerContext()
    session = HintSession(context, settings, DebugConfig(trace_rotations=True, trace_hints=True))
    markers = session.add_markers(
        [_shape(10, 20), _shape(15, 25), _shape(400, 300)],
        ["aa", "ab", "ba"],
    )
    session.layout(VIEWPORT, 1.0)
    return session, context, markers


def test_add_markers_assigns_hints_and_distinct_z_order() -> None:
    session, context, markers = _session()

    assert [marker.hint for marker in markers] == ["aa", "ab", "ba"]
    assert [marker.z_order for marker in markers] == [0, 1, 2]
    assert len(context.boxes) == 3
    assert all(marker.position is not None for marker in markers)


def test_add_markers_rejects_mismatched_hint_count() -> None:
    session = HintSession(HeadlessMarkerContext())
    with pytest.raises(ValueError):
        session.add_markers([_shape(0, 0)], ["a", "b"])


def test_typing_narrows_candidates_and_hides_rejected_markers() -> None:
    session, _, (aa, ab, ba) = _session()

    assert session.type_char("a") is None

    assert session.typed == "a"
    assert session.candidates() == [aa, ab]
    assert ba.box.visible is False
    assert aa.hint_index == ab.hint_index == 1
    assert ba.hint_index == 0


def test_completing_a_hint_returns_the_marker_and_highlights_it() -> None:
    session, _, (aa, ab, ba) = _session()
    session.type_char("a")

    completed = session.type_char("b")

    assert completed is ab
    assert ab.is_matched() is True
    assert ab.matched is True
    assert aa.box.visible is False
    assert aa.matched is False


def test_unknown_character_is_ignored() -> None:
    session, _, markers = _session()
    session.type_char("a")

    assert session.type_char("z") is None

    assert session.typed == "a"
    assert [marker.hint_index for marker in markers] == [1, 1, 0]


def test_delete_char_restores_previous_state() -> None:
    session, _, (aa, ab, ba) = _session()
    session.type_char("a")
    session.type_char("b")

    session.delete_char()
    assert session.typed == "a"
    assert ab.hint_index == 1
    assert ab.matched is False
    assert aa.box.visible is True
    assert ba.box.visible is False

    session.delete_char()
    assert session.typed == ""
    assert ba.box.visible is True
    assert [marker.hint_index for marker in (aa, ab, ba)] == [0, 0, 0]

    # Nothing left to delete.
    session.delete_char()
    assert session.typed == ""


def test_single_remaining_candidate_is_highlighted_before_completion() -> None:
    session, _, (aa, ab, ba) = _session()

    session.type_char("b")

    assert ba.matched is True
    assert ba.is_matched() is False
    assert not aa.matched and not ab.matched


def test_settings_can_keep_rejected_markers_visible() -> None:
    settings = HintOverlaySettings(hide_unmatched=False, highlight_last_candidate=False)
    session, _, (aa, ab, ba) = _session(settings)

    session.type_char("b")

    assert aa.box.visible is True
    assert ba.matched is False


def test_rotate_only_touches_current_candidates_and_restacks() -> None:
    context = _RestackingContext()
    session, _, (aa, ab, ba) = _session(context=context)
    restacks_after_layout = context.restacks

    stacks = session.rotate()

    assert [len(stack) for stack in stacks] == [2, 1]
    assert (aa.z_order, ab.z_order, ba.z_order) == (1, 0, 2)
    assert context.restacks == restacks_after_layout + 1

    session.type_char("b")
    session.rotate()
    assert (aa.z_order, ab.z_order) == (1, 0)


def test_rotate_includes_rejected_markers_left_on_screen() -> None:
    settings = HintOverlaySettings(hide_unmatched=False)
    session, _, (aa, ab, ba) = _session(settings)

    session.type_char("b")
    assert session.candidates() == [ba]
    assert session.visible_markers() == [aa, ab, ba]

    stacks = session.rotate()

    assert [len(stack) for stack in stacks] == [2, 1]
    assert (aa.z_order, ab.z_order, ba.z_order) == (1, 0, 2)


def test_scroll_offsets_every_marker_from_its_anchor() -> None:
    session, _, markers = _session()
    before = [(marker.position.left, marker.position.top) for marker in markers]

    session.scroll(10.0, 5.0)
    session.scroll(10.0, 5.0)

    after = [(marker.position.left, marker.position.top) for marker in markers]
    assert after == [(left + 10.0, top + 5.0) for left, top in before]


def test_restart_clears_progress_and_shows_everything() -> None:
    session, _, (aa, ab, ba) = _session()
    session.type_char("a")
    session.type_char("a")

    session.restart()

    assert session.typed == ""
    assert [marker.hint_index for marker in (aa, ab, ba)] == [0, 0, 0]
    assert all(marker.box.visible for marker in (aa, ab, ba))
    assert not any(marker.matched for marker in (aa, ab, ba))


def test_close_detaches_all_boxes() -> None:
    session, context, _ = _session()

    session.close()

    assert context.boxes == []
    assert session.markers == []
