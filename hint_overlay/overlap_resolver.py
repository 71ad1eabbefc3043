"""Group overlapping markers into stacks and rotate their draw order (pure, no Qt)."""
from __future__ import annotations

import logging
from typing import Callable, List, MutableSequence, Sequence, TypeVar

from hint_overlay.geometry import Rect
from hint_overlay.hint_marker import HintMarker
from hint_overlay.logging_utils import LOGGER_NAME

_LOGGER = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")


def _collect_component(
    seed: T,
    remaining: MutableSequence[T],
    overlaps: Callable[[T, T], bool],
) -> List[T]:
    """Remove and return everything in ``remaining`` connected to ``seed``.

    Each item taken off the worklist is tested against the whole of
    ``remaining``; every overlapping item moves into the component and onto
    the worklist. The returned list starts with ``seed`` in discovery order.
    """
    component = [seed]
    worklist = [seed]
    while worklist and remaining:
        current = worklist.pop()
        neighbours = [item for item in remaining if overlaps(current, item)]
        if not neighbours:
            continue
        taken = {id(item) for item in neighbours}
        remaining[:] = [item for item in remaining if id(item) not in taken]
        component.extend(neighbours)
        worklist.extend(reversed(neighbours))
    return component


def partition_stacks(rects: Sequence[Rect]) -> List[List[int]]:
    """Partition rectangle indices into transitively overlapping groups.

    Groups are ordered by their lowest index; the input is not modified.
    """
    remaining = list(range(len(rects)))
    groups: List[List[int]] = []
    while remaining:
        seed = remaining.pop(0)
        groups.append(_collect_component(seed, remaining, lambda a, b: rects[a].overlaps(rects[b])))
    return groups


def _markers_overlap(first: HintMarker, second: HintMarker) -> bool:
    return first.position.overlaps(second.position)  # type: ignore[union-attr]


def get_stack_for(marker: HintMarker, pool: MutableSequence[HintMarker]) -> List[HintMarker]:
    """Return the stack containing ``marker`` and remove its other members from ``pool``."""
    return _collect_component(marker, pool, _markers_overlap)


def rotate_overlapping_markers(markers: Sequence[HintMarker], forward: bool = True) -> List[List[HintMarker]]:
    """Cycle z-order values inside every stack of overlapping markers.

    ``forward`` moves the highest value to the lowest-ordered marker, so each
    marker in turn rises one step; ``forward=False`` walks the other way.
    All stacks are identified before any z-order changes. Returns the stacks.
    """
    groups = partition_stacks([marker.position for marker in markers])  # type: ignore[misc]
    stacks = [[markers[index] for index in group] for group in groups]
    for stack in stacks:
        if len(stack) < 2:
            continue
        ordered = sorted(stack, key=lambda marker: marker.z_order)
        z_values = [marker.z_order for marker in ordered]
        if forward:
            z_values.insert(0, z_values.pop())
        else:
            z_values.append(z_values.pop(0))
        for marker, z_order in zip(ordered, z_values):
            marker.set_z_order(z_order)
        _LOGGER.debug(
            "Rotated stack of %d markers (%s): %s",
            len(ordered),
            "forward" if forward else "backward",
            ", ".join(f"{marker.hint}={marker.z_order}" for marker in ordered),
        )
    return stacks
