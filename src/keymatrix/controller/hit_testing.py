"""
Pointer classification in layout units: on a key, on a connecting line of a
row/column, or on empty space.

Clicks resolve to the key under the pointer whenever the point lies inside a
key rectangle; lines are only hit in the gaps between keys. Hovering for
renumbering uses `prefer_lines`, where a line wins over the key body it runs
through and only the node drawn at a key center still counts as the key.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable, Optional

from keymatrix.config import KEY_NODE_RADIUS, LINE_HIT_TOLERANCE
from keymatrix.model.geometry_primitives import Point, Segment
from keymatrix.model.geometry_utils import point_segment_distance
from keymatrix.model.key import Key
from keymatrix.model.store import BOTH_DIMENSIONS, Dimension, MatrixAssignmentStore

logger = logging.getLogger(__name__)


class HitKind(StrEnum):
    KEY = "key"
    LINE = "line"
    EMPTY = "empty"


@dataclass(frozen=True)
class HitTarget:
    kind: HitKind
    key_id: Optional[int] = None
    dimension: Optional[Dimension] = None
    index: Optional[int] = None


EMPTY = HitTarget(HitKind.EMPTY)


def connecting_segments(store: MatrixAssignmentStore, dimension: Dimension) -> list[tuple[int, Segment]]:
    """Segments joining consecutive members of every group, as drawn on the overlay."""
    segments = []
    for index, members in store.groups(dimension).items():
        for a, b in zip(members[:-1], members[1:]):
            segments.append((index, Segment(a.center(), b.center())))
    return segments


def _node_hit(keys: list[Key], point: Point, node_radius: float) -> Optional[HitTarget]:
    for key in keys:
        if key.center().distance_to(point) <= node_radius:
            return HitTarget(HitKind.KEY, key_id=key.id)
    return None


def _body_hit(keys: list[Key], point: Point) -> Optional[HitTarget]:
    for key in keys:
        if key.contains(point):
            return HitTarget(HitKind.KEY, key_id=key.id)
    return None


def _line_hit(
    store: MatrixAssignmentStore,
    point: Point,
    dimensions: Iterable[Dimension],
    tolerance: float
) -> Optional[HitTarget]:
    best: Optional[HitTarget] = None
    best_distance = tolerance
    for dimension in dimensions:
        for index, segment in connecting_segments(store, dimension):
            distance = point_segment_distance(point, segment)
            if distance <= best_distance:
                best_distance = distance
                best = HitTarget(HitKind.LINE, dimension=dimension, index=index)
    if best is not None:
        logger.debug(f"Pointer on {best.dimension} {best.index} line (distance {best_distance:.3f}).")
    return best


def hit_test(
    store: MatrixAssignmentStore,
    point: Point,
    dimensions: Iterable[Dimension] = BOTH_DIMENSIONS,
    *,
    line_tolerance: float = LINE_HIT_TOLERANCE,
    node_radius: float = KEY_NODE_RADIUS,
    prefer_lines: bool = False
) -> HitTarget:
    # Later keys are drawn on top
    keys = list(reversed(store.eligible_keys()))

    hit = _node_hit(keys, point, node_radius)
    if hit is None and not prefer_lines:
        hit = _body_hit(keys, point)
    if hit is None:
        hit = _line_hit(store, point, dimensions, line_tolerance)
    if hit is None and prefer_lines:
        hit = _body_hit(keys, point)
    return hit or EMPTY
