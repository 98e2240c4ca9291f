from keymatrix.controller.hit_testing import EMPTY, HitKind, connecting_segments, hit_test
from keymatrix.model.geometry_primitives import Point
from keymatrix.model.key import Key
from keymatrix.model.store import Dimension, MatrixAssignmentStore

from tests.helpers import make_grid


def annotated_row(pitch: float = 1.0) -> MatrixAssignmentStore:
    store = MatrixAssignmentStore(make_grid(1, 3, pitch=pitch))
    for key in store.keys:
        store.set_position(key.id, 0, key.id)
    return store


def test_connecting_segments_join_consecutive_members():
    store = annotated_row()
    segments = connecting_segments(store, Dimension.ROW)
    assert [index for index, _ in segments] == [0, 0]
    assert segments[0][1].start == Point(0.5, 0.5)
    assert segments[1][1].end == Point(2.5, 0.5)
    assert connecting_segments(store, Dimension.COLUMN) == []


def test_key_body_wins_over_line_for_clicks():
    target = hit_test(annotated_row(), Point(0.8, 0.5))
    assert target.kind is HitKind.KEY
    assert target.key_id == 0


def test_line_wins_over_key_body_when_preferred():
    target = hit_test(annotated_row(), Point(0.8, 0.5), prefer_lines=True)
    assert target.kind is HitKind.LINE
    assert (target.dimension, target.index) == (Dimension.ROW, 0)


def test_key_node_wins_over_line_when_preferred():
    target = hit_test(annotated_row(), Point(1.5, 0.55), prefer_lines=True)
    assert target.kind is HitKind.KEY
    assert target.key_id == 1


def test_line_in_gap_between_keys():
    target = hit_test(annotated_row(pitch=1.5), Point(1.25, 0.6))
    assert target.kind is HitKind.LINE


def test_line_only_in_requested_dimensions():
    store = annotated_row(pitch=1.5)
    assert hit_test(store, Point(1.25, 0.5), (Dimension.COLUMN,)) == EMPTY


def test_ghost_keys_are_not_hit():
    store = MatrixAssignmentStore([Key(ghost=True)])
    assert hit_test(store, Point(0.5, 0.5)) == EMPTY
