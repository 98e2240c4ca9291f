import pytest

from keymatrix.controller.annotation import MatrixAnnotationController
from keymatrix.controller.hit_testing import HitKind
from keymatrix.model.geometry_primitives import Point
from keymatrix.model.key import Key
from keymatrix.model.store import Dimension, DrawMode, MatrixAssignmentStore

from tests.helpers import center_of, make_grid, matrix_labels


def draw_row(controller, first, last):
    controller.set_mode(DrawMode.ROW)
    controller.commit_click(center_of(*first))
    return controller.commit_click(center_of(*last))


def test_unknown_mode_raises(controller):
    with pytest.raises(ValueError):
        controller.set_mode("diagonal")


def test_mode_change_is_signalled(controller):
    modes = []
    controller.mode_changed.connect(modes.append)
    controller.set_mode("column")
    controller.set_mode("column")
    controller.set_mode(None)
    assert modes == ["column", ""]


def test_set_sensitivity_clamps(controller):
    controller.set_sensitivity(4.0)
    assert controller.sensitivity == 1.0
    assert controller.capture.sensitivity == 1.0
    controller.set_sensitivity(-1)
    assert controller.auto_annotator.sensitivity == 0.0


def test_two_clicks_draw_a_row(controller):
    started, completed = [], []
    controller.sequence_started.connect(started.append)
    controller.sequence_completed.connect(completed.append)

    result = draw_row(controller, (0, 0), (0, 2))

    assert started == [0]
    assert completed == [result]
    assert result.assigned == [0, 1, 2]
    assert matrix_labels(controller.store)[:4] == ["0,", "0,", "0,", ""]


def test_progress_after_one_row(controller):
    draw_row(controller, (0, 0), (0, 2))
    progress = controller.get_progress()

    assert progress.rows_defined == 1
    assert progress.cols_defined == 0
    assert progress.keys_left_for_rows == 6
    assert progress.keys_left_for_cols == 9
    assert not progress.is_complete


def test_start_gesture_selects_mode_and_starts(controller):
    started = controller.start_gesture("column", center_of(0, 1))
    assert controller.mode is DrawMode.COLUMN
    assert started.first_key.id == 1
    result = controller.commit_click(center_of(2, 1))
    assert result.dimension is Dimension.COLUMN
    assert result.assigned == [1, 4, 7]


def test_click_on_empty_space_cancels(controller):
    controller.set_mode(DrawMode.ROW)
    controller.commit_click(center_of(0, 0))
    assert controller.sequence.is_started

    assert controller.commit_click(Point(10, 10)) is None
    assert not controller.sequence.is_started
    assert all(label == "" for label in matrix_labels(controller.store))


def test_hover_and_renumber(controller):
    draw_row(controller, (0, 0), (0, 2))

    target = controller.continue_hover(Point(1.0, 0.5))
    assert target.kind is HitKind.LINE
    assert (target.dimension, target.index) == (Dimension.ROW, 0)

    results = []
    controller.renumbered.connect(results.append)
    controller.renumber_keypress("2")
    result = controller.renumber_keypress("Enter")

    assert results == [result]
    assert (result.old_index, result.new_index) == (0, 2)
    assert matrix_labels(controller.store)[:3] == ["2,", "2,", "2,"]


def test_renumber_into_existing_row_reports_duplicates_only_when_invalid(controller):
    draw_row(controller, (0, 0), (0, 2))
    draw_row(controller, (1, 0), (1, 2))
    found = []
    controller.duplicates_found.connect(found.append)

    controller.continue_hover(Point(1.0, 1.5))
    controller.renumber_keypress("0")
    result = controller.renumber_commit()

    assert result.swapped_with == 1
    assert found == []


def test_hover_on_key_is_not_a_line(controller):
    draw_row(controller, (0, 0), (0, 2))
    assert controller.continue_hover(center_of(0, 1)).kind is HitKind.KEY
    assert controller.renumber.hovered is None


def test_remove_line_in_gap_between_keys():
    controller = MatrixAnnotationController(MatrixAssignmentStore(make_grid(1, 3, pitch=1.5)))
    controller.set_mode(DrawMode.ROW)
    controller.commit_click(center_of(0, 0, pitch=1.5))
    controller.commit_click(center_of(0, 2, pitch=1.5))
    removed = []
    controller.removed.connect(removed.append)

    controller.set_mode(DrawMode.REMOVE)
    result = controller.remove_at(Point(1.25, 0.5))

    assert removed == [result]
    assert result.index == 0
    assert sorted(result.key_ids) == [0, 1, 2]
    assert all(label == "" for label in matrix_labels(controller.store))


def test_remove_key_with_target(controller):
    controller.auto_annotate()
    controller.set_mode(DrawMode.REMOVE)
    controller.set_removal_target("column")

    controller.commit_click(center_of(1, 1))

    assert controller.store.key(4).labels[0] == "1,"
    assert controller.get_progress().keys_left_for_cols == 1


def test_remove_on_empty_space_does_nothing(controller):
    controller.set_mode(DrawMode.REMOVE)
    assert controller.remove_at(Point(-5, -5)) is None


def test_auto_annotate_completes_progress(controller):
    counts = []
    controller.annotated.connect(counts.append)
    controller.auto_annotate()

    progress = controller.get_progress()
    assert counts == [9]
    assert (progress.rows_defined, progress.cols_defined) == (3, 3)
    assert progress.is_complete
    assert controller.validate().is_valid


def test_duplicates_are_reported():
    store = MatrixAssignmentStore([Key(x=0, y=0), Key(x=0, y=0), Key(x=1, y=0)])
    controller = MatrixAnnotationController(store)
    found = []
    controller.duplicates_found.connect(found.append)

    controller.auto_annotate()

    assert len(found) == 1
    assert [str(d) for d in found[0].duplicates_without_option] == ["0,0"]


def test_default_layout_keys(controller):
    controller.auto_annotate()
    assert len(controller.default_layout_keys()) == 9


def test_remove_click_inside_key_off_center_clears_only_that_key():
    controller = MatrixAnnotationController(MatrixAssignmentStore(make_grid(1, 3)))
    controller.auto_annotate()
    controller.set_mode(DrawMode.REMOVE)

    result = controller.commit_click(Point(0.8, 0.5))

    assert result is None
    assert matrix_labels(controller.store) == ["", "0,1", "0,2"]


def test_click_inside_assigned_key_off_center_continues_row():
    controller = MatrixAnnotationController(MatrixAssignmentStore(make_grid(1, 3)))
    draw_row(controller, (0, 0), (0, 1))

    controller.commit_click(Point(1.2, 0.5))
    assert controller.sequence.state.continuing == 0
    result = controller.commit_click(center_of(0, 2))

    assert result.continued
    assert result.index == 0
    assert matrix_labels(controller.store) == ["0,", "0,", "0,"]


def test_hover_off_center_on_a_key_finds_the_line(controller):
    draw_row(controller, (0, 0), (0, 2))
    assert controller.hit_test(Point(0.8, 0.5)).kind is HitKind.KEY

    target = controller.continue_hover(Point(0.8, 0.5))

    assert target.kind is HitKind.LINE
    assert controller.renumber.hovered.index == 0


def test_snap_to_grid_and_clear_all_labels(controller):
    counts = []
    controller.annotated.connect(counts.append)

    assert controller.snap_to_grid() == 9
    assert counts == [9]
    assert controller.store.key(5).labels[0] == "2,3"
    assert controller.is_via_annotated()

    controller.clear_all_labels()
    assert not controller.is_via_annotated()
    assert controller.get_progress().keys_left_for_rows == 9
