from keymatrix.controller.sequence import Idle, SequenceAssigner, Started
from keymatrix.model.store import Dimension, MatrixAssignmentStore

from tests.helpers import make_grid, matrix_labels


def draw(assigner: SequenceAssigner, dimension: Dimension, first_id: int, last_id: int):
    store = assigner.store
    assigner.start(dimension, store.key(first_id))
    return assigner.complete(store.key(last_id))


def test_row_then_column_on_3x3_grid(grid_store):
    assigner = SequenceAssigner(grid_store)

    result = draw(assigner, Dimension.ROW, 0, 2)
    assert result.index == 0
    assert result.assigned == [0, 1, 2]
    assert result.skipped == []
    assert matrix_labels(grid_store)[:3] == ["0,", "0,", "0,"]

    result = draw(assigner, Dimension.COLUMN, 0, 6)
    assert result.index == 0
    assert result.assigned == [0, 3, 6]
    assert grid_store.key(0).labels[0] == "0,0"
    assert grid_store.key(3).labels[0] == ",0"
    assert grid_store.key(6).labels[0] == ",0"


def test_state_transitions(grid_store):
    assigner = SequenceAssigner(grid_store)
    assert isinstance(assigner.state, Idle)

    started = assigner.start(Dimension.ROW, grid_store.key(0))
    assert isinstance(assigner.state, Started)
    assert started.continuing is None

    assigner.complete(grid_store.key(1))
    assert isinstance(assigner.state, Idle)


def test_complete_without_start_is_noop(grid_store):
    assigner = SequenceAssigner(grid_store)
    assert assigner.complete(grid_store.key(0)) is None
    assert matrix_labels(grid_store) == [""] * 9


def test_cancel_has_no_side_effects(grid_store):
    assigner = SequenceAssigner(grid_store)
    assigner.start(Dimension.ROW, grid_store.key(0))
    assigner.cancel()
    assert isinstance(assigner.state, Idle)
    assert assigner.complete(grid_store.key(2)) is None
    assert matrix_labels(grid_store) == [""] * 9


def test_rows_get_consecutive_indices(grid_store):
    assigner = SequenceAssigner(grid_store)
    assert draw(assigner, Dimension.ROW, 0, 2).index == 0
    assert draw(assigner, Dimension.ROW, 3, 5).index == 1
    assert draw(assigner, Dimension.ROW, 6, 8).index == 2


def test_continue_existing_row(grid_store):
    assigner = SequenceAssigner(grid_store)
    draw(assigner, Dimension.ROW, 0, 1)
    draw(assigner, Dimension.ROW, 3, 5)

    started = assigner.start(Dimension.ROW, grid_store.key(1))
    assert started.continuing == 0
    result = assigner.complete(grid_store.key(2))

    assert result.continued
    assert result.index == 0
    assert result.assigned == [2]
    assert [k.id for k in grid_store.group(Dimension.ROW, 0)] == [0, 1, 2]


def test_key_of_another_row_is_skipped(grid_store):
    assigner = SequenceAssigner(grid_store)
    draw(assigner, Dimension.ROW, 0, 2)

    result = draw(assigner, Dimension.ROW, 3, 1)

    assert result.index == 1
    assert result.assigned == [3]
    assert result.skipped == [1]
    assert grid_store.key(1).labels[0] == "0,"


def test_duplicate_position_is_skipped(grid_store):
    assigner = SequenceAssigner(grid_store)
    draw(assigner, Dimension.ROW, 0, 2)

    # A column across two keys of row 0 would put both at (0, 0)
    result = draw(assigner, Dimension.COLUMN, 1, 2)

    assert result.assigned == [1]
    assert result.skipped == [2]
    assert grid_store.key(1).labels[0] == "0,0"
    assert grid_store.key(2).labels[0] == "0,"


def test_layout_options_may_share_a_position(grid_store):
    grid_store.set_option(1, 0, 0)
    grid_store.set_option(2, 0, 1)
    assigner = SequenceAssigner(grid_store)
    draw(assigner, Dimension.ROW, 0, 2)

    result = draw(assigner, Dimension.COLUMN, 1, 2)

    assert result.assigned == [1, 2]
    assert grid_store.key(1).labels[0] == "0,0"
    assert grid_store.key(2).labels[0] == "0,0"


def test_new_row_reuses_freed_index(grid_store):
    assigner = SequenceAssigner(grid_store)
    draw(assigner, Dimension.ROW, 0, 2)
    draw(assigner, Dimension.ROW, 3, 5)
    draw(assigner, Dimension.ROW, 6, 8)

    grid_store.clear_index(Dimension.ROW, 1)
    result = draw(assigner, Dimension.ROW, 3, 5)

    assert result.index == 1


def test_ghost_key_cannot_start_a_sequence():
    keys = make_grid(1, 2)
    keys[0].ghost = True
    store = MatrixAssignmentStore(keys)
    assigner = SequenceAssigner(store)
    assert assigner.start(Dimension.ROW, keys[0]) is None
    assert isinstance(assigner.state, Idle)
