"""
Sequence Assignment
===================
Turns a two-click drawing gesture into row or column assignments.

States:
    Idle -> Started(first key) -> (second click) -> Idle, yielding a SequenceResult.

A first click on a key already assigned in the active dimension continues
that group; a new group can only start from an unassigned key. Captured keys
that cannot take the target index (already in another group, or the new
position would duplicate another key without layout options) are skipped
while the rest of the gesture is still applied.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from keymatrix.controller.capture import LineCaptureEngine
from keymatrix.model.key import Key
from keymatrix.model.labels import MatrixAssignment
from keymatrix.model.store import Dimension, MatrixAssignmentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Started:
    first_key: Key
    dimension: Dimension
    continuing: Optional[int] = None  # index of the group being extended


SequenceState = Union[Idle, Started]


@dataclass
class SequenceResult:
    dimension: Dimension
    index: int
    captured: list[int] = field(default_factory=list)
    assigned: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    continued: bool = False


def options_distinguish(a: MatrixAssignment, b: MatrixAssignment) -> bool:
    """Two keys may share a position only as distinct, fully specified layout options."""
    return a.has_option and b.has_option and a.option_choice != b.option_choice


def find_position_conflict(
    store: MatrixAssignmentStore,
    key: Key,
    position: tuple[int, int],
    pending: dict[int, tuple[int, int]]
) -> Optional[Key]:
    """First other key that would illegally share `position` with `key`."""
    own = store.assignment(key.id)
    for other in store.eligible_keys():
        if other is key:
            continue
        other_assignment = store.assignment(other.id)
        other_position = pending.get(other.id, other_assignment.position)
        if other_position == position and not options_distinguish(own, other_assignment):
            return other
    return None


def plan_sequence(
    store: MatrixAssignmentStore,
    dimension: Dimension,
    captured: list[Key],
    index: int
) -> tuple[list[int], list[int]]:
    """
    Decide which captured keys receive `index`. Pure: reads the store only.

    Returns:
        (assign, skipped) key id lists. Keys that already hold `index` are in
        neither list.
    """
    assign: list[int] = []
    skipped: list[int] = []
    pending: dict[int, tuple[int, int]] = {}

    for key in captured:
        current = store.assignment(key.id)
        own_index = current.row if dimension is Dimension.ROW else current.col
        other_index = current.col if dimension is Dimension.ROW else current.row

        if own_index == index:
            continue
        if own_index is not None:
            logger.debug(f"Skipping {key!r}: already in {dimension} {own_index}.")
            skipped.append(key.id)
            continue

        if other_index is not None:
            position = (index, other_index) if dimension is Dimension.ROW else (other_index, index)
            conflict = find_position_conflict(store, key, position, pending)
            if conflict is not None:
                logger.debug(f"Skipping {key!r}: position {position} is taken by {conflict!r}.")
                skipped.append(key.id)
                continue
            pending[key.id] = position

        assign.append(key.id)

    return assign, skipped


class SequenceAssigner:
    """Two-click row/column drawing state machine."""

    def __init__(self, store: MatrixAssignmentStore, capture: Optional[LineCaptureEngine] = None) -> None:
        self.store = store
        self.capture = capture or LineCaptureEngine()
        self._state: SequenceState = Idle()

    @property
    def state(self) -> SequenceState:
        return self._state

    @property
    def is_started(self) -> bool:
        return isinstance(self._state, Started)

    def start(self, dimension: Dimension, key: Key) -> Optional[Started]:
        """First click. Ghost and decal keys cannot start a sequence."""
        if not key.is_physical:
            return None
        continuing = self.store.index_of(key.id, dimension)
        self._state = Started(first_key=key, dimension=dimension, continuing=continuing)
        if continuing is not None:
            logger.info(f"Continuing {dimension} {continuing} from {key!r}.")
        else:
            logger.info(f"Starting new {dimension} from {key!r}.")
        return self._state

    def cancel(self) -> None:
        self._state = Idle()

    def candidates(self, dimension: Dimension, continuing: Optional[int]) -> list[Key]:
        """Keys unassigned in `dimension`, plus the members of the continued group."""
        return [
            k for k in self.store.eligible_keys()
            if self.store.index_of(k.id, dimension) in (None, continuing)
        ]

    def complete(self, key: Key) -> Optional[SequenceResult]:
        """Second click: capture, resolve the index and write in one batch."""
        state = self._state
        if not isinstance(state, Started) or not key.is_physical:
            return None
        self._state = Idle()

        dimension = state.dimension
        captured = self.capture.capture(
            state.first_key.center(),
            key.center(),
            self.candidates(dimension, state.continuing),
            clicked=(state.first_key, key),
        )
        index = state.continuing if state.continuing is not None else self.store.next_free_index(dimension)
        assign, skipped = plan_sequence(self.store, dimension, captured, index)

        with self.store.batch():
            for key_id in assign:
                self.store.set_index(key_id, dimension, index)

        result = SequenceResult(
            dimension=dimension,
            index=index,
            captured=[k.id for k in captured],
            assigned=assign,
            skipped=skipped,
            continued=state.continuing is not None,
        )
        logger.info(
            f"{dimension.capitalize()} {index}: assigned {len(assign)} keys, skipped {len(skipped)}."
        )
        return result
