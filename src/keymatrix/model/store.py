"""
Matrix Assignment Store (Data Model)
====================================
This module defines the owner of all per-key matrix assignments.

Why is this file needed?
------------------------
1. State Management: Row, column and layout-variant data live in the label
   slots of shared key objects. This store is the single reader/writer of
   those slots, so no engine touches label text directly.
2. Signals: Views subscribe to `assignments_changed` to redraw the overlay.
3. Atomicity: `batch()` groups the writes of one gesture into one notification.

Classes:
    Dimension: Row or column.
    DrawMode: Active tool of the annotation overlay.
    MatrixAssignmentStore: The store.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import StrEnum
from typing import Iterable, Iterator, Optional

from PySide6.QtCore import QObject, Signal

from keymatrix.config import MATRIX_LABEL_SLOT, OPTION_LABEL_SLOT
from keymatrix.model.key import Key, empty_labels
from keymatrix.model.labels import (
    MatrixAssignment, assignment_from_labels, format_matrix_label,
    format_option_label, is_complete_matrix_label
)

logger = logging.getLogger(__name__)


class Dimension(StrEnum):
    ROW = "row"
    COLUMN = "column"

    @property
    def other(self) -> Dimension:
        return Dimension.COLUMN if self is Dimension.ROW else Dimension.ROW


class DrawMode(StrEnum):
    ROW = "row"
    COLUMN = "column"
    REMOVE = "remove"

    @property
    def dimension(self) -> Optional[Dimension]:
        if self is DrawMode.ROW:
            return Dimension.ROW
        if self is DrawMode.COLUMN:
            return Dimension.COLUMN
        return None


BOTH_DIMENSIONS: tuple[Dimension, ...] = (Dimension.ROW, Dimension.COLUMN)


def _check_index(value: Optional[int]) -> None:
    if value is not None and value < 0:
        raise ValueError(f"Matrix index must be non-negative, got {value}.")


class MatrixAssignmentStore(QObject):
    """Owns the keys of a layout and their slot-0 / slot-8 encoding."""
    assignments_changed = Signal()
    labels_cleared = Signal()

    def __init__(self, keys: Iterable[Key] = (), parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._keys: list[Key] = []
        self._by_id: dict[int, Key] = {}
        self._batch_depth = 0
        self._dirty = False
        for key in keys:
            self.add_key(key)

    # ---- key registry ----

    def add_key(self, key: Key) -> Key:
        if key.id is None or key.id in self._by_id:
            key.id = max(self._by_id, default=-1) + 1
        self._keys.append(key)
        self._by_id[key.id] = key
        return key

    @property
    def keys(self) -> list[Key]:
        return list(self._keys)

    def key(self, key_id: int) -> Key:
        try:
            return self._by_id[key_id]
        except KeyError:
            raise KeyError(f"No key with id {key_id}.") from None

    def eligible_keys(self) -> list[Key]:
        """Keys that take part in the matrix (no ghost or decal keys)."""
        return [k for k in self._keys if k.is_physical]

    # ---- reads ----

    def assignment(self, key_id: int) -> MatrixAssignment:
        return assignment_from_labels(self.key(key_id).labels)

    def index_of(self, key_id: int, dimension: Dimension) -> Optional[int]:
        a = self.assignment(key_id)
        return a.row if dimension is Dimension.ROW else a.col

    def groups(self, dimension: Dimension) -> dict[int, list[Key]]:
        """
        Index -> member keys, ascending by index. Rows are ordered left to
        right, columns top to bottom.
        """
        groups: dict[int, list[Key]] = {}
        for key in self.eligible_keys():
            index = self.index_of(key.id, dimension)
            if index is not None:
                groups.setdefault(index, []).append(key)

        if dimension is Dimension.ROW:
            sort_key = lambda k: k.center().x
        else:
            sort_key = lambda k: k.center().y
        return {i: sorted(groups[i], key=sort_key) for i in sorted(groups)}

    def group(self, dimension: Dimension, index: int) -> list[Key]:
        return self.groups(dimension).get(index, [])

    def used_indices(self, dimension: Dimension) -> set[int]:
        return set(self.groups(dimension))

    def next_free_index(self, dimension: Dimension) -> int:
        """Smallest non-negative index not in use, so removed numbers get reused."""
        used = self.used_indices(dimension)
        num = 0
        while num in used:
            num += 1
        return num

    def unassigned_keys(self, dimension: Dimension) -> list[Key]:
        return [k for k in self.eligible_keys() if self.index_of(k.id, dimension) is None]

    def has_any_matrix_label(self) -> bool:
        """True if any physical key carries a row or a column."""
        for key in self.eligible_keys():
            a = self.assignment(key.id)
            if a.row is not None or a.col is not None:
                return True
        return False

    def is_via_annotated(self) -> bool:
        """True if there is at least one physical key and every one has a full "row,col"."""
        eligible = self.eligible_keys()
        if not eligible:
            return False
        return all(is_complete_matrix_label(k.labels[MATRIX_LABEL_SLOT]) for k in eligible)

    # ---- writes ----

    @contextmanager
    def batch(self) -> Iterator[MatrixAssignmentStore]:
        """Collect writes and emit `assignments_changed` once on exit."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self._dirty = False
                self.assignments_changed.emit()

    def _touch(self) -> None:
        if self._batch_depth:
            self._dirty = True
        else:
            self.assignments_changed.emit()

    def _writable(self, key_id: int) -> Key:
        key = self.key(key_id)
        if not key.is_physical:
            raise ValueError(f"{key!r} is a ghost or decal key and has no matrix position.")
        return key

    def set_position(self, key_id: int, row: Optional[int], col: Optional[int]) -> None:
        _check_index(row)
        _check_index(col)
        key = self._writable(key_id)
        label = format_matrix_label(row, col)
        if key.labels[MATRIX_LABEL_SLOT] != label:
            key.labels[MATRIX_LABEL_SLOT] = label
            self._touch()

    def set_index(self, key_id: int, dimension: Dimension, value: Optional[int]) -> None:
        a = self.assignment(key_id)
        if dimension is Dimension.ROW:
            self.set_position(key_id, value, a.col)
        else:
            self.set_position(key_id, a.row, value)

    def set_option(self, key_id: int, option: Optional[int], choice: Optional[int]) -> None:
        _check_index(option)
        _check_index(choice)
        key = self._writable(key_id)
        label = format_option_label(option, choice)
        if key.labels[OPTION_LABEL_SLOT] != label:
            key.labels[OPTION_LABEL_SLOT] = label
            self._touch()

    def reset_key(self, key_id: int, row: Optional[int], col: Optional[int]) -> None:
        """Blank every label slot of the key, then write (row, col) to the matrix slot."""
        _check_index(row)
        _check_index(col)
        key = self._writable(key_id)
        labels = empty_labels()
        labels[MATRIX_LABEL_SLOT] = format_matrix_label(row, col)
        if key.labels != labels:
            key.labels = labels
            self._touch()

    def renumber(self, dimension: Dimension, old: int, new: int) -> Optional[int]:
        """
        Move group `old` to index `new`. If `new` is taken, the two groups
        swap indices.

        Returns:
            The index the displaced group received, or None for a plain rename.
        """
        _check_index(new)
        if old == new:
            return None
        moving = self.group(dimension, old)
        displaced = self.group(dimension, new)
        with self.batch():
            for key in moving:
                self.set_index(key.id, dimension, new)
            for key in displaced:
                self.set_index(key.id, dimension, old)
        return old if displaced else None

    def clear_index(self, dimension: Dimension, index: int) -> list[int]:
        """Drop `index` from every member of the group; returns the cleared key ids."""
        members = self.group(dimension, index)
        with self.batch():
            for key in members:
                self.set_index(key.id, dimension, None)
        return [k.id for k in members]

    def clear_assignments(self, dimensions: Iterable[Dimension] = BOTH_DIMENSIONS) -> None:
        dims = set(dimensions)
        with self.batch():
            for key in self.eligible_keys():
                a = self.assignment(key.id)
                row = None if Dimension.ROW in dims else a.row
                col = None if Dimension.COLUMN in dims else a.col
                self.set_position(key.id, row, col)

    def clear_all_labels(self) -> None:
        """Blank all label slots of all keys, ghost and decal keys included."""
        for key in self._keys:
            key.labels = empty_labels()
        logger.info(f"Cleared labels of {len(self._keys)} keys.")
        self.labels_cleared.emit()
        self._touch()
