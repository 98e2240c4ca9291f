"""
Matrix Annotation Controller
============================
Single entry point the canvas overlay talks to.

Why is this file needed?
------------------------
1. Dispatch: The overlay forwards pointer positions (already in layout units)
   and key presses; this class routes them to the drawing, renumbering and
   removal engines according to the active mode.
2. Signals: It reports every committed gesture so panels can refresh
   progress counters and show duplicate warnings.

Classes:
    Progress: Counters for the annotation panel.
    MatrixAnnotationController: The facade.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from PySide6.QtCore import QObject, Signal

from keymatrix.config import AnnotationSettings, clamp_sensitivity
from keymatrix.controller.auto_annotate import AutoAnnotator, snap_to_grid
from keymatrix.controller.capture import LineCaptureEngine
from keymatrix.controller.hit_testing import HitKind, HitTarget, hit_test
from keymatrix.controller.removal import RemovalEngine, RemovalResult
from keymatrix.controller.renumber import GroupRef, RenumberEngine, RenumberResult
from keymatrix.controller.sequence import SequenceAssigner, SequenceResult, Started
from keymatrix.controller.validation import ValidationResult, get_default_layout_keys, validate_matrix_duplicates
from keymatrix.model.geometry_primitives import Point
from keymatrix.model.key import Key
from keymatrix.model.store import BOTH_DIMENSIONS, Dimension, DrawMode, MatrixAssignmentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    rows_defined: int
    cols_defined: int
    keys_left_for_rows: int
    keys_left_for_cols: int

    @property
    def is_complete(self) -> bool:
        return self.keys_left_for_rows == 0 and self.keys_left_for_cols == 0


class MatrixAnnotationController(QObject):
    """Routes overlay events to the annotation engines."""
    mode_changed = Signal(str)
    sequence_started = Signal(int)  # id of the first key
    sequence_completed = Signal(object)  # SequenceResult
    renumbered = Signal(object)  # RenumberResult
    removed = Signal(object)  # RemovalResult
    annotated = Signal(int)  # number of keys annotated automatically
    duplicates_found = Signal(object)  # ValidationResult

    def __init__(
        self,
        store: MatrixAssignmentStore,
        settings: Optional[AnnotationSettings] = None,
        parent: Optional[QObject] = None
    ) -> None:
        super().__init__(parent)
        self.store = store
        self.settings = settings or AnnotationSettings()
        self.capture = LineCaptureEngine(self.settings.sensitivity)
        self.sequence = SequenceAssigner(store, self.capture)
        self.renumber = RenumberEngine(store)
        self.removal = RemovalEngine(store)
        self.auto_annotator = AutoAnnotator(
            self.settings.sensitivity,
            use_rotated_centers=self.settings.auto_use_rotated_centers
        )
        self._mode: Optional[DrawMode] = None
        self.removal_target: Optional[Dimension] = None

    # ---- settings ----

    @property
    def mode(self) -> Optional[DrawMode]:
        return self._mode

    def set_mode(self, mode: Union[DrawMode, str, None]) -> None:
        new_mode = DrawMode(mode) if mode is not None else None
        if new_mode == self._mode:
            return
        self.sequence.cancel()
        self.renumber.hover(None)
        self._mode = new_mode
        logger.info(f"Annotation mode: {new_mode or 'off'}.")
        self.mode_changed.emit(str(new_mode) if new_mode else "")

    def set_removal_target(self, target: Union[Dimension, str, None]) -> None:
        self.removal_target = Dimension(target) if target is not None else None

    @property
    def sensitivity(self) -> float:
        return self.settings.sensitivity

    def set_sensitivity(self, value: float) -> None:
        self.settings.sensitivity = clamp_sensitivity(value)
        self.capture.sensitivity = self.settings.sensitivity
        self.auto_annotator.sensitivity = self.settings.sensitivity

    # ---- pointer classification ----

    def _line_dimensions(self) -> tuple[Dimension, ...]:
        if self._mode is DrawMode.REMOVE:
            return BOTH_DIMENSIONS if self.removal_target is None else (self.removal_target,)
        if self._mode is not None:
            return (self._mode.dimension,)
        return BOTH_DIMENSIONS

    def hit_test(self, point: Point, *, prefer_lines: bool = False) -> HitTarget:
        return hit_test(
            self.store,
            point,
            self._line_dimensions(),
            line_tolerance=self.settings.line_hit_tolerance,
            node_radius=self.settings.key_node_radius,
            prefer_lines=prefer_lines,
        )

    def _hit_key(self, point: Point) -> Optional[Key]:
        target = self.hit_test(point)
        if target.kind is HitKind.KEY:
            return self.store.key(target.key_id)
        return None

    # ---- drawing ----

    def start_gesture(self, mode: Union[DrawMode, str], point: Point) -> Optional[Started]:
        """Select `mode` and, for row/column drawing, start a sequence on the key under `point`."""
        self.set_mode(mode)
        dimension = self._mode.dimension
        if dimension is None:
            return None
        key = self._hit_key(point)
        if key is None:
            self.sequence.cancel()
            return None
        started = self.sequence.start(dimension, key)
        if started is not None:
            self.sequence_started.emit(key.id)
        return started

    def commit_click(self, point: Point) -> Optional[SequenceResult]:
        """
        A click while drawing: starts a sequence, completes it, or (on empty
        space) drops the half-drawn sequence. In remove mode it removes.
        """
        if self._mode is None:
            return None
        if self._mode is DrawMode.REMOVE:
            self.remove_at(point)
            return None

        key = self._hit_key(point)
        if key is None:
            if self.sequence.is_started:
                logger.debug("Click outside any key; sequence dropped.")
            self.sequence.cancel()
            return None

        if not self.sequence.is_started:
            if self.sequence.start(self._mode.dimension, key) is not None:
                self.sequence_started.emit(key.id)
            return None

        result = self.sequence.complete(key)
        if result is not None:
            self.sequence_completed.emit(result)
            self._check_duplicates()
        return result

    # ---- renumbering ----

    def continue_hover(self, point: Point) -> HitTarget:
        """Track the pointer; resting on a connecting line arms renumbering."""
        target = self.hit_test(point, prefer_lines=True)
        if target.kind is HitKind.LINE:
            self.renumber.hover(GroupRef(target.dimension, target.index))
        else:
            self.renumber.hover(None)
        return target

    def renumber_keypress(self, key: str) -> Optional[RenumberResult]:
        result = self.renumber.keypress(key)
        if result is not None:
            self._after_renumber(result)
        return result

    def renumber_commit(self) -> Optional[RenumberResult]:
        result = self.renumber.commit()
        if result is not None:
            self._after_renumber(result)
        return result

    def renumber_cancel(self) -> None:
        self.renumber.cancel()

    def _after_renumber(self, result: RenumberResult) -> None:
        self.renumbered.emit(result)
        self._check_duplicates()

    # ---- removal ----

    def remove_at(self, point: Point) -> Optional[RemovalResult]:
        """Remove the assignment of the key, or the whole group of the line, under `point`."""
        target = self.hit_test(point)
        if target.kind is HitKind.KEY:
            if self._mode in (None, DrawMode.REMOVE):
                key_target = self.removal_target
            else:
                key_target = self._mode.dimension
            result = self.removal.remove_key(target.key_id, key_target)
        elif target.kind is HitKind.LINE:
            result = self.removal.remove_group(target.dimension, target.index)
            self.renumber.hover(None)
        else:
            return None

        if result.changed:
            self.removed.emit(result)
        return result

    # ---- whole layout ----

    def auto_annotate(self) -> dict[int, tuple[int, int]]:
        self.sequence.cancel()
        self.renumber.hover(None)
        positions = self.auto_annotator.annotate(self.store)
        self.annotated.emit(len(positions))
        self._check_duplicates()
        return positions

    def snap_to_grid(self) -> int:
        """Write rounded key centers as positions, blanking all other labels."""
        self.sequence.cancel()
        self.renumber.hover(None)
        count = snap_to_grid(self.store)
        self.annotated.emit(count)
        self._check_duplicates()
        return count

    def clear_all_labels(self) -> None:
        self.sequence.cancel()
        self.renumber.hover(None)
        self.store.clear_all_labels()

    def is_via_annotated(self) -> bool:
        return self.store.is_via_annotated()

    def get_progress(self) -> Progress:
        return Progress(
            rows_defined=len(self.store.used_indices(Dimension.ROW)),
            cols_defined=len(self.store.used_indices(Dimension.COLUMN)),
            keys_left_for_rows=len(self.store.unassigned_keys(Dimension.ROW)),
            keys_left_for_cols=len(self.store.unassigned_keys(Dimension.COLUMN)),
        )

    def validate(self) -> ValidationResult:
        return validate_matrix_duplicates(self.store.keys)

    def default_layout_keys(self) -> list[Key]:
        return get_default_layout_keys(self.store.keys)

    def _check_duplicates(self) -> None:
        result = self.validate()
        if not result.is_valid:
            self.duplicates_found.emit(result)
