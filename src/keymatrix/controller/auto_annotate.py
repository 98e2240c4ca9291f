"""
Automatic Annotation
====================
Infers rows and columns for a whole layout from key geometry alone.

Rows are clusters of key centers along y, columns are clusters along x,
both computed globally so that columns line up across rows the way they do
in a physical switch matrix.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from keymatrix.config import DEFAULT_SENSITIVITY, GEOMETRY_EPS
from keymatrix.model.geometry_utils import cluster_1d
from keymatrix.model.key import Key
from keymatrix.model.store import MatrixAssignmentStore

logger = logging.getLogger(__name__)


class AutoAnnotator:
    """Stateless geometric row/column inference."""

    def __init__(self, sensitivity: float = DEFAULT_SENSITIVITY, use_rotated_centers: bool = False) -> None:
        self.sensitivity = sensitivity
        # TODO: cluster each rotation group (split_by_rotation) in its own frame
        # so thumb clusters do not fall into the alphanumeric columns.
        self.use_rotated_centers = use_rotated_centers

    def infer(self, keys: Iterable[Key]) -> dict[int, tuple[int, int]]:
        """
        Compute (row, col) for every physical key.

        Returns:
            key id -> (row, col).
        """
        eligible = [k for k in keys if k.is_physical]
        if not eligible:
            return {}

        centers = [k.center() if self.use_rotated_centers else k.unrotated_center() for k in eligible]
        rows = cluster_1d([c.y for c in centers], self.sensitivity)
        cols = cluster_1d([c.x for c in centers], self.sensitivity)
        return {k.id: (r, c) for k, r, c in zip(eligible, rows, cols)}

    def annotate(self, store: MatrixAssignmentStore) -> dict[int, tuple[int, int]]:
        """Replace every row/column assignment in `store` with the inferred one."""
        if store.has_any_matrix_label():
            logger.warning("Automatic annotation replaces existing row/column assignments.")

        positions = self.infer(store.eligible_keys())
        with store.batch():
            for key_id, (row, col) in positions.items():
                store.set_position(key_id, row, col)

        n_rows = len({r for r, _ in positions.values()})
        n_cols = len({c for _, c in positions.values()})
        logger.info(f"Annotated {len(positions)} keys automatically: {n_rows} rows, {n_cols} columns.")
        return positions


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def snap_to_grid(store: MatrixAssignmentStore) -> int:
    """
    Quick annotation: write the rounded (rotated) key center as "row,col" and
    blank every other label slot. Ghost and decal keys are left untouched.
    Centers above or left of the origin snap to index 0.

    Returns:
        Number of annotated keys.
    """
    keys = store.eligible_keys()
    with store.batch():
        for key in keys:
            center = key.center()
            row = max(0, _round_half_up(center.y))
            col = max(0, _round_half_up(center.x))
            store.reset_key(key.id, row, col)
    logger.info(f"Snapped {len(keys)} keys to grid coordinates.")
    return len(keys)


@dataclass
class RotationGroup:
    rotation_angle: float
    rotation_x: Optional[float]
    rotation_y: Optional[float]
    keys: list[Key] = field(default_factory=list)


def _same_origin(a: Optional[float], b: Optional[float]) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return abs(a - b) < GEOMETRY_EPS


def split_by_rotation(keys: Iterable[Key]) -> list[RotationGroup]:
    """Group keys sharing rotation angle and rotation origin, in input order."""
    groups: list[RotationGroup] = []
    for key in keys:
        angle = key.rotation_angle or 0.0
        for group in groups:
            if (abs(group.rotation_angle - angle) < GEOMETRY_EPS
                    and _same_origin(group.rotation_x, key.rotation_x)
                    and _same_origin(group.rotation_y, key.rotation_y)):
                group.keys.append(key)
                break
        else:
            groups.append(RotationGroup(angle, key.rotation_x, key.rotation_y, [key]))
    return groups
