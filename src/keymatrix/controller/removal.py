"""
Removal
=======
Deletes a single key's assignment or a whole row/column. Freed indices are
picked up again by `MatrixAssignmentStore.next_free_index`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from keymatrix.model.store import BOTH_DIMENSIONS, Dimension, MatrixAssignmentStore

logger = logging.getLogger(__name__)


@dataclass
class RemovalResult:
    key_ids: list[int] = field(default_factory=list)
    dimensions: tuple[Dimension, ...] = BOTH_DIMENSIONS
    index: Optional[int] = None  # set for whole-group removals

    @property
    def changed(self) -> bool:
        return bool(self.key_ids)


class RemovalEngine:

    def __init__(self, store: MatrixAssignmentStore) -> None:
        self.store = store

    def remove_key(self, key_id: int, target: Optional[Dimension] = None) -> RemovalResult:
        """Clear the row, the column or (target None) both from one key."""
        dims = BOTH_DIMENSIONS if target is None else (target,)
        before = self.store.assignment(key_id)
        with self.store.batch():
            for dim in dims:
                self.store.set_index(key_id, dim, None)

        had_any = any((before.row if d is Dimension.ROW else before.col) is not None for d in dims)
        if not had_any:
            return RemovalResult(dimensions=dims)
        logger.info(f"Removed {'/'.join(dims)} assignment from key {key_id}.")
        return RemovalResult(key_ids=[key_id], dimensions=dims)

    def remove_group(self, dimension: Dimension, index: int) -> RemovalResult:
        """Clear `index` from every key of the row/column."""
        cleared = self.store.clear_index(dimension, index)
        if cleared:
            logger.info(f"Removed {dimension} {index} ({len(cleared)} keys).")
        return RemovalResult(key_ids=cleared, dimensions=(dimension,), index=index)
