"""
Duplicate Validation
====================
Checks that no two physical keys share a matrix position unless they are
alternative layout options (distinct, fully specified "option,choice").

Purely diagnostic: nothing here writes to keys.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from keymatrix.model.key import Key
from keymatrix.model.labels import MatrixAssignment, assignment_from_labels

logger = logging.getLogger(__name__)


@dataclass
class DuplicatePosition:
    position: tuple[int, int]
    keys: list[Key] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.position[0]},{self.position[1]}"


@dataclass
class ValidationResult:
    is_valid: bool = True
    duplicates_without_option: list[DuplicatePosition] = field(default_factory=list)
    valid_layout_options: list[DuplicatePosition] = field(default_factory=list)


def read_assignment(key: Key) -> MatrixAssignment:
    return assignment_from_labels(key.labels)


def is_valid_option_cluster(assignments: list[MatrixAssignment]) -> bool:
    pairs = [a.option_choice for a in assignments]
    if any(p is None for p in pairs):
        return False
    return len(set(pairs)) == len(pairs)


def validate_matrix_duplicates(keys: Iterable[Key]) -> ValidationResult:
    """Partition physical keys by (row, col) and classify shared positions."""
    by_position: dict[tuple[int, int], list[Key]] = {}
    for key in keys:
        if not key.is_physical:
            continue
        position = read_assignment(key).position
        if position is not None:
            by_position.setdefault(position, []).append(key)

    result = ValidationResult()
    for position in sorted(by_position):
        members = by_position[position]
        if len(members) < 2:
            continue
        entry = DuplicatePosition(position, members)
        if is_valid_option_cluster([read_assignment(k) for k in members]):
            result.valid_layout_options.append(entry)
        else:
            result.duplicates_without_option.append(entry)

    result.is_valid = not result.duplicates_without_option
    if not result.is_valid:
        positions = ", ".join(str(d) for d in result.duplicates_without_option)
        logger.warning(f"Duplicate matrix positions without option,choice labels: {positions}.")
    return result


def get_default_layout_keys(keys: Iterable[Key]) -> list[Key]:
    """
    Keys of the base physical variant: every physical key with a full
    (row, col) and no option,choice label, plus the `choice == 0`
    alternative of each option.
    """
    selected = []
    for key in keys:
        if not key.is_physical:
            continue
        a = read_assignment(key)
        if a.position is None:
            continue
        if not a.has_option or a.choice == 0:
            selected.append(key)
    return selected
