"""
Label-slot codec.

Slot 0 stores the matrix position as ``"row,col"`` (either side may be empty),
slot 8 stores the layout variant as ``"option,choice"``. This is the
serialization boundary of the store: nothing else reads or writes label text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from keymatrix.config import MATRIX_LABEL_SLOT, OPTION_LABEL_SLOT

_INDEX = r"\d+"
_MATRIX_PATTERN = re.compile(rf"^({_INDEX})?,({_INDEX})?$")
_COMPLETE_PATTERN = re.compile(rf"^({_INDEX}),({_INDEX})$")


@dataclass(frozen=True)
class MatrixAssignment:
    """Matrix coordinates and layout variant of one key."""
    row: Optional[int] = None
    col: Optional[int] = None
    option: Optional[int] = None
    choice: Optional[int] = None

    @property
    def position(self) -> Optional[tuple[int, int]]:
        if self.row is None or self.col is None:
            return None
        return self.row, self.col

    @property
    def option_choice(self) -> Optional[tuple[int, int]]:
        if self.option is None or self.choice is None:
            return None
        return self.option, self.choice

    @property
    def has_option(self) -> bool:
        return self.option_choice is not None


def parse_matrix_label(label: Optional[str]) -> tuple[Optional[int], Optional[int]]:
    """
    Parse ``"row,col"``. Partial labels (``"3,"``, ``",5"``) give a single
    component; anything malformed gives ``(None, None)``.
    """
    if not label:
        return None, None
    match = _MATRIX_PATTERN.match(label.strip())
    if not match:
        return None, None
    row, col = match.groups()
    return (int(row) if row is not None else None,
            int(col) if col is not None else None)


def format_matrix_label(row: Optional[int], col: Optional[int]) -> str:
    if row is None and col is None:
        return ""
    return f"{'' if row is None else row},{'' if col is None else col}"


def parse_option_label(label: Optional[str]) -> tuple[Optional[int], Optional[int]]:
    """Parse ``"option,choice"``; both parts must be non-negative integers."""
    if not label:
        return None, None
    match = _COMPLETE_PATTERN.match(label.strip())
    if not match:
        return None, None
    return int(match.group(1)), int(match.group(2))


def format_option_label(option: Optional[int], choice: Optional[int]) -> str:
    if option is None or choice is None:
        return ""
    return f"{option},{choice}"


def is_complete_matrix_label(label: Optional[str]) -> bool:
    """True for a full ``"row,col"`` label (surrounding whitespace allowed)."""
    return bool(label) and _COMPLETE_PATTERN.match(label.strip()) is not None


def assignment_from_labels(labels: Sequence[str]) -> MatrixAssignment:
    """Decode slot 0 and slot 8 of a key's label array."""
    matrix = labels[MATRIX_LABEL_SLOT] if len(labels) > MATRIX_LABEL_SLOT else ""
    variant = labels[OPTION_LABEL_SLOT] if len(labels) > OPTION_LABEL_SLOT else ""
    row, col = parse_matrix_label(matrix)
    option, choice = parse_option_label(variant)
    return MatrixAssignment(row=row, col=col, option=option, choice=choice)
