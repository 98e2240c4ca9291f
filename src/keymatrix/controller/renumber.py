"""
Renumbering
===========
Hover-and-type state machine that changes the index of a row or column.

States:
    Idle -> Hovering(group) -> Accumulating(group, buffer) -> Hovering(group)

The pointer must rest on a connecting line of a group. Digits accumulate
into a buffer (multi-digit numbers allowed), Enter commits and Escape
discards. Committing an index already held by another group of the same
dimension swaps the two groups. Leaving the line with a pending buffer
abandons the buffer without committing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from keymatrix.model.store import Dimension, MatrixAssignmentStore

logger = logging.getLogger(__name__)

ENTER = "Enter"
ESCAPE = "Escape"


@dataclass(frozen=True)
class GroupRef:
    dimension: Dimension
    index: int


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Hovering:
    group: GroupRef


@dataclass(frozen=True)
class Accumulating:
    group: GroupRef
    buffer: str


RenumberState = Union[Idle, Hovering, Accumulating]


@dataclass(frozen=True)
class RenumberResult:
    dimension: Dimension
    old_index: int
    new_index: int
    swapped_with: Optional[int] = None  # index the displaced group received


def on_hover(state: RenumberState, group: Optional[GroupRef]) -> RenumberState:
    if group is None:
        if isinstance(state, Accumulating):
            logger.debug(f"Abandoned renumber buffer '{state.buffer}'.")
        return Idle()
    if isinstance(state, (Hovering, Accumulating)) and state.group == group:
        return state
    return Hovering(group)


def on_digit(state: RenumberState, char: str) -> RenumberState:
    if len(char) != 1 or not char.isdigit() or not char.isascii():
        return state
    if isinstance(state, Hovering):
        return Accumulating(state.group, char)
    if isinstance(state, Accumulating):
        return Accumulating(state.group, state.buffer + char)
    return state


def on_cancel(state: RenumberState) -> RenumberState:
    if isinstance(state, Accumulating):
        return Hovering(state.group)
    return state


class RenumberEngine:
    """Applies renumber commits to the store."""

    def __init__(self, store: MatrixAssignmentStore) -> None:
        self.store = store
        self._state: RenumberState = Idle()

    @property
    def state(self) -> RenumberState:
        return self._state

    @property
    def buffer(self) -> str:
        return self._state.buffer if isinstance(self._state, Accumulating) else ""

    @property
    def hovered(self) -> Optional[GroupRef]:
        return getattr(self._state, "group", None)

    def hover(self, group: Optional[GroupRef]) -> RenumberState:
        self._state = on_hover(self._state, group)
        return self._state

    def keypress(self, key: str) -> Optional[RenumberResult]:
        """Feed one key name: a digit, "Enter" or "Escape". Anything else is ignored."""
        if key == ENTER:
            return self.commit()
        if key == ESCAPE:
            self.cancel()
            return None
        self._state = on_digit(self._state, key)
        return None

    def cancel(self) -> None:
        self._state = on_cancel(self._state)

    def commit(self) -> Optional[RenumberResult]:
        state = self._state
        if not isinstance(state, Accumulating):
            return None

        group = state.group
        new_index = int(state.buffer)
        self._state = Hovering(group)
        if new_index == group.index:
            return None
        if not self.store.group(group.dimension, group.index):
            logger.warning(f"{group.dimension.capitalize()} {group.index} no longer exists; nothing renumbered.")
            return None

        swapped_with = self.store.renumber(group.dimension, group.index, new_index)
        self._state = Hovering(GroupRef(group.dimension, new_index))

        if swapped_with is not None:
            logger.info(f"Swapped {group.dimension} {group.index} and {new_index}.")
        else:
            logger.info(f"Renumbered {group.dimension} {group.index} to {new_index}.")
        return RenumberResult(group.dimension, group.index, new_index, swapped_with)
