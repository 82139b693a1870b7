"""Seat catalog: the fixed, ordered set of table positions."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from recorder.models import Action, Street


class Position(str, Enum):
    UTG = "UTG"
    UTG1 = "UTG+1"
    UTG2 = "UTG+2"
    MP = "MP"
    MP1 = "MP+1"
    CO = "CO"
    BTN = "BTN"
    SB = "SB"
    BB = "BB"

    @property
    def order(self) -> int:
        return POSITIONS.index(self)


# Action order around the table, first to act preflop first
POSITIONS: tuple[Position, ...] = tuple(Position)


def used_positions(
    actions: Iterable[Action],
    street: Street,
    excluding_action_id: Optional[str] = None,
) -> set[Position]:
    return {
        a.position
        for a in actions
        if a.street is street and a.id != excluding_action_id
    }


def available_positions(
    actions: Iterable[Action],
    street: Street,
    excluding_action_id: Optional[str] = None,
) -> list[Position]:
    """Positions not yet taken by another action on *street*, in seat order.

    The action named by *excluding_action_id* does not count as a user of its
    own slot, so an action being edited can keep the position it already has.
    """
    used = used_positions(actions, street, excluding_action_id)
    return [p for p in POSITIONS if p not in used]
