"""Chip projections over a ledger's actions.

Everything here is a pure function of an action sequence.  Nothing is cached:
stacks are re-derived by walking streets backward every time they are asked
for, so a projection can never go stale however the ledger was edited.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from recorder.models import (
    DEFAULT_STARTING_STACK,
    STREETS,
    Action,
    Street,
    round_chips,
)
from recorder.positions import Position


def find_action(
    actions: Iterable[Action], position: Position, street: Street
) -> Optional[Action]:
    """The action *position* recorded on *street*, if any."""
    found = None
    for a in actions:
        if a.street is street and a.position is position:
            found = a
    return found


def actions_on(actions: Iterable[Action], street: Street) -> list[Action]:
    return [a for a in actions if a.street is street]


# ------------------------------------------------------------------
# Stack projection
# ------------------------------------------------------------------


def ending_stack(action: Action) -> float:
    """Chips left behind after the action and all its decisions."""
    return max(0.0, round_chips(action.stack - action.committed))


def stack_after(
    actions: Sequence[Action],
    position: Position,
    street: Street,
    default_stack: float = DEFAULT_STARTING_STACK,
) -> float:
    """Chips *position* holds at the end of *street*.

    Walks back from *street* to preflop and uses the latest street on which
    the position has an action.  A position that has not acted yet still has
    *default_stack*.
    """
    for s in reversed(STREETS[: street.order + 1]):
        action = find_action(actions, position, s)
        if action is not None:
            return ending_stack(action)
    return default_stack


def is_all_in(
    actions: Sequence[Action],
    position: Position,
    street: Street,
    default_stack: float = DEFAULT_STARTING_STACK,
) -> bool:
    """True when *position* comes into *street* with nothing behind."""
    previous = street.previous()
    if previous is None:
        return False
    return stack_after(actions, position, previous, default_stack) == 0


def is_committed(action: Action) -> bool:
    """True when the action's own street commitments used up its stack."""
    return action.committed > 0 and ending_stack(action) == 0


# ------------------------------------------------------------------
# Call resolution
# ------------------------------------------------------------------


def bet_to_match(actions: Iterable[Action], street: Street) -> float:
    """Largest total any seat has put in on *street*."""
    return max((a.committed for a in actions if a.street is street), default=0.0)


def call_amount(
    actions: Sequence[Action],
    action: Action,
    decision_index: Optional[int] = None,
) -> float:
    """Chips *action*'s seat still owes to match the biggest commitment.

    Without *decision_index* the seat's whole street commitment is counted;
    for decision *k* only the primary move and the decisions before *k* are.
    Never negative: a seat that has matched or exceeded the bet owes 0.
    """
    owed_to = bet_to_match(actions, action.street)
    if decision_index is None:
        already_in = action.committed
    else:
        already_in = action.committed_before(decision_index)
    return max(0.0, round_chips(owed_to - already_in))


def all_in_amount(action: Action, decision_index: Optional[int] = None) -> float:
    """Whatever the seat has left at the point being edited."""
    if decision_index is None:
        return action.stack
    return max(0.0, round_chips(action.stack - action.committed_before(decision_index)))


# ------------------------------------------------------------------
# Exclusion
# ------------------------------------------------------------------


def excluded_positions(
    actions: Sequence[Action],
    street: Street,
    default_stack: float = DEFAULT_STARTING_STACK,
) -> set[Position]:
    """Positions that take no part in *street*.

    A position is out if it folded on any earlier street, or if it has acted
    before and comes into *street* all-in.
    """
    earlier = street.earlier()
    excluded: set[Position] = set()
    seen: set[Position] = set()
    for a in actions:
        if a.street not in earlier:
            continue
        seen.add(a.position)
        if a.folded:
            excluded.add(a.position)

    for position in seen - excluded:
        if is_all_in(actions, position, street, default_stack):
            excluded.add(position)
    return excluded


# ------------------------------------------------------------------
# Pot
# ------------------------------------------------------------------


def street_pot(actions: Iterable[Action], street: Street) -> float:
    """Everything committed on *street*."""
    return round_chips(sum(a.committed for a in actions if a.street is street))


def pot(actions: Sequence[Action], through: Optional[Street] = None) -> float:
    """Everything committed up to and including *through* (default: river)."""
    last = through or STREETS[-1]
    return round_chips(
        sum(street_pot(actions, s) for s in STREETS[: last.order + 1])
    )
