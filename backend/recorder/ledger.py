"""The action ledger for one recorded hand.

A ``Ledger`` is an immutable snapshot.  Every mutation returns a new snapshot
and leaves the old one untouched; a mutation that names an id or decision
index the ledger does not hold returns the very same snapshot.

Edits at one street only ever ripple forward.  After each mutation the
cascade walks the later streets in order and

* drops the records of seats that folded or are all-in coming into the street,
* re-derives every remaining record's stack from the street before, and
* carries the edited seat into the street with a fold placeholder if it is
  still live there and has no record yet.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from recorder import stacks
from recorder.cards import Card
from recorder.models import (
    Action,
    ActionChanges,
    Decision,
    DecisionChanges,
    HandSettings,
    Move,
    Street,
    new_action_id,
)
from recorder.positions import Position, available_positions, used_positions

Actions = tuple[Action, ...]


# ------------------------------------------------------------------
# Helpers over action tuples
# ------------------------------------------------------------------


def _replace(actions: Actions, updated: Action) -> Actions:
    return tuple(updated if a.id == updated.id else a for a in actions)


def _carry_forward(source: Action, street: Street, stack: float) -> Action:
    return Action(
        lineage=source.lineage,
        street=street,
        position=source.position,
        stack=stack,
        is_hero=source.is_hero,
        hero_cards=source.hero_cards,
    )


def _cascade(
    actions: Actions,
    street: Street,
    default_stack: float,
    carry: Iterable[Position] = (),
) -> Actions:
    """Bring every street after *street* back in line with it."""
    carry = set(carry)
    for nxt in street.later():
        prev = nxt.previous()
        out = stacks.excluded_positions(actions, nxt, default_stack)

        kept: list[Action] = []
        for a in actions:
            if a.street is nxt:
                if a.position in out:
                    continue
                stack = stacks.stack_after(actions, a.position, prev, default_stack)
                if stack != a.stack:
                    a = a.model_copy(update={"stack": stack})
            kept.append(a)

        present = {a.position for a in kept if a.street is nxt}
        for a in list(kept):
            if (
                a.street is prev
                and a.position in carry
                and a.position not in present
                and a.position not in out
            ):
                stack = stacks.stack_after(actions, a.position, prev, default_stack)
                kept.append(_carry_forward(a, nxt, stack))
        actions = tuple(kept)
    return actions


def _propagate(actions: Actions, source: Action, required: int) -> Actions:
    """Give every other live seat on the street a pending response.

    Seats with fewer than *required* decisions get pending fold placeholders
    appended until they have that many.  Decisions already recorded are left
    alone.  A seat is skipped when its primary move or its latest decision is
    a fold.  Seats that have already put their whole stack in are skipped as
    well, although they have not folded: they have nothing left to answer with.
    """
    result = []
    for a in actions:
        if (
            a.street is source.street
            and a.id != source.id
            and a.move is not Move.FOLD
            and a.last_move is not Move.FOLD
            and not stacks.is_committed(a)
            and len(a.decisions) < required
        ):
            pending = (Decision(pending=True),) * (required - len(a.decisions))
            a = a.model_copy(update={"decisions": a.decisions + pending})
        result.append(a)
    return tuple(result)


def _hero_record(actions: Iterable[Action]) -> Optional[Action]:
    return next((a for a in actions if a.is_hero), None)


def _make_hero(
    actions: Actions, position: Position, cards: tuple[Card, ...]
) -> Actions:
    result = []
    for a in actions:
        if a.position is position:
            a = a.model_copy(update={"is_hero": True, "hero_cards": tuple(cards)})
        elif a.is_hero or a.hero_cards:
            a = a.model_copy(update={"is_hero": False, "hero_cards": ()})
        result.append(a)
    return tuple(result)


def _clear_hero(actions: Actions, position: Position) -> Actions:
    return tuple(
        a.model_copy(update={"is_hero": False, "hero_cards": ()})
        if a.position is position
        else a
        for a in actions
    )


def _settle_amount(
    move: Move,
    amount: float,
    previous_move: Move,
    explicit_amount: bool,
    owed: float,
    remaining: float,
) -> float:
    """Auto-fill an amount for a move switch; passive moves carry nothing."""
    if move in (Move.FOLD, Move.CHECK):
        return 0.0
    if explicit_amount:
        return amount
    if move is Move.CALL and previous_move is not Move.CALL:
        return owed
    if move is Move.ALL_IN and previous_move is not Move.ALL_IN:
        return remaining
    return amount


def _set(changes: BaseModel, field: str) -> bool:
    return field in changes.model_fields_set and getattr(changes, field) is not None


# ------------------------------------------------------------------
# Ledger
# ------------------------------------------------------------------


class Ledger(BaseModel):
    """Immutable snapshot of every recorded action in one hand."""

    model_config = ConfigDict(frozen=True)

    settings: HandSettings = Field(default_factory=HandSettings.default)
    actions: Actions = ()

    # --- queries ---

    @property
    def default_stack(self) -> float:
        return self.settings.starting_stack

    def get_action(self, action_id: str) -> Optional[Action]:
        return next((a for a in self.actions if a.id == action_id), None)

    def actions_on(self, street: Street) -> list[Action]:
        return stacks.actions_on(self.actions, street)

    def actions_for(self, street: Street) -> list[Action]:
        """The street's actions with folded and all-in seats left out."""
        out = self.excluded_positions(street)
        return [a for a in self.actions_on(street) if a.position not in out]

    def available_positions(
        self, street: Street, excluding_action_id: Optional[str] = None
    ) -> list[Position]:
        return available_positions(self.actions, street, excluding_action_id)

    def stack_after(self, position: Position, street: Street) -> float:
        return stacks.stack_after(self.actions, position, street, self.default_stack)

    def is_all_in(self, position: Position, street: Street) -> bool:
        return stacks.is_all_in(self.actions, position, street, self.default_stack)

    def excluded_positions(self, street: Street) -> set[Position]:
        return stacks.excluded_positions(self.actions, street, self.default_stack)

    def call_amount(self, action_id: str, decision_index: Optional[int] = None) -> float:
        action = self.get_action(action_id)
        if action is None:
            return 0.0
        return stacks.call_amount(self.actions, action, decision_index)

    def street_pot(self, street: Street) -> float:
        return stacks.street_pot(self.actions, street)

    def pot(self, through: Optional[Street] = None) -> float:
        return stacks.pot(self.actions, through)

    @property
    def hero_position(self) -> Optional[Position]:
        hero = _hero_record(self.actions)
        return hero.position if hero else None

    @property
    def hero_cards(self) -> tuple[Card, ...]:
        hero = _hero_record(self.actions)
        return hero.hero_cards if hero else ()

    # --- mutations ---

    def _with(self, actions: Actions) -> Ledger:
        return self.model_copy(update={"actions": actions})

    def with_settings(self, settings: HandSettings) -> Ledger:
        """Swap the hand's settings and re-derive every later-street stack."""
        actions = _cascade(self.actions, Street.PREFLOP, settings.starting_stack)
        return self.model_copy(update={"settings": settings, "actions": actions})

    def add_action(
        self,
        street: Street,
        position: Optional[Position] = None,
        action_id: Optional[str] = None,
    ) -> Ledger:
        """Seat a position on *street*, folding by default.

        Without *position* the first free seat is taken.  A position that is
        already on the street, or that folded or went all-in before it, cannot
        be added.
        """
        out = self.excluded_positions(street)
        free = [p for p in self.available_positions(street) if p not in out]
        if position is None:
            if not free:
                return self
            position = free[0]
        elif position not in free:
            return self
        if action_id is not None and self.get_action(action_id) is not None:
            return self

        hero = _hero_record(self.actions)
        seats_hero = hero is not None and hero.position is position
        action = Action(
            id=action_id or new_action_id(),
            street=street,
            position=position,
            stack=self.stack_after(position, street),
            is_hero=seats_hero,
            hero_cards=hero.hero_cards if seats_hero else (),
        )
        actions = self.actions + (action,)
        return self._with(_cascade(actions, street, self.default_stack, {position}))

    def update_action(
        self, action_id: str, changes: Union[ActionChanges, dict[str, Any]]
    ) -> Ledger:
        target = self.get_action(action_id)
        if target is None:
            return self
        if isinstance(changes, dict):
            changes = ActionChanges.model_validate(changes)

        actions = self.actions
        default_stack = self.default_stack
        update: dict[str, Any] = {}

        if _set(changes, "stack"):
            update["stack"] = changes.stack

        moved = _set(changes, "position") and changes.position is not target.position
        if moved:
            position = changes.position
            if (
                position in used_positions(actions, target.street, target.id)
                or position in self.excluded_positions(target.street)
            ):
                return self
            update["position"] = position
            prev = target.street.previous()
            if prev is not None:
                update["stack"] = stacks.stack_after(
                    actions, position, prev, default_stack
                )
            # later records of this seat belonged to the old position
            later = target.street.later()
            actions = tuple(
                a
                for a in actions
                if not (a.lineage == target.lineage and a.street in later)
            )

        move = changes.move if _set(changes, "move") else target.move
        amount = changes.amount if _set(changes, "amount") else target.amount
        pending = target.model_copy(update={**update, "move": move, "amount": 0.0})
        actions = _replace(actions, pending)
        update["move"] = move
        update["amount"] = _settle_amount(
            move,
            amount,
            target.move,
            explicit_amount=bool(changes.amount),
            owed=stacks.call_amount(actions, pending),
            remaining=stacks.all_in_amount(pending),
        )
        updated = target.model_copy(update=update)
        actions = _replace(actions, updated)

        if moved:
            hero = _hero_record(a for a in actions if a.id != target.id)
            if target.is_hero:
                actions = _make_hero(actions, updated.position, target.hero_cards)
            elif hero is not None and hero.position is updated.position:
                actions = _make_hero(actions, updated.position, hero.hero_cards)

        if _set(changes, "is_hero"):
            if changes.is_hero:
                cards = (
                    changes.hero_cards
                    if _set(changes, "hero_cards")
                    else updated.hero_cards
                )
                actions = _make_hero(actions, updated.position, cards)
            else:
                actions = _clear_hero(actions, updated.position)
        elif _set(changes, "hero_cards") and updated.is_hero:
            actions = _make_hero(actions, updated.position, changes.hero_cards)

        if _set(changes, "move") and move.is_aggressive:
            actions = _propagate(actions, updated, required=1)

        actions = _cascade(actions, target.street, default_stack, {updated.position})
        return self._with(actions)

    def remove_action(self, action_id: str) -> Ledger:
        """Remove an action and every record carried forward from it."""
        target = self.get_action(action_id)
        if target is None:
            return self
        later = target.street.later()
        actions = tuple(
            a
            for a in self.actions
            if a.id != target.id
            and not (a.lineage == target.lineage and a.street in later)
        )
        return self._with(_cascade(actions, target.street, self.default_stack))

    def add_decision(
        self,
        action_id: str,
        changes: Union[DecisionChanges, dict[str, Any], None] = None,
    ) -> Ledger:
        """Append a decision (fold unless *changes* say otherwise)."""
        target = self.get_action(action_id)
        if target is None:
            return self
        decisions = target.decisions + (Decision(),)
        actions = _replace(
            self.actions, target.model_copy(update={"decisions": decisions})
        )
        if changes is not None:
            # the cascade runs once the new decision has its real move
            return self._with(actions).update_decision(
                action_id, len(decisions) - 1, changes
            )
        actions = _cascade(actions, target.street, self.default_stack, {target.position})
        return self._with(actions)

    def update_decision(
        self,
        action_id: str,
        index: int,
        changes: Union[DecisionChanges, dict[str, Any]],
    ) -> Ledger:
        target = self.get_action(action_id)
        if target is None or not 0 <= index < len(target.decisions):
            return self
        if isinstance(changes, dict):
            changes = DecisionChanges.model_validate(changes)

        current = target.decisions[index]
        move = changes.move if _set(changes, "move") else current.move
        amount = changes.amount if _set(changes, "amount") else current.amount

        def with_decision(decision: Decision) -> Action:
            decisions = list(target.decisions)
            decisions[index] = decision
            return target.model_copy(update={"decisions": tuple(decisions)})

        pending = with_decision(Decision(move=move))
        amount = _settle_amount(
            move,
            amount,
            current.move,
            explicit_amount=bool(changes.amount),
            owed=stacks.call_amount(_replace(self.actions, pending), pending, index),
            remaining=stacks.all_in_amount(pending, index),
        )
        updated = with_decision(Decision(move=move, amount=amount))
        actions = _replace(self.actions, updated)

        if _set(changes, "move") and move.is_aggressive:
            actions = _propagate(actions, updated, required=index + 1)

        actions = _cascade(actions, target.street, self.default_stack, {target.position})
        return self._with(actions)

    def remove_decision(self, action_id: str, index: int) -> Ledger:
        target = self.get_action(action_id)
        if target is None or not 0 <= index < len(target.decisions):
            return self
        decisions = target.decisions[:index] + target.decisions[index + 1 :]
        updated = target.model_copy(update={"decisions": decisions})
        actions = _cascade(
            _replace(self.actions, updated),
            target.street,
            self.default_stack,
            {target.position},
        )
        return self._with(actions)
