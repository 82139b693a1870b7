"""Hand recorder session: owns the ledger snapshot for the hand being recorded.

The recording UI submits one command at a time; each is applied to the
current snapshot and the resulting snapshot replaces it before the next
command is looked at.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from recorder.cards import Card
from recorder.ledger import Ledger
from recorder.models import (
    STREETS,
    Action,
    ActionChanges,
    AddAction,
    AddDecision,
    Command,
    DecisionChanges,
    HandSettings,
    RemoveAction,
    RemoveDecision,
    Street,
    UpdateAction,
    UpdateDecision,
    new_action_id,
    parse_command,
)
from recorder.positions import Position

logger = logging.getLogger(__name__)


def _in_seat_order(positions: set[Position]) -> list[str]:
    return [p.value for p in sorted(positions, key=lambda p: p.order)]


def apply_command(ledger: Ledger, command: Command) -> Ledger:
    """Apply one command to *ledger* and return the resulting snapshot."""
    if isinstance(command, AddAction):
        return ledger.add_action(command.street, command.position, command.action_id)
    if isinstance(command, UpdateAction):
        return ledger.update_action(command.action_id, command.changes)
    if isinstance(command, RemoveAction):
        return ledger.remove_action(command.action_id)
    if isinstance(command, AddDecision):
        return ledger.add_decision(command.action_id, command.changes)
    if isinstance(command, UpdateDecision):
        return ledger.update_decision(command.action_id, command.index, command.changes)
    if isinstance(command, RemoveDecision):
        return ledger.remove_decision(command.action_id, command.index)
    raise TypeError(f"Unknown command: {command!r}")


class HandRecorder:
    """Records the betting of a single hand."""

    def __init__(
        self,
        settings: Optional[HandSettings] = None,
        ledger: Optional[Ledger] = None,
    ) -> None:
        if ledger is None:
            ledger = Ledger(settings=settings or HandSettings.default())
        self.ledger = ledger

    @property
    def settings(self) -> HandSettings:
        return self.ledger.settings

    @property
    def actions(self) -> tuple[Action, ...]:
        return self.ledger.actions

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply(self, command: Union[Command, dict[str, Any]]) -> Ledger:
        if isinstance(command, dict):
            command = parse_command(command)
        before = self.ledger
        after = apply_command(before, command)
        if after is before:
            logger.debug("Ignored %s: nothing to change (%r)", command.kind, command)
        else:
            logger.info(
                "Applied %s: %d actions, pot %s",
                command.kind,
                len(after.actions),
                after.pot(),
            )
        self.ledger = after
        return after

    def add_action(
        self, street: Street, position: Optional[Position] = None
    ) -> Optional[Action]:
        """Seat a position on *street*; returns the new action or None."""
        action_id = new_action_id()
        ledger = self.apply(
            AddAction(street=street, position=position, action_id=action_id)
        )
        return ledger.get_action(action_id)

    def update_action(
        self, action_id: str, changes: Union[ActionChanges, dict[str, Any]]
    ) -> Optional[Action]:
        if isinstance(changes, dict):
            changes = ActionChanges.model_validate(changes)
        ledger = self.apply(UpdateAction(action_id=action_id, changes=changes))
        return ledger.get_action(action_id)

    def remove_action(self, action_id: str) -> None:
        self.apply(RemoveAction(action_id=action_id))

    def add_decision(
        self,
        action_id: str,
        changes: Union[DecisionChanges, dict[str, Any], None] = None,
    ) -> Optional[Action]:
        if isinstance(changes, dict):
            changes = DecisionChanges.model_validate(changes)
        ledger = self.apply(AddDecision(action_id=action_id, changes=changes))
        return ledger.get_action(action_id)

    def update_decision(
        self,
        action_id: str,
        index: int,
        changes: Union[DecisionChanges, dict[str, Any]],
    ) -> Optional[Action]:
        if isinstance(changes, dict):
            changes = DecisionChanges.model_validate(changes)
        ledger = self.apply(
            UpdateDecision(action_id=action_id, index=index, changes=changes)
        )
        return ledger.get_action(action_id)

    def remove_decision(self, action_id: str, index: int) -> None:
        self.apply(RemoveDecision(action_id=action_id, index=index))

    def update_settings(self, **changes: Any) -> HandSettings:
        """Change blind structure or default stack for the hand."""
        data = self.settings.model_dump()
        if "blind_mode" in changes and len(changes) == 1:
            # switching mode alone resets blinds to that mode's defaults
            settings = HandSettings.for_mode(
                changes["blind_mode"], starting_stack=self.settings.starting_stack
            )
        else:
            data.update(changes)
            settings = HandSettings.model_validate(data)
        self.ledger = self.ledger.with_settings(settings)
        logger.info("Settings changed: %s", settings.model_dump(mode="json"))
        return settings

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_action(self, action_id: str) -> Optional[Action]:
        return self.ledger.get_action(action_id)

    def actions_for(self, street: Street) -> list[Action]:
        return self.ledger.actions_for(street)

    def available_positions(
        self, street: Street, excluding_action_id: Optional[str] = None
    ) -> list[Position]:
        return self.ledger.available_positions(street, excluding_action_id)

    def is_all_in(self, position: Position, street: Street) -> bool:
        return self.ledger.is_all_in(position, street)

    def excluded_positions(self, street: Street) -> set[Position]:
        return self.ledger.excluded_positions(street)

    def stack_after(self, position: Position, street: Street) -> float:
        return self.ledger.stack_after(position, street)

    def call_amount(self, action_id: str, decision_index: Optional[int] = None) -> float:
        return self.ledger.call_amount(action_id, decision_index)

    def pot(self, through: Optional[Street] = None) -> float:
        return self.ledger.pot(through)

    @property
    def hero_position(self) -> Optional[Position]:
        return self.ledger.hero_position

    @property
    def hero_cards(self) -> tuple[Card, ...]:
        return self.ledger.hero_cards

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        ledger = self.ledger
        hero = ledger.hero_position
        return {
            "settings": ledger.settings.model_dump(mode="json"),
            "unit": ledger.settings.unit,
            "hero": (
                {
                    "position": hero.value,
                    "cards": [c.to_dict() for c in ledger.hero_cards],
                }
                if hero is not None
                else None
            ),
            "streets": {
                s.value: {
                    "pot": ledger.street_pot(s),
                    "excluded": _in_seat_order(ledger.excluded_positions(s)),
                }
                for s in STREETS
            },
            "pot": ledger.pot(),
            "actions": [a.model_dump(mode="json") for a in ledger.actions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HandRecorder:
        ledger = Ledger(
            settings=HandSettings.model_validate(data["settings"]),
            actions=tuple(Action.model_validate(a) for a in data.get("actions", [])),
        )
        return cls(ledger=ledger)
