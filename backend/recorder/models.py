"""Pydantic models for recorded betting actions."""

from __future__ import annotations

import math
import os
import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    model_validator,
)

from recorder.cards import Card
from recorder.positions import Position

DEFAULT_STARTING_STACK = float(os.getenv("HAND_RECORDER_STARTING_STACK", "100"))
DEFAULT_BLIND_MODE = os.getenv("HAND_RECORDER_BLIND_MODE", "chips")

# Fractional BB amounts are kept to cents so repeated subtraction reaches 0
CHIP_PRECISION = 2


def round_chips(value: float) -> float:
    return round(value, CHIP_PRECISION) + 0.0


def _clamp_chips(value: Any) -> Any:
    """Coerce user input to a non-negative chip amount; junk becomes 0."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return round_chips(number)


def _at_most_two(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(value[:2])
    return value


Chips = Annotated[float, BeforeValidator(_clamp_chips)]
HeroCards = Annotated[tuple[Card, ...], BeforeValidator(_at_most_two)]


class Street(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"

    @property
    def order(self) -> int:
        return STREETS.index(self)

    def previous(self) -> Optional[Street]:
        i = self.order
        return STREETS[i - 1] if i > 0 else None

    def earlier(self) -> tuple[Street, ...]:
        return STREETS[: self.order]

    def later(self) -> tuple[Street, ...]:
        return STREETS[self.order + 1 :]


STREETS: tuple[Street, ...] = tuple(Street)


class Move(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    ALL_IN = "allin"

    @property
    def is_committing(self) -> bool:
        """Moves that put chips into the pot."""
        return self in (Move.CALL, Move.BET, Move.RAISE, Move.ALL_IN)

    @property
    def is_aggressive(self) -> bool:
        """Moves that every other live seat has to answer."""
        return self in (Move.BET, Move.RAISE, Move.ALL_IN)


def _zero_passive_amount(data: Any) -> Any:
    if isinstance(data, dict):
        data = dict(data)
        if data.get("amount") is None:
            data["amount"] = 0.0
        if data.get("move", Move.FOLD) in (Move.FOLD, Move.CHECK):
            data["amount"] = 0.0
    return data


class BlindMode(str, Enum):
    CHIPS = "chips"
    BB = "bb"


class HandSettings(BaseModel):
    """Blind structure and default stack for one recorded hand."""

    model_config = ConfigDict(frozen=True)

    blind_mode: BlindMode = BlindMode.CHIPS
    small_blind: Chips = 50.0
    big_blind: Chips = 100.0
    ante: Chips = 0.0
    starting_stack: Chips = DEFAULT_STARTING_STACK

    @property
    def unit(self) -> str:
        return "BB" if self.blind_mode is BlindMode.BB else ""

    @classmethod
    def for_mode(cls, mode: BlindMode | str, **overrides: Any) -> HandSettings:
        mode = BlindMode(mode)
        if mode is BlindMode.BB:
            defaults = {"small_blind": 0.5, "big_blind": 1.0, "ante": 1.0}
        else:
            defaults = {"small_blind": 50.0, "big_blind": 100.0, "ante": 0.0}
        defaults.update(overrides)
        return cls(blind_mode=mode, **defaults)

    @classmethod
    def default(cls) -> HandSettings:
        return cls.for_mode(DEFAULT_BLIND_MODE)


# --- Ledger records ---


class Decision(BaseModel):
    """A later response by the same seat within the same street."""

    model_config = ConfigDict(frozen=True)

    move: Move = Move.FOLD
    amount: Chips = 0.0
    # filled in automatically after someone else's aggression; cleared by any edit
    pending: bool = False

    @model_validator(mode="before")
    @classmethod
    def _passive_moves_carry_nothing(cls, data: Any) -> Any:
        return _zero_passive_amount(data)

    @property
    def committed(self) -> float:
        return self.amount if self.move.is_committing else 0.0


def new_action_id() -> str:
    return uuid.uuid4().hex[:12]


class Action(BaseModel):
    """A seat's primary recorded move on one street."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_action_id)
    lineage: str = ""  # shared by a record and everything carried forward from it
    street: Street
    position: Position
    stack: Chips = 0.0  # before acting on this street
    move: Move = Move.FOLD
    amount: Chips = 0.0
    is_hero: bool = False
    hero_cards: HeroCards = ()
    decisions: tuple[Decision, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _fill_lineage(cls, data: Any) -> Any:
        data = _zero_passive_amount(data)
        if isinstance(data, dict) and not data.get("lineage"):
            data.setdefault("id", new_action_id())
            data["lineage"] = data["id"]
        return data

    @property
    def primary_committed(self) -> float:
        return self.amount if self.move.is_committing else 0.0

    def committed_before(self, decision_index: int) -> float:
        """Chips put in by the primary move and decisions before *decision_index*."""
        total = self.primary_committed
        for d in self.decisions[:decision_index]:
            total += d.committed
        return round_chips(total)

    @property
    def committed(self) -> float:
        return self.committed_before(len(self.decisions))

    @property
    def folded(self) -> bool:
        """True once the seat has recorded a fold; pending folds do not count."""
        return self.move is Move.FOLD or any(
            d.move is Move.FOLD and not d.pending for d in self.decisions
        )

    @property
    def last_move(self) -> Move:
        return self.decisions[-1].move if self.decisions else self.move


# --- Change requests ---


class ActionChanges(BaseModel):
    """Field-level edits to an Action; only fields explicitly set are applied."""

    position: Optional[Position] = None
    stack: Optional[Chips] = None
    move: Optional[Move] = None
    amount: Optional[Chips] = None
    is_hero: Optional[bool] = None
    hero_cards: Optional[HeroCards] = None


class DecisionChanges(BaseModel):
    move: Optional[Move] = None
    amount: Optional[Chips] = None


# --- Commands ---


class AddAction(BaseModel):
    kind: Literal["add_action"] = "add_action"
    street: Street
    position: Optional[Position] = None
    action_id: Optional[str] = None


class UpdateAction(BaseModel):
    kind: Literal["update_action"] = "update_action"
    action_id: str
    changes: ActionChanges


class RemoveAction(BaseModel):
    kind: Literal["remove_action"] = "remove_action"
    action_id: str


class AddDecision(BaseModel):
    kind: Literal["add_decision"] = "add_decision"
    action_id: str
    changes: Optional[DecisionChanges] = None


class UpdateDecision(BaseModel):
    kind: Literal["update_decision"] = "update_decision"
    action_id: str
    index: int = Field(..., ge=0)
    changes: DecisionChanges


class RemoveDecision(BaseModel):
    kind: Literal["remove_decision"] = "remove_decision"
    action_id: str
    index: int = Field(..., ge=0)


Command = Annotated[
    Union[
        AddAction,
        UpdateAction,
        RemoveAction,
        AddDecision,
        UpdateDecision,
        RemoveDecision,
    ],
    Field(discriminator="kind"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(payload: dict[str, Any]) -> Command:
    """Validate an untyped payload from the recording UI into a command."""
    return _command_adapter.validate_python(payload)
