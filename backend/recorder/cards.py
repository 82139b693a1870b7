"""Card, rank and suit value types for recorded hole cards."""

from __future__ import annotations

from enum import IntEnum, Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class Suit(str, Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"


class Rank(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


RANK_SYMBOLS = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

_SUIT_LETTERS = {
    "h": Suit.HEARTS,
    "d": Suit.DIAMONDS,
    "c": Suit.CLUBS,
    "s": Suit.SPADES,
}

_RANK_BY_SYMBOL = {v: k for k, v in RANK_SYMBOLS.items()}
_RANK_BY_SYMBOL["T"] = Rank.TEN


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    rank: Rank
    suit: Suit

    @model_validator(mode="before")
    @classmethod
    def _accept_symbols(cls, data: Any) -> Any:
        # Accepts "Ah" and {"rank": "A", "suit": "hearts"} alongside enum values
        if isinstance(data, str):
            parsed = cls.from_str(data)
            return {"rank": parsed.rank, "suit": parsed.suit}
        if isinstance(data, dict):
            data = dict(data)
            rank = data.get("rank")
            if isinstance(rank, str) and rank.upper() in _RANK_BY_SYMBOL:
                data["rank"] = _RANK_BY_SYMBOL[rank.upper()]
            suit = data.get("suit")
            if isinstance(suit, str) and suit.lower() in _SUIT_LETTERS:
                data["suit"] = _SUIT_LETTERS[suit.lower()]
        return data

    def __str__(self) -> str:
        return f"{RANK_SYMBOLS[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        return {"rank": RANK_SYMBOLS[self.rank], "suit": self.suit.value}

    @classmethod
    def from_dict(cls, data: dict) -> Card:
        return cls.model_validate(data)

    @classmethod
    def from_str(cls, s: str) -> Card:
        """Parse 'Ah', 'Ts', '10s', '2c' etc."""
        s = s.strip()
        if len(s) < 2:
            raise ValueError(f"Invalid card: {s!r}")
        rank_part = s[:-1].upper()
        suit_char = s[-1].lower()
        if rank_part not in _RANK_BY_SYMBOL or suit_char not in _SUIT_LETTERS:
            raise ValueError(f"Invalid card: {s!r}")
        return cls(rank=_RANK_BY_SYMBOL[rank_part], suit=_SUIT_LETTERS[suit_char])
