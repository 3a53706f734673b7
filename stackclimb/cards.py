"""Card-related data structures and helpers for the climbing game."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Union


class Suit(Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        return self.value


# Tie-break order used when sorting a hand for display.
SUIT_ORDER: list[Suit] = [Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES]

SUIT_INDEX: dict[Suit, int] = {suit: index for index, suit in enumerate(SUIT_ORDER)}

# 1 is the ace and the lowest rank; 13 is the king.
RANKS: list[int] = list(range(1, 14))
MIN_RANK = 1
MAX_RANK = 13

RANK_NAMES: dict[int, str] = {1: "A", 11: "J", 12: "Q", 13: "K"}

SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

RED = "#e53e3e"
BLACK = "#2d3748"


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Unknown suit: {self.suit!r}")
        if not MIN_RANK <= self.rank <= MAX_RANK:
            raise ValueError(f"Rank {self.rank} outside {MIN_RANK}..{MAX_RANK}.")

    @property
    def id(self) -> str:
        return f"{self.suit.value}-{self.rank}"

    def __str__(self) -> str:
        return card_label(self)


def card_label(card: Card) -> str:
    rank_name = RANK_NAMES.get(card.rank, str(card.rank))
    return f"{rank_name}{SUIT_SYMBOLS[card.suit]}"


def card_color(card: Card) -> str:
    return RED if card.suit in (Suit.HEARTS, Suit.DIAMONDS) else BLACK


def serialize_card(card: Card) -> dict[str, Union[str, int]]:
    return {"suit": card.suit.value, "rank": card.rank, "id": card.id}


def deserialize_card(payload: Mapping[str, Union[str, int]]) -> Card:
    try:
        suit = Suit(str(payload["suit"]).lower())
        rank = int(payload["rank"])
    except KeyError as exc:
        raise ValueError("Card payload missing required keys 'suit' and 'rank'.") from exc
    card = Card(suit, rank)
    if "id" in payload and payload["id"] != card.id:
        raise ValueError(f"Card id {payload['id']!r} does not match {card.id!r}.")
    return card
