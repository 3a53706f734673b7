"""Trick (table stack) representation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .cards import Card


@dataclass(frozen=True)
class TrickPlay:
    player_id: str
    cards: Tuple[Card, ...]
    timestamp: float

    @property
    def rank(self) -> int:
        return self.cards[0].rank


@dataclass(frozen=True)
class Trick:
    """Plays accumulated since the table was last cleared.

    ``set_size`` and ``current_rank`` are 0 until the trick is opened.
    """

    set_size: int = 0
    current_rank: int = 0
    cap_rank: Optional[int] = None
    plays: Tuple[TrickPlay, ...] = ()

    def is_empty(self) -> bool:
        return not self.plays

    def leader(self) -> Optional[str]:
        return self.plays[0].player_id if self.plays else None

    def cards(self) -> Tuple[Card, ...]:
        return tuple(card for play in self.plays for card in play.cards)


def new_trick() -> Trick:
    return Trick()
