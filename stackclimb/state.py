"""Game state management for the climbing game."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .cards import RANKS, Card
from .trick import Trick, new_trick


class Phase(Enum):
    WAITING = "WAITING"
    IN_GAME = "IN_GAME"
    FINISHED = "FINISHED"


def empty_played_ranks() -> Dict[int, int]:
    return {rank: 0 for rank in RANKS}


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    hand: Tuple[Card, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "hand", tuple(self.hand))

    @property
    def hand_count(self) -> int:
        return len(self.hand)

    def holds(self, card: Card) -> bool:
        return any(held.id == card.id for held in self.hand)

    def without(self, cards: Iterable[Card]) -> "Player":
        """Return a copy of the player with ``cards`` removed by id."""
        removed = {card.id for card in cards}
        return Player(
            id=self.id,
            name=self.name,
            hand=tuple(card for card in self.hand if card.id not in removed),
        )


@dataclass(frozen=True)
class GameState:
    """Root aggregate for one game.

    Instances are never mutated; the transitions in ``rules`` build a new
    state field by field. ``played_ranks`` counts cards of each rank played
    since the deal. States compare by value but are not hashable, because
    ``played_ranks`` is a dict; key caches on ``codec.dumps(state)`` instead.
    """

    __hash__ = None  # type: ignore[assignment]

    players: Tuple[Player, ...]
    current_player_index: int = 0
    current_trick: Trick = field(default_factory=new_trick)
    played_ranks: Dict[int, int] = field(default_factory=empty_played_ranks)
    last_valid_player: Optional[str] = None
    phase: Phase = Phase.WAITING
    pass_count: int = 0
    winner: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "players", tuple(self.players))
        counts = empty_played_ranks()
        counts.update(self.played_ranks)
        object.__setattr__(self, "played_ranks", counts)
        if not self.players:
            raise ValueError("GameState requires at least one player.")
        if not 0 <= self.current_player_index < len(self.players):
            raise ValueError(f"Player index {self.current_player_index} out of range.")

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def player_index(self, player_id: str) -> Optional[int]:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None

    def get_player(self, player_id: str) -> Optional[Player]:
        index = self.player_index(player_id)
        return None if index is None else self.players[index]

    def played(self, rank: int) -> int:
        return self.played_ranks.get(rank, 0)

    def cards_in_hands(self) -> int:
        return sum(player.hand_count for player in self.players)

    def cards_played(self) -> int:
        return sum(self.played_ranks.values())

    @property
    def is_finished(self) -> bool:
        return self.phase is Phase.FINISHED


def initial_state(players: Sequence[Player], *, current_player_index: int = 0) -> GameState:
    """Return a fresh in-game state for already dealt ``players``."""
    return GameState(
        players=tuple(players),
        current_player_index=current_player_index,
        phase=Phase.IN_GAME,
    )
