"""High-level game orchestration: the session controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import Card
from .deck import create_deck, deal_cards, find_card, sort_hand
from .rules import Move, MoveCheck, apply_move, apply_pass, is_valid_move, is_valid_pass
from .rules_schema import RuleSet
from .state import GameState, Player, initial_state

logger = logging.getLogger(__name__)

HUMAN_PLAYER_ID = "player-0"

Seat = Tuple[str, str]


class SessionError(RuntimeError):
    """Raised when the session API is used out of order."""


def practice_seats(player_count: int = 4) -> List[Seat]:
    """Seat the local player first, followed by AI opponents."""
    seats: List[Seat] = [(HUMAN_PLAYER_ID, "You")]
    seats.extend((f"player-{index}", f"AI {index}") for index in range(1, player_count))
    return seats


@dataclass(frozen=True)
class ActionRecord:
    order: int
    player_id: str
    kind: str
    cards: Tuple[Card, ...] = ()


@dataclass
class GameSession:
    """Own the authoritative state for one game and apply actions to it."""

    seed: Optional[int] = None
    rules: RuleSet = field(default_factory=RuleSet)
    rng: Random = field(init=False)
    state: Optional[GameState] = field(default=None, init=False)
    history: List[ActionRecord] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.rng = Random(self.seed)

    # Lifecycle ---------------------------------------------------------

    def start(self, players: Sequence[Seat], *, deck: Optional[Sequence[Card]] = None) -> GameState:
        """Deal a fresh deck to ``players`` (``(player_id, name)`` pairs)."""
        if self.state is not None and not self.state.is_finished:
            raise SessionError("A game is already in progress.")
        if len(players) != self.rules.player_count:
            raise SessionError(
                f"Expected {self.rules.player_count} players, got {len(players)}."
            )
        player_ids = [player_id for player_id, _ in players]
        if len(set(player_ids)) != len(player_ids):
            raise SessionError("Player ids must be unique.")

        cards = list(deck) if deck is not None else create_deck(self.rng)
        hands = deal_cards(cards, len(players))
        seated = tuple(
            Player(id=player_id, name=name, hand=tuple(sort_hand(hand)))
            for (player_id, name), hand in zip(players, hands)
        )

        opening_suit = self.rules.opening_card_suit
        opener = 0
        for index, player in enumerate(seated):
            if find_card(player.hand, self.rules.opening_rank, opening_suit) is not None:
                opener = index
                break

        self.state = initial_state(seated, current_player_index=opener)
        self.history = []
        logger.info(f"Started game for {player_ids}; {seated[opener].id} leads")
        return self.state

    def start_practice(self) -> GameState:
        return self.start(practice_seats(self.rules.player_count))

    # Actions -----------------------------------------------------------

    def submit_play(self, player_id: str, cards: Iterable[Card]) -> MoveCheck:
        state = self._require_state()
        move = Move.of(cards)
        check = is_valid_move(state, player_id, move, rules=self.rules)
        if not check.valid:
            logger.info(f"Rejected play by {player_id}: {check.error}")
            return check

        new_state = apply_move(state, player_id, move, rules=self.rules)
        self._commit(new_state, ActionRecord(len(self.history) + 1, player_id, "play", move.cards))
        logger.debug(f"{player_id} played {[str(card) for card in move.cards]}")
        if new_state.current_trick.is_empty():
            logger.info(f"Table cleared by {player_id}")
        if new_state.is_finished:
            logger.info(f"Game finished; winner {new_state.winner}")
        return check

    def submit_pass(self, player_id: str) -> MoveCheck:
        state = self._require_state()
        check = is_valid_pass(state, player_id, rules=self.rules)
        if not check.valid:
            logger.info(f"Rejected pass by {player_id}: {check.error}")
            return check

        new_state = apply_pass(state, rules=self.rules)
        self._commit(new_state, ActionRecord(len(self.history) + 1, player_id, "pass"))
        logger.debug(f"{player_id} passed")
        if new_state.current_trick.is_empty() and not state.current_trick.is_empty():
            logger.info(f"Table cleared after passes; {new_state.current_player.id} leads")
        return check

    # Queries -----------------------------------------------------------

    def current_player(self) -> Player:
        return self._require_state().current_player

    def get_player(self, player_id: str) -> Optional[Player]:
        return self._require_state().get_player(player_id)

    def human_player(self) -> Optional[Player]:
        return self.get_player(HUMAN_PLAYER_ID)

    def has_active_game(self) -> bool:
        return self.state is not None and not self.state.is_finished

    # Helpers -----------------------------------------------------------

    def _commit(self, new_state: GameState, record: ActionRecord) -> None:
        self.state = new_state
        self.history.append(record)

    def _require_state(self) -> GameState:
        if self.state is None:
            raise SessionError("No active game.")
        return self.state
