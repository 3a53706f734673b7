"""Move validation and state transitions.

Everything here is pure: validators only inspect a ``GameState`` and the
transitions return a new one. Callers validate first and only apply moves
that passed; the transitions do not re-check legality.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

from .cards import MAX_RANK, Card, Suit
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import GameState, Phase
from .trick import Trick, TrickPlay, new_trick

# Copies of each rank in the deck.
RANK_COPIES = len(Suit)


class MoveError(Enum):
    GAME_NOT_IN_PROGRESS = "GameNotInProgress"
    PLAYER_NOT_FOUND = "PlayerNotFound"
    NOT_YOUR_TURN = "NotYourTurn"
    EMPTY_MOVE = "EmptyMove"
    CARD_NOT_IN_HAND = "CardNotInHand"
    MIXED_RANKS = "MixedRanks"
    MUST_LEAD_THREE_OF_SPADES = "MustLeadThreeOfSpades"
    WRONG_SET_SIZE = "WrongSetSize"
    ABOVE_CAP = "AboveCap"
    BELOW_CURRENT_RANK = "BelowCurrentRank"
    CANNOT_PASS_ON_LEAD = "CannotPassOnLead"

    def __str__(self) -> str:
        return self.value


ERROR_MESSAGES: dict[MoveError, str] = {
    MoveError.GAME_NOT_IN_PROGRESS: "The game is not in progress.",
    MoveError.PLAYER_NOT_FOUND: "Player not found.",
    MoveError.NOT_YOUR_TURN: "Not your turn.",
    MoveError.EMPTY_MOVE: "Must play at least one card.",
    MoveError.CARD_NOT_IN_HAND: "Card not in hand.",
    MoveError.MIXED_RANKS: "All cards must have the same rank.",
    MoveError.MUST_LEAD_THREE_OF_SPADES: "First play must include the opening card.",
    MoveError.WRONG_SET_SIZE: "Set size does not match the trick.",
    MoveError.ABOVE_CAP: "Rank is above the trick's cap.",
    MoveError.BELOW_CURRENT_RANK: "Rank is below the current rank.",
    MoveError.CANNOT_PASS_ON_LEAD: "Cannot pass before the trick is opened.",
}


@dataclass(frozen=True)
class MoveCheck:
    valid: bool
    error: Optional[MoveError] = None

    @property
    def message(self) -> str:
        return "" if self.error is None else ERROR_MESSAGES[self.error]


VALID = MoveCheck(valid=True)


def _reject(error: MoveError) -> MoveCheck:
    return MoveCheck(valid=False, error=error)


@dataclass(frozen=True)
class Move:
    cards: Tuple[Card, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "cards", tuple(self.cards))

    @classmethod
    def of(cls, cards: Iterable[Card]) -> "Move":
        return cls(tuple(cards))

    @property
    def rank(self) -> Optional[int]:
        return self.cards[0].rank if self.cards else None


def _check_turn(state: GameState, player_id: str) -> Optional[MoveCheck]:
    if state.phase is not Phase.IN_GAME:
        return _reject(MoveError.GAME_NOT_IN_PROGRESS)
    if state.get_player(player_id) is None:
        return _reject(MoveError.PLAYER_NOT_FOUND)
    if state.current_player.id != player_id:
        return _reject(MoveError.NOT_YOUR_TURN)
    return None


def is_valid_move(
    state: GameState,
    player_id: str,
    move: Move,
    *,
    rules: Optional[RuleSet] = None,
) -> MoveCheck:
    """Check a proposed play, stopping at the first failed rule."""
    rules = rules or DEFAULT_RULES
    turn_error = _check_turn(state, player_id)
    if turn_error is not None:
        return turn_error

    cards = move.cards
    if not cards:
        return _reject(MoveError.EMPTY_MOVE)

    player = state.get_player(player_id)
    assert player is not None
    if len({card.id for card in cards}) != len(cards):
        # The hand holds one copy of each card.
        return _reject(MoveError.CARD_NOT_IN_HAND)
    if not all(player.holds(card) for card in cards):
        return _reject(MoveError.CARD_NOT_IN_HAND)

    rank = cards[0].rank
    if any(card.rank != rank for card in cards):
        return _reject(MoveError.MIXED_RANKS)

    trick = state.current_trick
    if trick.is_empty():
        opening_card = Card(rules.opening_card_suit, rules.opening_rank)
        # An undealt opening card lifts the opening requirement.
        if state.played(rules.opening_rank) == 0 and any(p.holds(opening_card) for p in state.players):
            if opening_card not in cards:
                return _reject(MoveError.MUST_LEAD_THREE_OF_SPADES)
        return VALID

    if len(cards) != trick.set_size:
        return _reject(MoveError.WRONG_SET_SIZE)

    cap = trick.cap_rank if trick.cap_rank is not None else MAX_RANK
    if rank > cap:
        return _reject(MoveError.ABOVE_CAP)
    if rank < trick.current_rank:
        return _reject(MoveError.BELOW_CURRENT_RANK)

    return VALID


def is_valid_pass(
    state: GameState,
    player_id: str,
    *,
    rules: Optional[RuleSet] = None,
) -> MoveCheck:
    """Check that ``player_id`` may pass; unknown players are simply not on turn."""
    rules = rules or DEFAULT_RULES
    if state.phase is not Phase.IN_GAME:
        return _reject(MoveError.GAME_NOT_IN_PROGRESS)
    if state.current_player.id != player_id:
        return _reject(MoveError.NOT_YOUR_TURN)
    if state.current_trick.is_empty() and not rules.allow_pass_on_lead:
        return _reject(MoveError.CANNOT_PASS_ON_LEAD)
    return VALID


def apply_move(
    state: GameState,
    player_id: str,
    move: Move,
    *,
    rules: Optional[RuleSet] = None,
    timestamp: Optional[float] = None,
) -> GameState:
    """Return the state after ``player_id`` plays ``move``.

    The move must already have passed ``is_valid_move``.
    """
    rules = rules or DEFAULT_RULES
    cards = tuple(move.cards)
    rank = cards[0].rank
    actor = state.player_index(player_id)
    assert actor is not None

    players = list(state.players)
    players[actor] = players[actor].without(cards)

    trick = state.current_trick
    play = TrickPlay(
        player_id=player_id,
        cards=cards,
        timestamp=time.time() if timestamp is None else timestamp,
    )
    trick = Trick(
        set_size=trick.set_size if trick.plays else len(cards),
        current_rank=rank,
        cap_rank=trick.cap_rank,
        plays=trick.plays + (play,),
    )

    played_ranks = dict(state.played_ranks)
    played_ranks[rank] = played_ranks.get(rank, 0) + len(cards)
    completes_rank = played_ranks[rank] == RANK_COPIES

    cleared = False
    if rank == rules.clear_rank:
        trick = new_trick()
        cleared = True
    elif rank == rules.cap_rank and not (completes_rank and rules.four_of_a_kind_beats_cap):
        trick = replace(trick, cap_rank=rules.cap_rank)
    elif completes_rank:
        trick = new_trick()
        cleared = True

    next_index = (state.current_player_index + 1) % len(players)
    if cleared and rules.clearing_player_leads:
        next_index = actor

    phase = state.phase
    winner = state.winner
    if not players[actor].hand:
        phase = Phase.FINISHED
        winner = player_id

    return GameState(
        players=tuple(players),
        current_player_index=next_index,
        current_trick=trick,
        played_ranks=played_ranks,
        last_valid_player=player_id,
        phase=phase,
        pass_count=0,
        winner=winner,
    )


def apply_pass(state: GameState, *, rules: Optional[RuleSet] = None) -> GameState:
    """Return the state after the seat holding the turn passes."""
    rules = rules or DEFAULT_RULES
    pass_count = state.pass_count + 1

    if pass_count >= rules.passes_to_clear:
        next_index = state.current_player_index
        if state.last_valid_player is not None:
            lead = state.player_index(state.last_valid_player)
            if lead is not None:
                next_index = lead
        return replace(
            state,
            current_trick=new_trick(),
            pass_count=0,
            current_player_index=next_index,
        )

    return replace(
        state,
        pass_count=pass_count,
        current_player_index=(state.current_player_index + 1) % len(state.players),
    )
