"""Baseline greedy bot."""

from __future__ import annotations

from typing import List, Optional

from stackclimb.mechanics import legal_moves
from stackclimb.rules import Move
from stackclimb.rules_schema import RuleSet
from stackclimb.state import GameState

from .base import BotStrategy


def _is_special(move: Move, rules: RuleSet) -> bool:
    return move.rank in (rules.clear_rank, rules.cap_rank)


class GreedyBot(BotStrategy):
    """Shed the lowest rank it can, keeping 2s and 8s back while it has a choice."""

    name = "Greedy"

    def choose_play(self, state: GameState, player_id: str, rules: RuleSet) -> Optional[Move]:
        legal = legal_moves(state, player_id, rules=rules)
        if not legal:
            return None
        plain: List[Move] = [move for move in legal if not _is_special(move, rules)]
        candidates = plain or legal
        lowest = min(move.rank for move in candidates)
        # On lead every set size is legal; dump as many cards of the rank as possible.
        return max(
            (move for move in candidates if move.rank == lowest),
            key=lambda move: len(move.cards),
        )
