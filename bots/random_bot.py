"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional

from stackclimb.mechanics import legal_moves
from stackclimb.rules import Move, is_valid_pass
from stackclimb.rules_schema import RuleSet
from stackclimb.state import GameState

from .base import BotStrategy


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None, pass_probability: float = 0.2) -> None:
        self._rng = random.Random(seed)
        self.pass_probability = pass_probability

    def choose_play(self, state: GameState, player_id: str, rules: RuleSet) -> Optional[Move]:
        legal = legal_moves(state, player_id, rules=rules)
        if not legal:
            return None
        can_pass = is_valid_pass(state, player_id, rules=rules).valid
        if can_pass and self._rng.random() < self.pass_probability:
            return None
        return self._rng.choice(legal)
