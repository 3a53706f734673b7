"""Common bot strategy interfaces."""

from __future__ import annotations

from typing import Optional

from stackclimb.mechanics import legal_moves
from stackclimb.rules import Move
from stackclimb.rules_schema import RuleSet
from stackclimb.state import GameState


class BotStrategy:
    """Base class for bot policies."""

    name: str = "BaseBot"

    def on_game_start(self, state: GameState, player_id: str) -> None:
        """Optional hook invoked once the cards are dealt."""
        return None

    def choose_play(self, state: GameState, player_id: str, rules: RuleSet) -> Optional[Move]:
        """Return the move to submit, or None to pass."""
        legal = legal_moves(state, player_id, rules=rules)
        return legal[0] if legal else None
