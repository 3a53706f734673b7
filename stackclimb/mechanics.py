"""Legal move generation."""

from __future__ import annotations

from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Optional

from .cards import Card
from .deck import sort_hand
from .rules import Move, is_valid_move
from .rules_schema import RuleSet
from .state import GameState


def legal_moves(state: GameState, player_id: str, *, rules: Optional[RuleSet] = None) -> List[Move]:
    """Return every play ``player_id`` could legally submit right now.

    Moves are ordered by rank, then set size, then hand order. An empty list
    means the player can only pass (or it is not their turn).
    """
    player = state.get_player(player_id)
    if player is None:
        return []

    by_rank: Dict[int, List[Card]] = defaultdict(list)
    for card in sort_hand(player.hand):
        by_rank[card.rank].append(card)

    trick = state.current_trick
    moves: List[Move] = []
    for rank in sorted(by_rank):
        cards = by_rank[rank]
        sizes = range(1, len(cards) + 1) if trick.is_empty() else (trick.set_size,)
        for size in sizes:
            if size > len(cards):
                continue
            for combo in combinations(cards, size):
                move = Move(combo)
                if is_valid_move(state, player_id, move, rules=rules).valid:
                    moves.append(move)
    return moves
