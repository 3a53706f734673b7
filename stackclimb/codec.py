"""Structural (JSON-friendly) encoding of game state."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping

from .cards import deserialize_card, serialize_card
from .state import GameState, Phase, Player
from .trick import Trick, TrickPlay


def player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "hand": [serialize_card(card) for card in player.hand],
        "handCount": player.hand_count,
    }


def player_from_dict(payload: Mapping[str, Any]) -> Player:
    player = Player(
        id=str(payload["id"]),
        name=str(payload["name"]),
        hand=tuple(deserialize_card(card) for card in payload.get("hand", [])),
    )
    hand_count = payload.get("handCount", player.hand_count)
    if hand_count != player.hand_count:
        raise ValueError(
            f"handCount {hand_count} does not match {player.hand_count} cards for {player.id}."
        )
    return player


def trick_to_dict(trick: Trick) -> Dict[str, Any]:
    return {
        "setSize": trick.set_size,
        "currentRank": trick.current_rank,
        "capRank": trick.cap_rank,
        "plays": [
            {
                "playerId": play.player_id,
                "cards": [serialize_card(card) for card in play.cards],
                "timestamp": play.timestamp,
            }
            for play in trick.plays
        ],
    }


def trick_from_dict(payload: Mapping[str, Any]) -> Trick:
    cap_rank = payload.get("capRank")
    return Trick(
        set_size=int(payload.get("setSize", 0)),
        current_rank=int(payload.get("currentRank", 0)),
        cap_rank=None if cap_rank is None else int(cap_rank),
        plays=tuple(
            TrickPlay(
                player_id=str(play["playerId"]),
                cards=tuple(deserialize_card(card) for card in play["cards"]),
                timestamp=float(play["timestamp"]),
            )
            for play in payload.get("plays", [])
        ),
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "players": [player_to_dict(player) for player in state.players],
        "currentPlayerIndex": state.current_player_index,
        "currentTrick": trick_to_dict(state.current_trick),
        "playedRanks": {str(rank): count for rank, count in sorted(state.played_ranks.items())},
        "lastValidPlayer": state.last_valid_player,
        "gamePhase": state.phase.value,
        "passCount": state.pass_count,
        "winner": state.winner,
    }


def public_state_dict(state: GameState, perspective: str) -> Dict[str, Any]:
    """Encode ``state`` as seen by ``perspective``: other hands are blanked, counts kept."""
    payload = state_to_dict(state)
    for player in payload["players"]:
        if player["id"] != perspective:
            player["hand"] = []
    return payload


def state_from_dict(payload: Mapping[str, Any]) -> GameState:
    try:
        players = tuple(player_from_dict(player) for player in payload["players"])
        phase = Phase(payload["gamePhase"])
    except KeyError as exc:
        raise ValueError(f"Game state payload missing key {exc}.") from exc
    return GameState(
        players=players,
        current_player_index=int(payload.get("currentPlayerIndex", 0)),
        current_trick=trick_from_dict(payload.get("currentTrick", {})),
        played_ranks={int(rank): int(count) for rank, count in payload.get("playedRanks", {}).items()},
        last_valid_player=payload.get("lastValidPlayer"),
        phase=phase,
        pass_count=int(payload.get("passCount", 0)),
        winner=payload.get("winner"),
    )


def dumps(state: GameState) -> str:
    return json.dumps(state_to_dict(state))


def loads(text: str) -> GameState:
    return state_from_dict(json.loads(text))
