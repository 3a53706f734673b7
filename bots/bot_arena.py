"""Simple bot arena: play whole games between bots."""

from __future__ import annotations

import argparse
import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from stackclimb.game import GameSession, practice_seats
from stackclimb.rules_schema import RuleSet, load_rules

from .base import BotStrategy
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

logger = logging.getLogger(__name__)

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "greedy": GreedyBot,
    "random": RandomBot,
}

MAX_ACTIONS = 2000


def play_game(session: GameSession, bots: Sequence[BotStrategy], *, max_actions: int = MAX_ACTIONS) -> dict:
    """Deal a game in ``session`` and let ``bots`` (one per seat) play it out."""
    state = session.start(practice_seats(len(bots)))
    seat_bots = {player.id: bot for player, bot in zip(state.players, bots)}
    for player in state.players:
        seat_bots[player.id].on_game_start(state, player.id)

    actions = 0
    while session.has_active_game():
        if actions >= max_actions:
            raise RuntimeError(f"Game did not finish within {max_actions} actions.")
        state = session.state
        assert state is not None
        player_id = state.current_player.id
        move = seat_bots[player_id].choose_play(state, player_id, session.rules)
        if move is None:
            check = session.submit_pass(player_id)
        else:
            check = session.submit_play(player_id, move.cards)
        if not check.valid:
            raise RuntimeError(f"Bot {seat_bots[player_id].name} at {player_id} made an illegal action: {check.error}")
        actions += 1

    assert session.state is not None
    return {"winner": session.state.winner, "actions": actions}


def run_match(
    bots: Sequence[BotStrategy],
    *,
    n_games: int = 10,
    seed: Optional[int] = None,
    rules: Optional[RuleSet] = None,
) -> dict:
    session = GameSession(seed=seed, rules=rules or RuleSet(player_count=len(bots)))
    history: List[dict] = []
    wins: Counter = Counter()
    for idx in range(n_games):
        result = play_game(session, bots)
        wins[result["winner"]] += 1
        history.append(result)
        logger.info(f"Game {idx + 1}/{n_games}: {result['winner']} won after {result['actions']} actions")
    return {"wins": dict(wins), "history": history}


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a bot match.")
    parser.add_argument(
        "--bots",
        default="greedy,random,random,random",
        help="Comma-separated bot names, one per seat.",
    )
    parser.add_argument("--n", type=int, default=10, help="Number of games to play.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--rules", default=None, help="Optional JSON rules file.")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    names = [name.strip() for name in args.bots.split(",") if name.strip()]
    unknown = [name for name in names if name not in BOT_REGISTRY]
    if unknown:
        parser.error(f"Unknown bots: {unknown}. Choose from {sorted(BOT_REGISTRY)}.")

    bots = [BOT_REGISTRY[name]() for name in names]
    rules = load_rules(args.rules) if args.rules else None
    results = run_match(bots, n_games=args.n, seed=args.seed, rules=rules)

    print(f"Wins after {args.n} games:")
    for seat, name in zip(practice_seats(len(bots)), names):
        print(f"  {seat[0]} ({name}): {results['wins'].get(seat[0], 0)}")


if __name__ == "__main__":
    main()
