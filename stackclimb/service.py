"""Convenience service layer for UI and bot consumers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .cards import card_label, deserialize_card, serialize_card
from .deck import sort_hand
from .game import GameSession, Seat
from .mechanics import legal_moves
from .rules import MoveCheck
from .state import GameState


@dataclass
class TrickPlayView:
    player: str
    player_name: str
    cards: list[dict]
    labels: list[str]


@dataclass
class TrickView:
    set_size: int
    current_rank: int
    cap_rank: Optional[int]
    plays: list[TrickPlayView]


@dataclass
class PlayerView:
    id: str
    name: str
    hand_count: int
    is_current: bool


@dataclass
class TableView:
    phase: str
    current_player: str
    players: list[PlayerView]
    hand: list[dict]
    hand_labels: list[str]
    legal_moves: list[list[dict]]
    legal_move_labels: list[str]
    trick: Optional[TrickView]
    pass_count: int
    last_valid_player: Optional[str]
    winner: Optional[str]


@dataclass
class ActionResult:
    ok: bool
    error: Optional[str]
    message: str


class TableService:
    """Facade around GameSession that only reveals the viewer's own hand."""

    def __init__(self, session: Optional[GameSession] = None) -> None:
        self.session = session or GameSession()

    # Session lifecycle -------------------------------------------------

    def start_game(self, players: Sequence[Seat]) -> TableView:
        self.session.start(players)
        return self.get_table_view(players[0][0])

    def start_practice(self) -> TableView:
        state = self.session.start_practice()
        return self.get_table_view(state.players[0].id)

    # Actions -----------------------------------------------------------

    def play_cards(self, player: str, card_payloads: Iterable[dict]) -> ActionResult:
        cards = [deserialize_card(payload) for payload in card_payloads]
        return self._result(self.session.submit_play(player, cards))

    def pass_turn(self, player: str) -> ActionResult:
        return self._result(self.session.submit_pass(player))

    # Views -------------------------------------------------------------

    def get_table_view(self, perspective: str) -> TableView:
        state = self._require_state()
        viewer = state.get_player(perspective)
        own_hand = sort_hand(viewer.hand) if viewer is not None else []

        moves = []
        if viewer is not None and state.current_player.id == perspective and not state.is_finished:
            moves = legal_moves(state, perspective, rules=self.session.rules)

        return TableView(
            phase=state.phase.value,
            current_player=state.current_player.id,
            players=[
                PlayerView(
                    id=player.id,
                    name=player.name,
                    hand_count=player.hand_count,
                    is_current=index == state.current_player_index,
                )
                for index, player in enumerate(state.players)
            ],
            hand=[serialize_card(card) for card in own_hand],
            hand_labels=[card_label(card) for card in own_hand],
            legal_moves=[[serialize_card(card) for card in move.cards] for move in moves],
            legal_move_labels=[" ".join(card_label(card) for card in move.cards) for move in moves],
            trick=self._trick_view(state),
            pass_count=state.pass_count,
            last_valid_player=state.last_valid_player,
            winner=state.winner,
        )

    # Helpers -----------------------------------------------------------

    def _trick_view(self, state: GameState) -> Optional[TrickView]:
        trick = state.current_trick
        if trick.is_empty():
            return None
        names = {player.id: player.name for player in state.players}
        return TrickView(
            set_size=trick.set_size,
            current_rank=trick.current_rank,
            cap_rank=trick.cap_rank,
            plays=[
                TrickPlayView(
                    player=play.player_id,
                    player_name=names.get(play.player_id, play.player_id),
                    cards=[serialize_card(card) for card in play.cards],
                    labels=[card_label(card) for card in play.cards],
                )
                for play in trick.plays
            ],
        )

    def _result(self, check: MoveCheck) -> ActionResult:
        return ActionResult(
            ok=check.valid,
            error=None if check.error is None else check.error.value,
            message=check.message,
        )

    def _require_state(self) -> GameState:
        if self.session.state is None:
            raise RuntimeError("No active game.")
        return self.session.state
