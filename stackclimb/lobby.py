"""Multiplayer lobbies with one serialized game session per room."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .cards import Card
from .codec import public_state_dict, state_to_dict
from .game import GameSession, Seat
from .rules import MoveCheck
from .rules_schema import RuleSet
from .state import GameState

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20


class LobbyStatus(Enum):
    WAITING = "WAITING"
    IN_GAME = "IN_GAME"


class LobbyError(RuntimeError):
    """Base class for lobby related errors."""


class LobbyNotFound(LobbyError):
    """Raised when no lobby exists for a match id."""


class LobbyFull(LobbyError):
    """Raised when joining a lobby whose seats are all taken."""


class NotLobbyLeader(LobbyError):
    """Raised when someone other than the leader tries to start the game."""


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise LobbyError("Player name must not be empty.")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise LobbyError(f"Player name must be at most {MAX_NAME_LENGTH} characters.")
    return cleaned


def new_match_id() -> str:
    return uuid.uuid4().hex[:8].upper()


@dataclass
class Lobby:
    """A room of players sharing one game session.

    Every mutation holds the lobby lock, so actions for one room are applied
    strictly one at a time.
    """

    match_id: str
    leader_id: str
    rules: RuleSet = field(default_factory=RuleSet)
    seed: Optional[int] = None
    players: List[Seat] = field(default_factory=list)
    status: LobbyStatus = LobbyStatus.WAITING
    session: GameSession = field(init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.session = GameSession(seed=self.seed, rules=self.rules)

    @property
    def capacity(self) -> int:
        return self.rules.player_count

    def is_full(self) -> bool:
        return len(self.players) >= self.capacity

    def is_empty(self) -> bool:
        return not self.players

    def has_player(self, player_id: str) -> bool:
        return any(seat_id == player_id for seat_id, _ in self.players)

    # Membership --------------------------------------------------------

    def join(self, player_id: str, name: str) -> None:
        name = _clean_name(name)
        with self._lock:
            if self.has_player(player_id):
                return
            if self.status is not LobbyStatus.WAITING:
                raise LobbyError("Game already started.")
            if self.is_full():
                raise LobbyFull(f"Lobby {self.match_id} is full.")
            if not self.players:
                # An emptied lobby is taken over by whoever joins next.
                self.leader_id = player_id
            self.players.append((player_id, name))
        logger.info(f"{player_id} joined lobby {self.match_id}")

    def leave(self, player_id: str) -> None:
        with self._lock:
            if not self.has_player(player_id):
                return
            if self.status is LobbyStatus.IN_GAME:
                raise LobbyError("Cannot leave while a game is in progress.")
            self.players = [seat for seat in self.players if seat[0] != player_id]
            if player_id == self.leader_id and self.players:
                self.leader_id = self.players[0][0]
                logger.info(f"Lobby {self.match_id} leadership passed to {self.leader_id}")
        logger.info(f"{player_id} left lobby {self.match_id}")

    # Game --------------------------------------------------------------

    def start(self, requested_by: str) -> GameState:
        with self._lock:
            if requested_by != self.leader_id:
                raise NotLobbyLeader("Only the lobby leader can start the game.")
            if self.status is not LobbyStatus.WAITING:
                raise LobbyError("Game already started.")
            if not self.is_full():
                raise LobbyError(f"Games require exactly {self.capacity} players.")
            state = self.session.start(list(self.players))
            self.status = LobbyStatus.IN_GAME
        logger.info(f"Lobby {self.match_id} started a game")
        return state

    def play(self, player_id: str, cards: Iterable[Card]) -> MoveCheck:
        with self._lock:
            self._require_game()
            check = self.session.submit_play(player_id, list(cards))
            self._sync_status()
            return check

    def pass_turn(self, player_id: str) -> MoveCheck:
        with self._lock:
            self._require_game()
            check = self.session.submit_pass(player_id)
            self._sync_status()
            return check

    def snapshot(self, perspective: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Encode the current state; with ``perspective`` only that player's hand is included."""
        with self._lock:
            if self.session.state is None:
                return None
            if perspective is None:
                return state_to_dict(self.session.state)
            return public_state_dict(self.session.state, perspective)

    def _require_game(self) -> None:
        if self.status is not LobbyStatus.IN_GAME:
            raise LobbyError("No game in progress in this lobby.")

    def _sync_status(self) -> None:
        # A finished game returns the room to WAITING so the leader can rematch.
        if not self.session.has_active_game():
            self.status = LobbyStatus.WAITING


class LobbyRegistry:
    """In-memory lobby store keyed by match id."""

    def __init__(self, rules: Optional[RuleSet] = None) -> None:
        self.rules = rules or RuleSet()
        self._lobbies: Dict[str, Lobby] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._lobbies)

    def create(self, leader_id: str, name: str, *, seed: Optional[int] = None) -> Lobby:
        name = _clean_name(name)
        with self._lock:
            match_id = new_match_id()
            while match_id in self._lobbies:
                match_id = new_match_id()
            lobby = Lobby(match_id=match_id, leader_id=leader_id, rules=self.rules, seed=seed)
            self._lobbies[match_id] = lobby
        lobby.join(leader_id, name)
        logger.info(f"{leader_id} created lobby {match_id}")
        return lobby

    def get(self, match_id: str) -> Lobby:
        with self._lock:
            lobby = self._lobbies.get(match_id.upper())
        if lobby is None:
            raise LobbyNotFound(f"No lobby with match id {match_id!r}.")
        return lobby

    def join(self, match_id: str, player_id: str, name: str) -> Lobby:
        lobby = self.get(match_id)
        lobby.join(player_id, name)
        return lobby

    def join_random(self, player_id: str, name: str) -> Lobby:
        """Join the first open lobby, creating one when none is available."""
        name = _clean_name(name)
        for lobby in self.open_lobbies():
            try:
                lobby.join(player_id, name)
            except LobbyError:
                # Filled or started since it was listed.
                continue
            return lobby
        return self.create(player_id, name)

    def leave(self, match_id: str, player_id: str) -> None:
        """Remove a player, dropping the lobby once nobody is left in it."""
        lobby = self.get(match_id)
        lobby.leave(player_id)
        if lobby.is_empty():
            self.remove(lobby.match_id)
            logger.info(f"Lobby {lobby.match_id} closed")

    def remove(self, match_id: str) -> None:
        with self._lock:
            self._lobbies.pop(match_id.upper(), None)

    def open_lobbies(self) -> List[Lobby]:
        with self._lock:
            return [
                lobby
                for lobby in self._lobbies.values()
                if lobby.status is LobbyStatus.WAITING and not lobby.is_full() and not lobby.is_empty()
            ]
