import threading

import pytest

from stackclimb.deck import find_three_of_spades
from stackclimb.lobby import (
    LobbyError,
    LobbyFull,
    LobbyNotFound,
    LobbyRegistry,
    LobbyStatus,
    NotLobbyLeader,
)
from stackclimb.rules import MoveError
from stackclimb.state import Phase


def full_lobby(registry, seed=1):
    lobby = registry.create("a", "Ann", seed=seed)
    registry.join(lobby.match_id, "b", "Ben")
    registry.join(lobby.match_id, "c", "Cat")
    registry.join(lobby.match_id, "d", "Dan")
    return lobby


def test_creator_leads_and_lobby_fills():
    registry = LobbyRegistry()
    lobby = full_lobby(registry)

    assert lobby.leader_id == "a"
    assert lobby.is_full()
    assert registry.get(lobby.match_id.lower()) is lobby
    with pytest.raises(LobbyFull):
        registry.join(lobby.match_id, "e", "Eve")
    with pytest.raises(LobbyNotFound):
        registry.get("NOPE")


def test_only_leader_starts_a_full_lobby():
    registry = LobbyRegistry()
    lobby = registry.create("a", "Ann")
    registry.join(lobby.match_id, "b", "Ben")
    with pytest.raises(LobbyError):
        lobby.start("a")

    registry.join(lobby.match_id, "c", "Cat")
    registry.join(lobby.match_id, "d", "Dan")
    with pytest.raises(NotLobbyLeader):
        lobby.start("b")

    state = lobby.start("a")
    assert lobby.status is LobbyStatus.IN_GAME
    assert [player.id for player in state.players] == ["a", "b", "c", "d"]
    with pytest.raises(LobbyError):
        lobby.join("e", "Eve")


def test_leaving_hands_leadership_on():
    registry = LobbyRegistry()
    lobby = registry.create("a", "Ann")
    registry.join(lobby.match_id, "b", "Ben")
    lobby.leave("a")
    assert lobby.leader_id == "b"
    assert not lobby.has_player("a")


def test_names_are_validated():
    registry = LobbyRegistry()
    with pytest.raises(LobbyError):
        registry.create("a", "   ")
    lobby = registry.create("a", "Ann")
    with pytest.raises(LobbyError):
        lobby.join("b", "x" * 21)


def test_join_random_prefers_open_lobbies():
    registry = LobbyRegistry()
    first = registry.join_random("a", "Ann")
    second = registry.join_random("b", "Ben")
    assert first is second
    assert len(registry) == 1

    registry.join_random("c", "Cat")
    registry.join_random("d", "Dan")
    other = registry.join_random("e", "Eve")
    assert other is not first
    assert other.leader_id == "e"
    assert len(registry) == 2


def test_actions_require_a_running_game():
    registry = LobbyRegistry()
    lobby = registry.create("a", "Ann")
    assert lobby.snapshot() is None
    with pytest.raises(LobbyError):
        lobby.pass_turn("a")


def test_play_through_lobby_and_snapshot():
    registry = LobbyRegistry()
    lobby = full_lobby(registry)
    state = lobby.start("a")
    opener = state.current_player

    check = lobby.play(opener.id, [find_three_of_spades(opener.hand)])
    assert check.valid

    snapshot = lobby.snapshot()
    assert snapshot["currentTrick"]["plays"][0]["playerId"] == opener.id
    assert snapshot["playedRanks"]["3"] == 1


def test_concurrent_passes_are_applied_one_at_a_time():
    registry = LobbyRegistry()
    lobby = full_lobby(registry, seed=4)
    state = lobby.start("a")
    opener = state.current_player
    lobby.play(opener.id, [find_three_of_spades(opener.hand)])
    next_player = lobby.session.current_player().id

    results = []
    barrier = threading.Barrier(4)

    def attempt():
        barrier.wait()
        results.append(lobby.pass_turn(next_player))

    threads = [threading.Thread(target=attempt) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(1 for result in results if result.valid) == 1
    assert all(result.error is MoveError.NOT_YOUR_TURN for result in results if not result.valid)
    assert lobby.session.state.pass_count == 1


def test_emptied_lobby_is_closed_and_not_rejoined():
    registry = LobbyRegistry()
    abandoned = registry.create("a", "Ann")
    registry.leave(abandoned.match_id, "a")

    assert len(registry) == 0
    with pytest.raises(LobbyNotFound):
        registry.get(abandoned.match_id)

    fresh = registry.join_random("b", "Ben")
    assert fresh is not abandoned
    assert fresh.leader_id == "b"


def test_emptied_lobby_is_taken_over_by_the_next_joiner():
    registry = LobbyRegistry()
    lobby = registry.create("a", "Ann")
    lobby.leave("a")
    assert lobby.is_empty()
    assert lobby not in registry.open_lobbies()

    for player_id, name in [("b", "Ben"), ("c", "Cat"), ("d", "Dan"), ("e", "Eve")]:
        registry.join(lobby.match_id, player_id, name)
    assert lobby.leader_id == "b"
    with pytest.raises(NotLobbyLeader):
        lobby.start("a")
    assert lobby.start("b").phase is Phase.IN_GAME


def test_snapshot_from_a_perspective_hides_other_hands():
    registry = LobbyRegistry()
    lobby = full_lobby(registry)
    state = lobby.start("a")
    opener = state.current_player
    lobby.play(opener.id, [find_three_of_spades(opener.hand)])

    seen = lobby.snapshot(perspective=opener.id)
    for player in seen["players"]:
        if player["id"] == opener.id:
            assert len(player["hand"]) == 12
            assert player["handCount"] == 12
        else:
            assert player["hand"] == []
            assert player["handCount"] == 13

    full = lobby.snapshot()
    assert all(len(player["hand"]) == player["handCount"] for player in full["players"])
