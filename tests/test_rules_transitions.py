from random import Random

import pytest

from stackclimb.cards import Card, Suit
from stackclimb.deck import create_deck, deal_cards
from stackclimb.mechanics import legal_moves
from stackclimb.rules import Move, apply_move, apply_pass, is_valid_move, is_valid_pass
from stackclimb.rules_schema import RuleSet
from stackclimb.state import GameState, Phase, Player, initial_state
from stackclimb.trick import Trick, TrickPlay

THREE_OF_SPADES = Card(Suit.SPADES, 3)


def make_state(hands, *, current=0, trick=None, played=None, last=None, pass_count=0):
    players = tuple(
        Player(id=f"p{index}", name=f"Player {index}", hand=tuple(hand))
        for index, hand in enumerate(hands)
    )
    return GameState(
        players=players,
        current_player_index=current,
        current_trick=trick or Trick(),
        played_ranks=played or {},
        last_valid_player=last,
        phase=Phase.IN_GAME,
        pass_count=pass_count,
    )


def open_trick(player_id, cards, *, cap_rank=None):
    return Trick(
        set_size=len(cards),
        current_rank=cards[0].rank,
        cap_rank=cap_rank,
        plays=(TrickPlay(player_id=player_id, cards=tuple(cards), timestamp=0.0),),
    )


def four_seats(first_hand, *, filler_rank=13):
    """Seat p0 with ``first_hand`` and give everyone else a spare card."""
    return [
        first_hand,
        [Card(Suit.HEARTS, filler_rank)],
        [Card(Suit.DIAMONDS, filler_rank)],
        [Card(Suit.CLUBS, filler_rank)],
    ]


def test_apply_move_updates_hand_trick_and_counters():
    hand = [THREE_OF_SPADES, Card(Suit.HEARTS, 3), Card(Suit.HEARTS, 10)]
    state = make_state(four_seats(hand), pass_count=2)
    move = Move(hand[:2])

    after = apply_move(state, "p0", move, timestamp=42.0)

    assert after.players[0].hand == (Card(Suit.HEARTS, 10),)
    assert after.players[0].hand_count == 1
    assert after.current_trick.set_size == 2
    assert after.current_trick.current_rank == 3
    assert after.current_trick.plays == (TrickPlay("p0", tuple(hand[:2]), 42.0),)
    assert after.played_ranks[3] == 2
    assert after.last_valid_player == "p0"
    assert after.pass_count == 0
    assert after.current_player_index == 1

    # The prior state is untouched.
    assert state.players[0].hand == tuple(hand)
    assert state.current_trick.is_empty()
    assert state.played_ranks[3] == 0
    assert state.pass_count == 2


def test_set_size_is_fixed_by_the_first_play():
    trick = open_trick("p0", [Card(Suit.HEARTS, 5), Card(Suit.CLUBS, 5)])
    pair = [Card(Suit.HEARTS, 6), Card(Suit.CLUBS, 6)]
    state = make_state([[Card(Suit.SPADES, 12)], pair + [Card(Suit.SPADES, 1)], [], []], current=1, trick=trick, played={3: 1, 5: 2})

    after = apply_move(state, "p1", Move(pair), timestamp=1.0)
    assert after.current_trick.set_size == 2
    assert after.current_trick.current_rank == 6
    assert len(after.current_trick.plays) == 2


def test_card_conservation_through_a_whole_game():
    rng = Random(11)
    hands = deal_cards(create_deck(rng), 4)
    players = [Player(id=f"p{index}", name=f"P{index}", hand=tuple(hand)) for index, hand in enumerate(hands)]
    opener = next(index for index, hand in enumerate(hands) if THREE_OF_SPADES in hand)
    state = initial_state(players, current_player_index=opener)

    for _ in range(2000):
        if state.is_finished:
            break
        player_id = state.current_player.id
        moves = legal_moves(state, player_id)
        if moves and (not is_valid_pass(state, player_id).valid or rng.random() < 0.7):
            move = rng.choice(moves)
            assert is_valid_move(state, player_id, move).valid
            state = apply_move(state, player_id, move)
            assert state.cards_in_hands() + state.cards_played() == 52
        else:
            state = apply_pass(state)
        assert 0 <= state.current_player_index < len(state.players)
        assert 0 <= state.pass_count < 3
        assert all(player.hand_count == len(player.hand) for player in state.players)

    assert state.is_finished
    assert state.winner is not None
    assert state.get_player(state.winner).hand == ()


def test_two_clears_the_trick_even_when_capped():
    two = Card(Suit.HEARTS, 2)
    trick = open_trick("p3", [Card(Suit.CLUBS, 8)], cap_rank=8)
    state = make_state(four_seats([two, Card(Suit.HEARTS, 11)]), trick=trick, played={3: 1, 8: 1})

    after = apply_move(state, "p0", Move([two]), timestamp=1.0)

    assert after.current_trick.plays == ()
    assert after.current_trick.set_size == 0
    assert after.current_trick.current_rank == 0
    assert after.current_trick.cap_rank is None
    assert after.last_valid_player == "p0"
    assert after.played_ranks[2] == 1


def test_leading_a_two_clears():
    twos = [Card(Suit.HEARTS, 2), Card(Suit.CLUBS, 2)]
    state = make_state(four_seats(twos + [Card(Suit.HEARTS, 11)]), played={3: 1})
    assert is_valid_move(state, "p0", Move(twos)).valid

    after = apply_move(state, "p0", Move(twos))
    assert after.current_trick.is_empty()
    assert after.current_player_index == 1


def test_fourth_card_of_a_rank_clears_the_trick():
    seven = Card(Suit.SPADES, 7)
    trick = open_trick("p3", [Card(Suit.CLUBS, 7)])
    state = make_state(four_seats([seven, Card(Suit.HEARTS, 11)]), trick=trick, played={3: 1, 7: 3})
    assert is_valid_move(state, "p0", Move([seven])).valid

    after = apply_move(state, "p0", Move([seven]))
    assert after.current_trick.is_empty()
    assert after.last_valid_player == "p0"
    assert after.played_ranks[7] == 4


def test_fourth_card_inside_a_set_clears_the_trick():
    sevens = [Card(Suit.HEARTS, 7), Card(Suit.SPADES, 7)]
    trick = open_trick("p3", [Card(Suit.CLUBS, 7), Card(Suit.DIAMONDS, 7)])
    state = make_state(four_seats(sevens + [Card(Suit.HEARTS, 11)]), trick=trick, played={3: 1, 7: 2})

    after = apply_move(state, "p0", Move(sevens))
    assert after.current_trick.is_empty()


def test_fourth_eight_caps_by_default():
    eight = Card(Suit.SPADES, 8)
    trick = open_trick("p3", [Card(Suit.CLUBS, 8)], cap_rank=8)
    state = make_state(four_seats([eight, Card(Suit.HEARTS, 11)]), trick=trick, played={3: 1, 8: 3})

    capped = apply_move(state, "p0", Move([eight]))
    assert capped.current_trick.cap_rank == 8
    assert len(capped.current_trick.plays) == 2

    cleared = apply_move(state, "p0", Move([eight]), rules=RuleSet(four_of_a_kind_beats_cap=True))
    assert cleared.current_trick.is_empty()


def test_turn_after_a_clearing_play():
    two = Card(Suit.HEARTS, 2)
    state = make_state(four_seats([two, Card(Suit.HEARTS, 11)]), played={3: 1})

    assert apply_move(state, "p0", Move([two])).current_player_index == 1
    leads = apply_move(state, "p0", Move([two]), rules=RuleSet(clearing_player_leads=True))
    assert leads.current_player_index == 0


def test_turn_wraps_around_the_table():
    trick = open_trick("p2", [Card(Suit.CLUBS, 4)])
    five = Card(Suit.SPADES, 5)
    hands = [[Card(Suit.HEARTS, 9)], [Card(Suit.HEARTS, 10)], [Card(Suit.HEARTS, 12)], [five, Card(Suit.SPADES, 6)]]
    state = make_state(hands, current=3, trick=trick, played={3: 1, 4: 1})
    assert apply_move(state, "p3", Move([five])).current_player_index == 0


def test_emptying_a_hand_finishes_the_game():
    last = Card(Suit.HEARTS, 9)
    trick = open_trick("p3", [Card(Suit.CLUBS, 6)])
    state = make_state(four_seats([last]), trick=trick, played={3: 1, 6: 1})

    after = apply_move(state, "p0", Move([last]))
    assert after.phase is Phase.FINISHED
    assert after.winner == "p0"
    assert after.players[0].hand_count == 0


def test_passes_advance_then_three_clear_to_last_valid_player():
    hands = four_seats([Card(Suit.HEARTS, 11), Card(Suit.HEARTS, 12)])
    state = apply_move(make_state(hands, played={3: 1}), "p0", Move([Card(Suit.HEARTS, 11)]))
    assert state.current_player_index == 1

    state = apply_pass(state)
    assert state.pass_count == 1
    assert state.current_player_index == 2
    state = apply_pass(state)
    assert state.pass_count == 2
    assert state.current_player_index == 3
    assert len(state.current_trick.plays) == 1

    state = apply_pass(state)
    assert state.pass_count == 0
    assert state.current_trick.is_empty()
    assert state.current_player_index == 0
    assert state.last_valid_player == "p0"


def test_triple_pass_without_last_valid_player_keeps_seat():
    state = make_state(four_seats([Card(Suit.HEARTS, 11)]), current=2, pass_count=2)
    after = apply_pass(state)
    assert after.current_player_index == 2
    assert after.pass_count == 0
    assert after.current_trick.is_empty()


def test_passes_to_clear_is_configurable():
    hands = [[Card(Suit.HEARTS, 11), Card(Suit.HEARTS, 12)], [Card(Suit.CLUBS, 1)], [Card(Suit.CLUBS, 2)]]
    rules = RuleSet(player_count=3, passes_to_clear=2)
    state = apply_move(make_state(hands, played={3: 1}), "p0", Move([Card(Suit.HEARTS, 11)]), rules=rules)
    state = apply_pass(state, rules=rules)
    state = apply_pass(state, rules=rules)
    assert state.current_trick.is_empty()
    assert state.current_player_index == 0


def test_states_compare_by_value_but_are_not_hashable():
    hand = [THREE_OF_SPADES, Card(Suit.HEARTS, 10)]
    state = make_state(four_seats(hand))
    assert state == make_state(four_seats(hand))
    with pytest.raises(TypeError):
        hash(state)
    with pytest.raises(TypeError):
        {state}
