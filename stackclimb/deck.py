"""Deck creation and dealing utilities."""

from __future__ import annotations

from random import Random
from typing import Iterable, List, Optional, Sequence

from .cards import RANKS, SUIT_INDEX, Card, Suit

DECK_SIZE = 52


def build_deck() -> List[Card]:
    """Return the ordered 52-card deck."""
    return [Card(suit, rank) for suit in Suit for rank in RANKS]


def create_deck(rng: Optional[Random] = None) -> List[Card]:
    """Return all 52 cards in a uniformly random order."""
    cards = build_deck()
    if rng is None:
        rng = Random()
    # Random.shuffle is an in-place Fisher-Yates shuffle.
    rng.shuffle(cards)
    return cards


def deal_cards(deck: Sequence[Card], player_count: int) -> List[List[Card]]:
    """Deal round-robin, ``len(deck) // player_count`` cards each.

    Remainder cards are left undealt.
    """
    if player_count < 1:
        raise ValueError("At least one player is required to deal.")
    hands: List[List[Card]] = [[] for _ in range(player_count)]
    per_player = len(deck) // player_count
    for index in range(per_player * player_count):
        hands[index % player_count].append(deck[index])
    return hands


def sort_hand(hand: Iterable[Card]) -> List[Card]:
    """Ascending rank, ties broken hearts, diamonds, clubs, spades."""
    return sorted(hand, key=lambda card: (card.rank, SUIT_INDEX[card.suit]))


def find_card(hand: Iterable[Card], rank: int, suit: Suit) -> Optional[Card]:
    for card in hand:
        if card.rank == rank and card.suit is suit:
            return card
    return None


def find_three_of_spades(hand: Iterable[Card]) -> Optional[Card]:
    return find_card(hand, 3, Suit.SPADES)
