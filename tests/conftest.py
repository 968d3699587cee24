"""
Shared pytest fixtures for the Card Clicker test suite.
"""

import random

import pytest

from card_clicker.engine import game
from card_clicker.engine.deck import Deck, Suit, build_standard_deck, create_card


@pytest.fixture
def rng():
    """Seeded RNG for deterministic tests."""
    return random.Random(12345)


def card(rank: str, suit: Suit, variant=None):
    return create_card(suit, rank, variant)


def playing_state(cards=None, bet_id=None, **overrides):
    """A round-1 gameplay state with a hand-built draw pile."""
    state = game.start_run(game.new_state(), rng=random.Random(0)).state
    if cards is not None:
        state.deck = Deck(builder=build_standard_deck, cards=list(cards))
    state.selected_bet_id = bet_id
    for key, value in overrides.items():
        setattr(state, key, value)
    return state
