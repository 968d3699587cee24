"""Tests for the wager catalog."""

from card_clicker.engine.bets import (
    BET_OPTIONS, BetCategory, available_bets, bets_by_category, get_bet,
    hit_probability,
)
from card_clicker.engine.deck import Suit, build_standard_deck, create_card, create_joker_card

JOKER = create_joker_card("red", "joker-red")


def test_catalog_shape():
    assert len(BET_OPTIONS) == 12
    assert {b.category for b in BET_OPTIONS} == set(BetCategory)
    assert len({b.id for b in BET_OPTIONS}) == 12


def test_predicates_are_total_over_jokers():
    for bet in BET_OPTIONS:
        assert bet.check(JOKER) in (True, False)


def test_joker_counts_as_high_but_not_low():
    assert get_bet("value-high").check(JOKER)
    assert not get_bet("value-low").check(JOKER)
    assert get_bet("special-joker").check(JOKER)
    assert not get_bet("color-red").check(JOKER)


def test_value_bets_split_on_rank_value():
    high, low = get_bet("value-high"), get_bet("value-low")
    assert high.check(create_card(Suit.CLUBS, "9"))
    assert high.check(create_card(Suit.CLUBS, "A"))
    assert not high.check(create_card(Suit.CLUBS, "8"))
    assert low.check(create_card(Suit.CLUBS, "2"))
    assert low.check(create_card(Suit.CLUBS, "6"))
    assert not low.check(create_card(Suit.CLUBS, "7"))


def test_number_excludes_aces_and_faces():
    number = get_bet("rank-number")
    assert number.check(create_card(Suit.HEARTS, "10"))
    assert not number.check(create_card(Suit.HEARTS, "A"))
    assert not number.check(create_card(Suit.HEARTS, "K"))
    assert not number.check(JOKER)


def test_hit_probability_over_standard_deck():
    cards = build_standard_deck()
    assert hit_probability(get_bet("color-red"), cards) == 26 / 54
    assert hit_probability(get_bet("special-ace"), cards) == 4 / 54
    assert hit_probability(get_bet("special-ace"), []) == 0.0


def test_disabled_bets_are_filtered():
    bets = available_bets(["color-red", "color-black"])
    assert all(b.category != BetCategory.COLOR for b in bets)
    grouped = bets_by_category(["color-red", "color-black"])
    assert BetCategory.COLOR not in grouped
    assert len(grouped[BetCategory.SUIT]) == 4


def test_unknown_bet_is_none():
    assert get_bet("nope") is None
    assert get_bet(None) is None


def test_get_bet_rejects_non_string_ids():
    assert get_bet(["color-red"]) is None
    assert get_bet(None) is None
    assert get_bet("nope") is None
