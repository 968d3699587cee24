"""
Deck presets for Card Clicker.
Each preset is an immutable template: a pure deck builder plus run modifiers.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Callable, Optional

from .deck import (
    Card, Suit, SUITS, RANKS,
    build_standard_deck, create_card, create_joker_card,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeckModifier:
    """Run-wide modifiers granted by a deck preset."""
    extra_draws: int = 0
    flat_bonus: int = 0
    interest_bonus: float = 0.0
    starting_bank: int = 0

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DeckModifier":
        return merge_deck_modifiers(None, data)


@dataclass(frozen=True)
class DeckRequirement:
    best_round: int
    label: str


@dataclass(frozen=True)
class DeckPreset:
    id: str
    name: str
    description: str
    build_deck: Callable[[], list[Card]]
    modifiers: DeckModifier = field(default_factory=DeckModifier)
    requirement: Optional[DeckRequirement] = None


def build_high_roller_deck() -> list[Card]:
    """7 through A in every suit, extra red/black royals and three jokers."""
    cards = [create_card(suit, rank) for suit in SUITS for rank in RANKS[6:] + ["A"]]
    variant = 0
    for suit in (Suit.SPADES, Suit.HEARTS):
        for rank in ("J", "Q", "K", "A"):
            cards.append(create_card(suit, rank, variant))
            variant += 1
    cards.append(create_joker_card("red", "joker-red-high"))
    cards.append(create_joker_card("black", "joker-black-high"))
    cards.append(create_joker_card("black", "joker-black-high-2"))
    return cards


def build_probability_bender_deck() -> list[Card]:
    cards = build_standard_deck()
    variant = 0
    for suit in (Suit.HEARTS, Suit.DIAMONDS):
        for rank in ("2", "3", "4", "5", "6"):
            cards.append(create_card(suit, rank, variant))
            variant += 1
    for suit in (Suit.SPADES, Suit.CLUBS):
        for rank in ("9", "10", "J"):
            cards.append(create_card(suit, rank, variant))
            variant += 1
    cards.append(create_joker_card("red", "joker-red-pb"))
    cards.append(create_joker_card("red", "joker-red-pb-2"))
    cards.append(create_joker_card("black", "joker-black-pb"))
    return cards


def build_minimalist_deck() -> list[Card]:
    """26 premium cards: 9 and up in every suit, plus two jokers."""
    cards = [create_card(suit, rank) for suit in SUITS for rank in ("9", "10", "J", "Q", "K", "A")]
    cards.append(create_joker_card("red", "joker-red-mini"))
    cards.append(create_joker_card("black", "joker-black-mini"))
    return cards


def build_chaos_deck() -> list[Card]:
    """Two copies of every card and six jokers (110 cards)."""
    cards = []
    for suit in SUITS:
        for rank in RANKS:
            cards.append(create_card(suit, rank))
            cards.append(create_card(suit, rank, 1))
    for i in range(6):
        cards.append(create_joker_card("red" if i % 2 == 0 else "black", f"joker-chaos-{i}"))
    return cards


DECK_PRESETS = [
    DeckPreset(
        id="balanced",
        name="Balanced Deck",
        description="Classic 54-card spread. No modifiers, pure odds.",
        build_deck=build_standard_deck,
    ),
    DeckPreset(
        id="high-roller",
        name="High Roller",
        description="Lean stack of face cards and extra jokers to chase big multipliers.",
        build_deck=build_high_roller_deck,
        modifiers=DeckModifier(starting_bank=120, flat_bonus=4),
        requirement=DeckRequirement(best_round=5, label="Reach Round 5"),
    ),
    DeckPreset(
        id="probability-bender",
        name="Probability Bender",
        description="Weighted draws favor streaky reds, boosted lows and spare jokers.",
        build_deck=build_probability_bender_deck,
        modifiers=DeckModifier(extra_draws=1, interest_bonus=0.02),
        requirement=DeckRequirement(best_round=10, label="Reach Round 10"),
    ),
    DeckPreset(
        id="minimalist",
        name="Minimalist Deck",
        description="Only 26 premium cards (9+). Start with +2 draws and a bigger flat bonus.",
        build_deck=build_minimalist_deck,
        modifiers=DeckModifier(extra_draws=2, flat_bonus=6),
        requirement=DeckRequirement(best_round=7, label="Reach Round 7"),
    ),
    DeckPreset(
        id="chaos",
        name="Chaos Deck",
        description="110 cards with 6 Jokers and +1 draw. High variance.",
        build_deck=build_chaos_deck,
        modifiers=DeckModifier(extra_draws=1, flat_bonus=3),
        requirement=DeckRequirement(best_round=12, label="Reach Round 12"),
    ),
    DeckPreset(
        id="banker",
        name="Banker's Deck",
        description="Start with 200 bank and +5% interest, but -1 draw. Play the long game.",
        build_deck=build_standard_deck,
        modifiers=DeckModifier(starting_bank=200, interest_bonus=0.05, extra_draws=-1),
        requirement=DeckRequirement(best_round=15, label="Reach Round 15"),
    ),
]

DECK_PRESET_MAP = {preset.id: preset for preset in DECK_PRESETS}
DEFAULT_DECK_ID = DECK_PRESETS[0].id


def get_deck_preset(deck_id: Optional[str]) -> DeckPreset:
    """Look up a preset, falling back to the balanced deck."""
    if not isinstance(deck_id, str):
        return DECK_PRESETS[0]
    return DECK_PRESET_MAP.get(deck_id, DECK_PRESETS[0])


def build_deck_for_preset(deck_id: Optional[str]) -> list[Card]:
    return get_deck_preset(deck_id).build_deck()


def merge_deck_modifiers(base: Optional[DeckModifier], overrides: Optional[dict]) -> DeckModifier:
    """
    Stored overrides win field by field over the preset's modifiers.

    Each override is coerced to the field's type; values that cannot be are dropped.
    """
    merged = (base or DeckModifier()).to_dict()
    if not isinstance(overrides, dict):
        return DeckModifier(**merged)
    for key, value in overrides.items():
        if key not in merged or value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("Ignoring non-numeric deck modifier %s=%r", key, value)
            continue
        try:
            merged[key] = type(merged[key])(value)
        except (ValueError, OverflowError) as e:
            logger.warning("Ignoring deck modifier %s=%r: %s", key, value, e)
    return DeckModifier(**merged)
