"""
Wager catalog for Card Clicker.
Fixed set of bettable predicates over the next drawn card.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from .deck import Card, Suit, RANK_VALUES, JOKER_RANK, FACE_RANKS


class BetCategory(Enum):
    COLOR = "Color"
    SUIT = "Suit"
    RANK_TYPE = "Rank Type"
    VALUE = "Value"
    SPECIAL = "Special"


class Risk(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


@dataclass(frozen=True)
class BetOption:
    id: str
    category: BetCategory
    label: str
    description: str
    base_multiplier: float
    risk: Risk
    check: Callable[[Card], bool]

    def __str__(self) -> str:
        return f"{self.label} ({self.base_multiplier}x)"


def _is_high_value(card: Card) -> bool:
    if card.rank == JOKER_RANK:
        return True
    return RANK_VALUES[card.rank] >= 9


def _is_low_value(card: Card) -> bool:
    if card.rank == JOKER_RANK:
        return False
    return 2 <= RANK_VALUES[card.rank] <= 6


BET_OPTIONS = [
    BetOption("color-red", BetCategory.COLOR, "Red Cards", "Hearts or Diamonds",
              1.7, Risk.LOW, lambda c: c.suit in (Suit.HEARTS, Suit.DIAMONDS)),
    BetOption("color-black", BetCategory.COLOR, "Black Cards", "Spades or Clubs",
              1.7, Risk.LOW, lambda c: c.suit in (Suit.SPADES, Suit.CLUBS)),

    BetOption("suit-spades", BetCategory.SUIT, "Exact Suit · ♠", "Bet on spades specifically",
              3.2, Risk.HIGH, lambda c: c.suit == Suit.SPADES),
    BetOption("suit-hearts", BetCategory.SUIT, "Exact Suit · ♥", "Bet on hearts specifically",
              3.0, Risk.HIGH, lambda c: c.suit == Suit.HEARTS),
    BetOption("suit-diamonds", BetCategory.SUIT, "Exact Suit · ♦", "Bet on diamonds specifically",
              3.0, Risk.HIGH, lambda c: c.suit == Suit.DIAMONDS),
    BetOption("suit-clubs", BetCategory.SUIT, "Exact Suit · ♣", "Bet on clubs specifically",
              3.2, Risk.HIGH, lambda c: c.suit == Suit.CLUBS),

    BetOption("rank-face", BetCategory.RANK_TYPE, "Face Card", "J, Q, or K",
              2.2, Risk.MEDIUM, lambda c: c.rank in FACE_RANKS),
    BetOption("rank-number", BetCategory.RANK_TYPE, "Number Card", "Ranks 2 through 10",
              1.5, Risk.LOW, lambda c: c.rank not in ("A", "J", "Q", "K", JOKER_RANK)),

    BetOption("value-high", BetCategory.VALUE, "High Value (9+)", "Rank 9 or above",
              1.9, Risk.MEDIUM, _is_high_value),
    BetOption("value-low", BetCategory.VALUE, "Low Value (2-6)", "Rank between 2 and 6",
              2.1, Risk.MEDIUM, _is_low_value),

    BetOption("special-ace", BetCategory.SPECIAL, "Ace!", "Land exactly on an Ace",
              4.5, Risk.HIGH, lambda c: c.rank == "A"),
    BetOption("special-joker", BetCategory.SPECIAL, "Joker", "Hit either Joker",
              7.0, Risk.EXTREME, lambda c: c.rank == JOKER_RANK),
]

BET_OPTION_MAP = {bet.id: bet for bet in BET_OPTIONS}


def get_bet(bet_id: Optional[str]) -> Optional[BetOption]:
    if not isinstance(bet_id, str):
        return None
    return BET_OPTION_MAP.get(bet_id)


def available_bets(disabled_ids: Iterable[str] = ()) -> list[BetOption]:
    """Catalog minus any bets a boss has disabled."""
    disabled = set(disabled_ids)
    return [bet for bet in BET_OPTIONS if bet.id not in disabled]


def bets_by_category(disabled_ids: Iterable[str] = ()) -> dict[BetCategory, list[BetOption]]:
    grouped: dict[BetCategory, list[BetOption]] = {}
    for bet in available_bets(disabled_ids):
        grouped.setdefault(bet.category, []).append(bet)
    return grouped


def hit_probability(bet: BetOption, cards: list[Card]) -> float:
    """Fraction of the given cards the bet would hit."""
    if not cards:
        return 0.0
    return sum(1 for c in cards if bet.check(c)) / len(cards)
