"""
Deck management for Card Clicker.
Handles card identity, deck construction, shuffling and the draw pile.
"""

import random
from dataclasses import dataclass, field
from typing import Callable, Optional
from enum import Enum


class Suit(Enum):
    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    JOKER = "Joker"


# Playing suits, in deck-building order
SUITS = [Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS]
RED_SUITS = (Suit.HEARTS, Suit.DIAMONDS)
BLACK_SUITS = (Suit.SPADES, Suit.CLUBS)

RANKS = ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
JOKER_RANK = "Joker"
FACE_RANKS = ("J", "Q", "K")

# Aces rank above face cards here
RANK_VALUES = {
    "2": 2, "3": 3, "4": 4, "5": 5, "6": 6, "7": 7, "8": 8, "9": 9, "10": 10,
    "A": 11, "J": 12, "Q": 13, "K": 14,
}


def get_rank_value(rank: str) -> int:
    """Ordinal value of a rank. Jokers have no rank value."""
    if rank == JOKER_RANK:
        raise ValueError("Jokers have no rank value")
    return RANK_VALUES[rank]


@dataclass
class Card:
    suit: Suit
    rank: str
    id: str
    is_joker: bool = False
    joker_color: Optional[str] = None  # "red" / "black", jokers only

    @property
    def is_face_card(self) -> bool:
        return self.rank in FACE_RANKS

    @property
    def is_red(self) -> bool:
        return self.suit in RED_SUITS

    @property
    def is_black(self) -> bool:
        return self.suit in BLACK_SUITS

    def to_dict(self) -> dict:
        return {
            "suit": self.suit.value,
            "rank": self.rank,
            "id": self.id,
            "is_joker": self.is_joker,
            "joker_color": self.joker_color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        """Rebuild a stored card, repairing half-marked jokers."""
        rank = str(data["rank"])
        suit_value = data.get("suit")
        if rank == JOKER_RANK or suit_value == Suit.JOKER.value or data.get("is_joker"):
            return cls(
                suit=Suit.JOKER,
                rank=JOKER_RANK,
                id=str(data.get("id") or "joker"),
                is_joker=True,
                joker_color=data.get("joker_color") or "black",
            )
        if rank not in RANK_VALUES:
            raise ValueError(f"Unknown rank: {rank}")
        return cls(suit=Suit(suit_value), rank=rank, id=str(data.get("id") or f"{rank}{suit_value}"))

    def __str__(self) -> str:
        if self.is_joker:
            return f"Joker ({self.joker_color})"
        return f"{self.rank}{self.suit.value}"

    def __repr__(self) -> str:
        return self.__str__()


def create_card(suit: Suit, rank: str, variant: Optional[int] = None) -> Card:
    """Create a playing card. Variants keep duplicate cards' ids unique."""
    card_id = f"{rank}{suit.value}" if variant is None else f"{rank}{suit.value}-{variant}"
    return Card(suit=suit, rank=rank, id=card_id)


def create_joker_card(color: str, card_id: str) -> Card:
    return Card(suit=Suit.JOKER, rank=JOKER_RANK, id=card_id, is_joker=True, joker_color=color)


def build_standard_deck() -> list[Card]:
    """52 playing cards plus one red and one black joker."""
    cards = [create_card(suit, rank) for suit in SUITS for rank in RANKS]
    cards.append(create_joker_card("red", "joker-red"))
    cards.append(create_joker_card("black", "joker-black"))
    return cards


def shuffle_deck(cards: list[Card], rng=None) -> list[Card]:
    """Fisher-Yates shuffle into a new list; the input is left untouched."""
    rng = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass
class Deck:
    """
    The draw pile for one run.

    Cards are drawn from the front. An empty pile is refilled from a freshly
    built preset deck; discards are not tracked.
    """
    builder: Callable[[], list[Card]] = build_standard_deck
    cards: list[Card] = field(default_factory=list)

    @classmethod
    def fresh(cls, builder: Callable[[], list[Card]], rng=None) -> "Deck":
        return cls(builder=builder, cards=shuffle_deck(builder(), rng))

    def refill(self, rng=None) -> None:
        self.cards = shuffle_deck(self.builder(), rng)

    def draw(self, rng=None) -> Card:
        """Pop the top card, reshuffling a fresh deck first if empty."""
        if not self.cards:
            self.refill(rng)
        return self.cards.pop(0)

    def cards_remaining(self) -> int:
        return len(self.cards)

    def remove_card(self, card_id: str) -> bool:
        """Remove a card by identity. Returns True if found."""
        for i, card in enumerate(self.cards):
            if card.id == card_id:
                del self.cards[i]
                return True
        return False

    def count_by_suit(self, suit: Suit) -> int:
        return sum(1 for c in self.cards if c.suit == suit)

    def count_by_rank(self, rank: str) -> int:
        return sum(1 for c in self.cards if c.rank == rank)
