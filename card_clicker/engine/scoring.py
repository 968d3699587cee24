"""
Draw scoring for Card Clicker.

Score = floor((hit ? base × multiplier : base × miss_factor) + flat bonus)

The multiplier stacks the bet's base multiplier with relic bet bonuses,
combo streak, comeback bonus and global bonus, then the boss scaling.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from .bets import BetOption
from .boss_modifiers import BossRoundState
from .deck import Card, get_rank_value
from .decks import DeckModifier
from .upgrades import (
    get_bet_bonus_map, get_combo_bonus, get_comeback_multiplier,
    get_conditional_bank_delta, get_flat_bonus, get_global_multiplier,
    get_interest_bonus,
)

JOKER_BASE_SCORE = 22
MISS_FACTOR = 0.5
BASE_INTEREST = 0.05


@dataclass
class DrawBreakdown:
    """Detailed breakdown of how a single draw was scored."""
    card: Card
    bet_id: str
    hit: bool
    base_score: int
    bet_multiplier: float
    relic_bonus: float = 0.0
    combo_bonus: float = 0.0
    comeback_bonus: float = 0.0
    global_bonus: float = 0.0
    effective_multiplier: float = 0.0
    flat_bonus: int = 0
    score: int = 0
    bank_delta: int = 0
    details: list[str] = field(default_factory=list)

    def add_detail(self, msg: str):
        self.details.append(msg)


def get_base_score(card: Card, joker_base_score: int = JOKER_BASE_SCORE) -> int:
    if card.is_joker:
        return joker_base_score
    return max(get_rank_value(card.rank), 2)


def compute_flat_bonus(owned: list, deck_modifiers: Optional[DeckModifier] = None,
                       boss: Optional[BossRoundState] = None) -> int:
    """Relic flat bonus plus the deck's, after any boss override or reduction."""
    total = get_flat_bonus(owned) + (deck_modifiers.flat_bonus if deck_modifiers else 0)
    if boss is not None:
        total = boss.apply_flat_bonus(total)
    return total


def compute_interest_rate(owned: list, deck_modifiers: Optional[DeckModifier] = None,
                          base_interest: float = BASE_INTEREST) -> float:
    deck_bonus = deck_modifiers.interest_bonus if deck_modifiers else 0.0
    return base_interest + deck_bonus + get_interest_bonus(owned)


def compute_bank_delta(owned: list, hit: bool, boss: Optional[BossRoundState] = None) -> int:
    delta = get_conditional_bank_delta(owned, hit)
    if not hit and boss is not None:
        delta -= boss.get_bank_drain()
    return delta


def apply_bank_delta(bank: int, delta: int) -> int:
    return max(0, bank + delta)


def compute_multiplier(bet: BetOption, owned: list, hit: bool, combo_streak: int = 0,
                       last_bet_hit: Optional[bool] = None,
                       boss: Optional[BossRoundState] = None,
                       breakdown: Optional[DrawBreakdown] = None) -> float:
    relic_bonus = get_bet_bonus_map(owned).get(bet.id, 0.0)
    combo_bonus = get_combo_bonus(owned, combo_streak)
    # Comeback only on a hit directly after a miss
    comeback = get_comeback_multiplier(owned) if hit and last_bet_hit is False else 0.0
    global_bonus = get_global_multiplier(owned)

    multiplier = bet.base_multiplier + relic_bonus + combo_bonus + comeback + global_bonus
    if boss is not None:
        multiplier = boss.apply_multiplier(multiplier)

    if breakdown is not None:
        breakdown.relic_bonus = relic_bonus
        breakdown.combo_bonus = combo_bonus
        breakdown.comeback_bonus = comeback
        breakdown.global_bonus = global_bonus
        breakdown.effective_multiplier = multiplier
    return multiplier


def score_draw(card: Card, bet: BetOption, owned: list, combo_streak: int = 0,
               last_bet_hit: Optional[bool] = None,
               boss: Optional[BossRoundState] = None,
               deck_modifiers: Optional[DeckModifier] = None,
               joker_base_score: int = JOKER_BASE_SCORE,
               miss_factor: float = MISS_FACTOR) -> DrawBreakdown:
    """
    Score one drawn card against the selected bet.

    Pure: returns the breakdown (score and bank delta included) and leaves
    applying it to the caller.
    """
    hit = bool(bet.check(card))
    base = get_base_score(card, joker_base_score)
    breakdown = DrawBreakdown(card=card, bet_id=bet.id, hit=hit, base_score=base,
                              bet_multiplier=bet.base_multiplier)
    breakdown.add_detail(f"{card} base {base}")

    multiplier = compute_multiplier(bet, owned, hit, combo_streak, last_bet_hit, boss, breakdown)
    if breakdown.relic_bonus:
        breakdown.add_detail(f"+{breakdown.relic_bonus:g}× relics")
    if breakdown.combo_bonus:
        breakdown.add_detail(f"+{breakdown.combo_bonus:g}× combo ({combo_streak})")
    if breakdown.comeback_bonus:
        breakdown.add_detail(f"+{breakdown.comeback_bonus:g}× comeback")
    if breakdown.global_bonus:
        breakdown.add_detail(f"+{breakdown.global_bonus:g}× global")

    flat = compute_flat_bonus(owned, deck_modifiers, boss)
    breakdown.flat_bonus = flat

    raw = base * multiplier if hit else base * miss_factor
    breakdown.score = math.floor(raw + flat)
    if hit:
        breakdown.add_detail(f"HIT {bet.label}: {base} × {multiplier:.2f} + {flat}")
    else:
        breakdown.add_detail(f"MISS {bet.label}: {base} × {miss_factor} + {flat}")

    breakdown.bank_delta = compute_bank_delta(owned, hit, boss)
    if breakdown.bank_delta:
        breakdown.add_detail(f"{breakdown.bank_delta:+d} bank")
    return breakdown


def expected_draw_score(bet: BetOption, cards: list[Card], owned: list, combo_streak: int = 0,
                        last_bet_hit: Optional[bool] = None,
                        boss: Optional[BossRoundState] = None,
                        deck_modifiers: Optional[DeckModifier] = None) -> float:
    """Mean draw score of a bet over the given pile (used by autoplay)."""
    if not cards:
        return 0.0
    total = sum(score_draw(c, bet, owned, combo_streak, last_bet_hit, boss, deck_modifiers).score
                for c in cards)
    return total / len(cards)
