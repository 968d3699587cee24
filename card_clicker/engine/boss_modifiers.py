"""
Boss round modifiers for Card Clicker.
Every 5th round applies one modifier, picked cyclically from a fixed table.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BossEffectType(Enum):
    """Types of boss effects."""
    DISABLE_BETS = "disableBets"              # The Purist - listed bets unavailable
    REDUCE_FLAT_BONUS = "reduceFlatBonus"     # The Nullifier - flat bonus overridden
    REDUCE_MULTIPLIERS = "reduceMultipliers"  # The Dampener - final multiplier scaled
    BANK_DRAIN = "bankDrain"                  # The Tax Collector - bank loss per miss
    NO_INTEREST = "noInterest"                # The Accountant - no interest at payout


@dataclass(frozen=True)
class BossEffect:
    type: BossEffectType
    value: Optional[float] = None
    bet_ids: tuple = ()


@dataclass(frozen=True)
class BossModifier:
    """A boss round modifier."""
    id: str
    name: str
    description: str
    target_multiplier: float = 1.0
    effect: Optional[BossEffect] = None
    flat_bonus_scale: float = 1.0  # Applied after relic/deck flat bonus aggregation


BOSS_MODIFIERS = [
    BossModifier(
        "boss-purist", "The Purist",
        "Only exact suit and special bets available. Color bets disabled.",
        target_multiplier=1.3,
        effect=BossEffect(
            BossEffectType.DISABLE_BETS,
            bet_ids=("color-red", "color-black", "rank-number", "rank-face", "value-high", "value-low"),
        ),
    ),
    BossModifier(
        "boss-accountant", "The Accountant",
        "Interest is disabled. Flat bonuses reduced by 50%.",
        target_multiplier=1.2,
        effect=BossEffect(BossEffectType.NO_INTEREST),
        flat_bonus_scale=0.5,
    ),
    BossModifier(
        "boss-multiplier-curse", "The Dampener",
        "All bet multipliers reduced by 50%.",
        target_multiplier=1.4,
        effect=BossEffect(BossEffectType.REDUCE_MULTIPLIERS, value=0.5),
    ),
    BossModifier(
        "boss-drain", "The Tax Collector",
        "Lose 8 bank per missed bet.",
        target_multiplier=1.25,
        effect=BossEffect(BossEffectType.BANK_DRAIN, value=8),
    ),
    BossModifier(
        "boss-flat-curse", "The Nullifier",
        "Flat bonus per draw reduced to 0.",
        target_multiplier=1.3,
        effect=BossEffect(BossEffectType.REDUCE_FLAT_BONUS, value=0),
    ),
]


def is_boss_round(round_number: int) -> bool:
    return round_number > 0 and round_number % 5 == 0


def get_boss_for_round(round_number: int) -> Optional[BossModifier]:
    """Boss for the round, cycling through the table; None off boss rounds."""
    if not is_boss_round(round_number):
        return None
    index = (round_number // 5 - 1) % len(BOSS_MODIFIERS)
    return BOSS_MODIFIERS[index]


class BossRoundState:
    """Answers rule questions for one round, boss or not."""

    def __init__(self, round_number: int):
        self.round_number = round_number
        self.boss = get_boss_for_round(round_number)

    def _effect(self, effect_type: BossEffectType) -> Optional[BossEffect]:
        if self.boss and self.boss.effect and self.boss.effect.type == effect_type:
            return self.boss.effect
        return None

    def get_target_multiplier(self) -> float:
        return self.boss.target_multiplier if self.boss else 1.0

    def disabled_bet_ids(self) -> tuple:
        effect = self._effect(BossEffectType.DISABLE_BETS)
        return effect.bet_ids if effect else ()

    def is_bet_disabled(self, bet_id: str) -> bool:
        return bet_id in self.disabled_bet_ids()

    def apply_flat_bonus(self, flat_bonus: int) -> int:
        """Override (Nullifier) or scale (Accountant) the aggregated flat bonus."""
        effect = self._effect(BossEffectType.REDUCE_FLAT_BONUS)
        if effect is not None and effect.value is not None:
            return int(effect.value)
        if self.boss and self.boss.flat_bonus_scale != 1.0:
            return math.floor(flat_bonus * self.boss.flat_bonus_scale)
        return flat_bonus

    def apply_multiplier(self, multiplier: float) -> float:
        effect = self._effect(BossEffectType.REDUCE_MULTIPLIERS)
        if effect is not None and effect.value is not None:
            return multiplier * effect.value
        return multiplier

    def get_bank_drain(self) -> int:
        """Bank lost on a missed draw (The Tax Collector)."""
        effect = self._effect(BossEffectType.BANK_DRAIN)
        if effect is not None and effect.value is not None:
            return int(effect.value)
        return 0

    def interest_disabled(self) -> bool:
        return self._effect(BossEffectType.NO_INTEREST) is not None

    def apply_interest_rate(self, rate: float) -> float:
        return 0.0 if self.interest_disabled() else rate
