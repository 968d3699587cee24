"""
Shop generation and purchase AI for Card Clicker.
Offers are minted from the relic catalog with rarity pressure that rises each round.
"""

import bisect
import itertools
import random
import time
from dataclasses import dataclass, replace
from typing import Optional

from .upgrades import (
    Rarity, ShopUpgrade, UPGRADE_TEMPLATES, base_template_id,
    BetMultiplier, ComboCounter, ConditionalBonus, ExtraDraws, FlatBonus,
    GlobalMultiplier, InterestRate, SynergyMultiplier, Transformation,
    count_tagged,
)


@dataclass
class ShopConfig:
    """Configuration for shop behavior."""
    base_slots: int = 6
    max_slots: int = 8
    rounds_per_extra_slot: int = 3
    guaranteed_cheap_cost: int = 120


def get_shop_slot_count(round_number: int, config: ShopConfig = None) -> int:
    config = config or ShopConfig()
    extra = max(0, round_number - 1) // config.rounds_per_extra_slot
    return min(config.max_slots, config.base_slots + extra)


def get_rarity_weight(rarity: Rarity, round_number: int) -> float:
    """Legendary and rare weights grow with the round; common and uncommon shrink."""
    rf = max(0, round_number - 1)
    if rarity == Rarity.LEGENDARY:
        return 8 + 2.5 * rf
    if rarity == Rarity.RARE:
        return 18 + 1.5 * rf
    if rarity == Rarity.UNCOMMON:
        return max(18, 28 - 1.2 * rf)
    return max(12, 46 - 3.5 * rf)


def make_offer_id(template_id: str, round_number: int, rng=None) -> str:
    rng = rng or random
    timestamp = int(time.time() * 1000)
    return f"{template_id}-{round_number}-{timestamp}-{rng.randrange(16 ** 6):06x}"


def weighted_index(weights: list[float], rng=None) -> int:
    """Sample an index proportionally to its weight."""
    rng = rng or random
    cumulative = list(itertools.accumulate(weights))
    roll = rng.random() * cumulative[-1]
    return min(bisect.bisect_left(cumulative, roll), len(weights) - 1)


def available_templates(owned: list, templates: list = None) -> list[ShopUpgrade]:
    """Templates not yet owned (compared by base id)."""
    owned_ids = {base_template_id(u.id) for u in owned}
    catalog = UPGRADE_TEMPLATES if templates is None else templates
    return [t for t in catalog if t.id not in owned_ids]


def generate_shop_choices(round_number: int, owned: list, rng=None,
                          config: ShopConfig = None,
                          templates: list = None) -> list[ShopUpgrade]:
    """
    Build the offers shown after a won round.

    One affordable relic (if any) takes the first slot; the rest are drawn
    by rarity weight without replacement.
    """
    rng = rng or random
    config = config or ShopConfig()
    candidates = available_templates(owned, templates)
    if not candidates:
        return []

    slot_count = get_shop_slot_count(round_number, config)
    picked: list[ShopUpgrade] = []

    cheap = [t for t in candidates if t.cost <= config.guaranteed_cheap_cost]
    if cheap:
        forced = rng.choice(cheap)
        picked.append(forced)
        candidates = [t for t in candidates if t is not forced]

    while len(picked) < slot_count and candidates:
        weights = [get_rarity_weight(t.rarity, round_number) for t in candidates]
        index = weighted_index(weights, rng)
        picked.append(candidates[index])
        candidates = candidates[:index] + candidates[index + 1:]

    return [replace(t, id=make_offer_id(t.id, round_number, rng)) for t in picked]


class ShopAI:
    """
    AI for making shop decisions.
    """

    RESERVES = {"balanced": 0.25, "aggressive": 0.0, "economy": 0.5}

    def __init__(self, strategy: str = "balanced"):
        self.strategy = strategy  # "balanced", "aggressive", "economy"

    def decide_purchases(self, choices: list[ShopUpgrade], game_state) -> list[str]:
        """
        Decide what to buy from the current shop.

        Returns offer ids in purchase order. Offers are taken best-first while
        the bank stays above the strategy's reserve.
        """
        bank = game_state.bank
        reserve = int(bank * self.RESERVES.get(self.strategy, 0.25))
        owned = list(game_state.owned_upgrades)

        scored = sorted(choices, key=lambda u: self.score_upgrade(u, owned, game_state),
                        reverse=True)
        to_buy = []
        for offer in scored:
            if offer.id in game_state.purchased_shop_ids:
                continue
            if offer.cost <= bank - reserve:
                to_buy.append(offer.id)
                bank -= offer.cost
                owned.append(offer)
        return to_buy

    def score_upgrade(self, upgrade: ShopUpgrade, owned: list, game_state) -> float:
        """Score a relic based on its effects and synergy with what is owned."""
        score = 0.0
        rounds_left_factor = 1.0 if game_state.round_number <= 5 else 0.6

        for effect in upgrade.effects:
            if isinstance(effect, ExtraDraws):
                score += effect.value * 40
            elif isinstance(effect, BetMultiplier):
                score += effect.value * 30
            elif isinstance(effect, FlatBonus):
                score += effect.value * 4
            elif isinstance(effect, InterestRate):
                weight = 900 if self.strategy == "economy" else 600
                score += effect.value * weight * rounds_left_factor
            elif isinstance(effect, SynergyMultiplier):
                score += effect.value * 40 * (count_tagged(owned, effect.tag) + 1)
            elif isinstance(effect, Transformation):
                pieces = sum(1 for u in owned for e in u.effects
                             if isinstance(e, Transformation) and e.set_id == effect.set_id)
                score += 15 + 25 * pieces
            elif isinstance(effect, ConditionalBonus):
                score += effect.multiplier * 20 + effect.bank_reward * 0.5
                score -= effect.bank_penalty * 0.8
            elif isinstance(effect, ComboCounter):
                score += effect.value * 150
            elif isinstance(effect, GlobalMultiplier):
                score += effect.value * 120

        # Tag synergy with existing relics
        for tag in upgrade.tags:
            score += 5 * count_tagged(owned, tag)

        if self.strategy == "aggressive":
            score *= 1.1
        return score / max(upgrade.cost, 1) * 100
