"""
Relic (upgrade) catalog and effect aggregation for Card Clicker.

A relic carries one or more effects. Every derived bonus is recomputed by
folding over the full owned collection; nothing is cached between calls.
"""

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar, Optional, Union


class Rarity(Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class Condition(Enum):
    ON_HIT = "onHit"
    ON_MISS = "onMiss"


class Decay(Enum):
    ON_MISS = "onMiss"
    PER_ROUND = "perRound"


# Effect kinds

@dataclass(frozen=True)
class ExtraDraws:
    type: ClassVar[str] = "extraDraws"
    value: int


@dataclass(frozen=True)
class BetMultiplier:
    type: ClassVar[str] = "betMultiplier"
    bet_id: str
    value: float


@dataclass(frozen=True)
class FlatBonus:
    type: ClassVar[str] = "flatBonus"
    value: int


@dataclass(frozen=True)
class InterestRate:
    type: ClassVar[str] = "interestRate"
    value: float


@dataclass(frozen=True)
class SynergyMultiplier:
    type: ClassVar[str] = "synergyMultiplier"
    tag: str
    value: float


@dataclass(frozen=True)
class Transformation:
    type: ClassVar[str] = "transformation"
    set_id: str
    piece: int  # Display only; completion is a plain count


@dataclass(frozen=True)
class ConditionalBonus:
    type: ClassVar[str] = "conditionalBonus"
    condition: Condition
    multiplier: float = 0.0
    flat_bonus: int = 0
    bank_reward: int = 0
    bank_penalty: int = 0


@dataclass(frozen=True)
class ComboCounter:
    type: ClassVar[str] = "comboCounter"
    value: float
    decay: Decay = Decay.ON_MISS


@dataclass(frozen=True)
class GlobalMultiplier:
    type: ClassVar[str] = "globalMultiplier"
    value: float


UpgradeEffect = Union[
    ExtraDraws, BetMultiplier, FlatBonus, InterestRate, SynergyMultiplier,
    Transformation, ConditionalBonus, ComboCounter, GlobalMultiplier,
]

EFFECT_TYPES = {
    cls.type: cls for cls in (
        ExtraDraws, BetMultiplier, FlatBonus, InterestRate, SynergyMultiplier,
        Transformation, ConditionalBonus, ComboCounter, GlobalMultiplier,
    )
}


def effect_to_dict(effect: UpgradeEffect) -> dict:
    data = {"type": effect.type}
    for f in fields(effect):
        value = getattr(effect, f.name)
        data[f.name] = value.value if isinstance(value, Enum) else value
    return data


def effect_from_dict(data: dict) -> UpgradeEffect:
    """Rebuild an effect from its stored form. Raises ValueError if malformed."""
    cls = EFFECT_TYPES.get(data.get("type"))
    if cls is None:
        raise ValueError(f"Unknown effect type: {data.get('type')}")
    kwargs = {f.name: data[f.name] for f in fields(cls) if f.name in data}
    try:
        if cls is ConditionalBonus:
            kwargs["condition"] = Condition(kwargs["condition"])
        if cls is ComboCounter and "decay" in kwargs:
            kwargs["decay"] = Decay(kwargs["decay"])
        return cls(**kwargs)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed {cls.type} effect: {data}") from e


_OFFER_ID_PATTERN = re.compile(r"^(.+?)-\d+-\d+-[a-f0-9]+$")


def base_template_id(upgrade_id: str) -> str:
    """Strip the per-offer suffix (round, timestamp, random hex) from an id."""
    match = _OFFER_ID_PATTERN.match(upgrade_id)
    return match.group(1) if match else upgrade_id


@dataclass(frozen=True)
class ShopUpgrade:
    """A relic template, or a shop offer minted from one."""
    id: str
    name: str
    description: str
    rarity: Rarity
    cost: int
    icon: str
    effects: tuple = ()
    tags: tuple = ()

    @property
    def template_id(self) -> str:
        return base_template_id(self.id)

    def effects_of(self, kind: type) -> list:
        return [e for e in self.effects if isinstance(e, kind)]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "rarity": self.rarity.value,
            "cost": self.cost,
            "icon": self.icon,
            "effects": [effect_to_dict(e) for e in self.effects],
            "tags": list(self.tags),
        }

    @classmethod
    def _kwargs_from_dict(cls, data: dict) -> dict:
        template = TEMPLATE_BY_NAME.get(data.get("name"))
        return {
            "id": str(data["id"]),
            "name": str(data["name"]),
            "description": str(data.get("description", "")),
            "rarity": Rarity(data.get("rarity", "common")),
            "cost": int(data["cost"]),
            "icon": data.get("icon") or (template.icon if template else "🔹"),
            "effects": tuple(effect_from_dict(e) for e in data.get("effects", [])),
            "tags": tuple(data.get("tags") or ()),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShopUpgrade":
        return cls(**cls._kwargs_from_dict(data))

    def __str__(self) -> str:
        return f"{self.name} ({self.rarity.value}, {self.cost})"


@dataclass(frozen=True)
class OwnedUpgrade(ShopUpgrade):
    purchased_at_round: int = 0

    @classmethod
    def from_offer(cls, offer: ShopUpgrade, round_number: int) -> "OwnedUpgrade":
        return cls(**{f.name: getattr(offer, f.name) for f in fields(ShopUpgrade)},
                   purchased_at_round=round_number)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["purchased_at_round"] = self.purchased_at_round
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OwnedUpgrade":
        return cls(**cls._kwargs_from_dict(data),
                   purchased_at_round=int(data.get("purchased_at_round", 0)))


def _relic(id, name, description, rarity, cost, icon, effects, tags=()):
    return ShopUpgrade(id, name, description, rarity, cost, icon, tuple(effects), tuple(tags))


UPGRADE_TEMPLATES = [
    # Common
    _relic("flat-bonus-2", "Scuffed Token", "Every draw awards +2 bonus points.",
           Rarity.COMMON, 60, "🪙", [FlatBonus(2)]),
    _relic("bet-bonus-red-small", "Tinted Lens", "Red Cards bet gains +0.2× multiplier.",
           Rarity.COMMON, 65, "🔍", [BetMultiplier("color-red", 0.2)], ["red-synergy"]),
    _relic("interest-boost-0", "Savings Charm", "Increase bank interest by +2%.",
           Rarity.COMMON, 70, "🧿", [InterestRate(0.02)], ["interest-synergy"]),
    _relic("flat-bonus-4", "Warm-Up Routine", "Every draw awards +4 bonus points.",
           Rarity.COMMON, 80, "🔥", [FlatBonus(4)]),
    _relic("bet-bonus-number", "Dealer's Whisper", "Number Card bet gains +0.35× multiplier.",
           Rarity.COMMON, 110, "🎴", [BetMultiplier("rank-number", 0.35)]),

    # Uncommon
    _relic("extra-draw-1", "Lucky Glove", "Gain +1 draw every round.",
           Rarity.UNCOMMON, 120, "🧤", [ExtraDraws(1)]),
    _relic("flat-bonus-8", "Lucky Coin", "Every draw awards +8 bonus points.",
           Rarity.UNCOMMON, 140, "💠", [FlatBonus(8)]),
    _relic("bet-bonus-red", "Ruby Lens", "Red Cards bet gains +0.4× multiplier.",
           Rarity.UNCOMMON, 150, "💎", [BetMultiplier("color-red", 0.4)], ["red-synergy"]),
    _relic("bet-bonus-high", "High Stakes Loop", "High Value bet gains +0.5× multiplier.",
           Rarity.UNCOMMON, 170, "🎯", [BetMultiplier("value-high", 0.5)]),
    _relic("interest-boost-1", "Compound Prism", "Increase bank interest by +3%.",
           Rarity.UNCOMMON, 160, "🔮", [InterestRate(0.03)], ["interest-synergy"]),
    _relic("synergy-interest-compound", "Exponential Vault",
           "Gain +1% interest for each interest item owned.",
           Rarity.UNCOMMON, 140, "📈",
           [InterestRate(0.02), SynergyMultiplier("interest-synergy", 0.01)], ["interest-synergy"]),
    _relic("transform-banker-1", "Banker's Ledger",
           "[Banker 1/3] Gain +3% interest. Transform: +8% interest total.",
           Rarity.UNCOMMON, 130, "📒", [InterestRate(0.03), Transformation("banker", 1)]),
    _relic("transform-banker-2", "Banker's Seal",
           "[Banker 2/3] Every draw awards +5 points. Transform: +8% interest total.",
           Rarity.UNCOMMON, 130, "🔏", [FlatBonus(5), Transformation("banker", 2)]),
    _relic("transform-banker-3", "Banker's Vault",
           "[Banker 3/3] Gain +2% interest. Transform: +8% interest total.",
           Rarity.UNCOMMON, 130, "🏦", [InterestRate(0.02), Transformation("banker", 3)]),
    _relic("conditional-comeback", "Underdog Spirit", "After missing a bet, next hit gains +1.0× multiplier.",
           Rarity.UNCOMMON, 160, "💪", [ConditionalBonus(Condition.ON_MISS, multiplier=1.0)]),

    # Rare
    _relic("extra-draw-2", "Chrono Deck", "Gain +2 draws every round.",
           Rarity.RARE, 240, "⏳", [ExtraDraws(2)]),
    _relic("bet-bonus-black", "Shadow Edge", "Black Cards bet gains +0.6× multiplier.",
           Rarity.RARE, 190, "🗡️", [BetMultiplier("color-black", 0.6)], ["black-synergy"]),
    _relic("bet-bonus-face", "Court Favor", "Face Card bet gains +0.8× multiplier.",
           Rarity.RARE, 210, "👑", [BetMultiplier("rank-face", 0.8)]),
    _relic("interest-boost-2", "Vault Engine", "Increase bank interest by +5%.",
           Rarity.RARE, 240, "🏦", [InterestRate(0.05)], ["interest-synergy"]),
    _relic("synergy-red-hunter", "Crimson Cascade", "Red bet gains +0.15× for each red-focused item you own.",
           Rarity.RARE, 210, "🌊",
           [BetMultiplier("color-red", 0.3), SynergyMultiplier("red-synergy", 0.15)], ["red-synergy"]),
    _relic("synergy-black-hunter", "Obsidian Chain", "Black bet gains +0.15× for each black-focused item you own.",
           Rarity.RARE, 210, "⛓️",
           [BetMultiplier("color-black", 0.3), SynergyMultiplier("black-synergy", 0.15)], ["black-synergy"]),
    _relic("transform-gambler-1", "Gambler's Die",
           "[Gambler 1/3] Extreme bets (Joker, Ace) gain +0.5× multiplier. Transform: +2.0× on extremes.",
           Rarity.RARE, 180, "🎲",
           [BetMultiplier("special-joker", 0.5), BetMultiplier("special-ace", 0.5), Transformation("gambler", 1)]),
    _relic("transform-gambler-2", "Gambler's Coin",
           "[Gambler 2/3] High Value bets gain +0.4× multiplier. Transform: +2.0× on extremes.",
           Rarity.RARE, 180, "🪙", [BetMultiplier("value-high", 0.4), Transformation("gambler", 2)]),
    _relic("transform-gambler-3", "Gambler's Charm",
           "[Gambler 3/3] Gain +1 draw. Transform: +2.0× on extremes.",
           Rarity.RARE, 180, "🍀", [ExtraDraws(1), Transformation("gambler", 3)]),
    _relic("conditional-double-down", "Double or Nothing",
           "When you HIT a bet, gain 50 extra bank. When you MISS, lose 15 bank.",
           Rarity.RARE, 200, "⚡",
           [ConditionalBonus(Condition.ON_HIT, bank_reward=50), ConditionalBonus(Condition.ON_MISS, bank_penalty=15)]),
    _relic("global-small", "Lucky Star", "ALL bets gain +0.15× multiplier.",
           Rarity.RARE, 200, "⭐", [GlobalMultiplier(0.15)]),

    # Legendary
    _relic("bet-bonus-joker", "Wild Antenna", "Joker bet gains +1.5× multiplier.",
           Rarity.LEGENDARY, 360, "🃏", [BetMultiplier("special-joker", 1.5)]),
    _relic("flat-bonus-15", "Golden Effigy", "Every draw awards +15 bonus points.",
           Rarity.LEGENDARY, 320, "🏆", [FlatBonus(15)]),
    _relic("extra-draw-legendary", "Temporal Crown", "Gain +3 draws every round.",
           Rarity.LEGENDARY, 440, "🕰️", [ExtraDraws(3)]),
    _relic("interest-boost-legendary", "Time Dividend", "Increase bank interest by +8%.",
           Rarity.LEGENDARY, 360, "⏱️", [InterestRate(0.08)], ["interest-synergy"]),
    _relic("conditional-high-roller", "High Roller's Pride",
           "Extreme bets (Joker, Ace) gain +1.5× multiplier but cost 10 bank per hit.",
           Rarity.LEGENDARY, 300, "💸",
           [BetMultiplier("special-joker", 1.5), BetMultiplier("special-ace", 1.5),
            ConditionalBonus(Condition.ON_HIT, bank_penalty=10)]),
    _relic("conditional-streak", "Momentum Engine",
           "Each consecutive hit increases your multiplier by +0.1×. Resets on miss.",
           Rarity.LEGENDARY, 340, "🔥", [ComboCounter(0.1, Decay.ON_MISS)]),
    _relic("global-amplifier", "Universal Amplifier", "ALL bets gain +0.3× multiplier.",
           Rarity.LEGENDARY, 380, "✨", [GlobalMultiplier(0.3)]),
]

TEMPLATE_MAP = {t.id: t for t in UPGRADE_TEMPLATES}
TEMPLATE_BY_NAME = {t.name: t for t in UPGRADE_TEMPLATES}


# Synergy tags that feed a bet multiplier; "interest-synergy" feeds interest
SYNERGY_BET_TARGETS = {
    "red-synergy": "color-red",
    "black-synergy": "color-black",
}
INTEREST_SYNERGY_TAG = "interest-synergy"

TRANSFORMATION_THRESHOLD = 3


@dataclass(frozen=True)
class TransformationBonus:
    bet_multipliers: dict = field(default_factory=dict)
    interest_bonus: float = 0.0


TRANSFORMATION_SETS = {
    "gambler": TransformationBonus(bet_multipliers={"special-joker": 2.0, "special-ace": 2.0}),
    "banker": TransformationBonus(interest_bonus=0.08),
}


@dataclass
class SynergyBonus:
    multiplier: float = 0.0
    interest_bonus: float = 0.0


def _all_effects(upgrades: list, kind: type) -> list:
    return [e for u in upgrades for e in u.effects if isinstance(e, kind)]


def get_extra_draws(upgrades: list) -> int:
    return sum(e.value for e in _all_effects(upgrades, ExtraDraws))


def get_flat_bonus(upgrades: list) -> int:
    """Relic flat bonus only; deck and boss adjustments belong to the caller."""
    return sum(e.value for e in _all_effects(upgrades, FlatBonus))


def get_global_multiplier(upgrades: list) -> float:
    return sum(e.value for e in _all_effects(upgrades, GlobalMultiplier))


def count_tagged(upgrades: list, tag: str) -> int:
    return sum(1 for u in upgrades if tag in u.tags)


def get_synergy_bonuses(upgrades: list) -> dict[str, SynergyBonus]:
    """
    Per-tag synergy totals.

    Each synergy effect contributes value × (number of owned relics carrying
    the tag), counting the relic that holds the effect.
    """
    synergies: dict[str, SynergyBonus] = {}
    for effect in _all_effects(upgrades, SynergyMultiplier):
        total = effect.value * count_tagged(upgrades, effect.tag)
        entry = synergies.setdefault(effect.tag, SynergyBonus())
        if effect.tag == INTEREST_SYNERGY_TAG:
            entry.interest_bonus += total
        else:
            entry.multiplier += total
    return synergies


def get_completed_transformations(upgrades: list) -> set[str]:
    counts: dict[str, int] = {}
    for effect in _all_effects(upgrades, Transformation):
        counts[effect.set_id] = counts.get(effect.set_id, 0) + 1
    return {set_id for set_id, count in counts.items() if count >= TRANSFORMATION_THRESHOLD}


def get_transformation_bonuses(completed: set[str]) -> tuple[dict[str, float], float]:
    """Flat bonuses for completed sets: (bet multipliers, interest bonus)."""
    bet_multipliers: dict[str, float] = {}
    interest_bonus = 0.0
    for set_id in sorted(completed):
        bonus = TRANSFORMATION_SETS.get(set_id)
        if bonus is None:
            continue
        for bet_id, value in bonus.bet_multipliers.items():
            bet_multipliers[bet_id] = bet_multipliers.get(bet_id, 0.0) + value
        interest_bonus += bonus.interest_bonus
    return bet_multipliers, interest_bonus


def get_bet_bonus_map(upgrades: list) -> dict[str, float]:
    """bet id -> relic multiplier bonus, including synergies and completed sets."""
    bonus_map: dict[str, float] = {}
    for effect in _all_effects(upgrades, BetMultiplier):
        bonus_map[effect.bet_id] = bonus_map.get(effect.bet_id, 0.0) + effect.value

    synergies = get_synergy_bonuses(upgrades)
    for tag, bet_id in SYNERGY_BET_TARGETS.items():
        if tag in synergies:
            bonus_map[bet_id] = bonus_map.get(bet_id, 0.0) + synergies[tag].multiplier

    transform_bets, _ = get_transformation_bonuses(get_completed_transformations(upgrades))
    for bet_id, value in transform_bets.items():
        bonus_map[bet_id] = bonus_map.get(bet_id, 0.0) + value

    return bonus_map


def get_interest_bonus(upgrades: list) -> float:
    """Relic interest: direct effects, interest synergy and completed sets."""
    total = sum(e.value for e in _all_effects(upgrades, InterestRate))
    synergy = get_synergy_bonuses(upgrades).get(INTEREST_SYNERGY_TAG)
    if synergy:
        total += synergy.interest_bonus
    _, transform_interest = get_transformation_bonuses(get_completed_transformations(upgrades))
    return total + transform_interest


def get_combo_bonus(upgrades: list, combo_streak: int) -> float:
    return sum(e.value * combo_streak for e in _all_effects(upgrades, ComboCounter))


def has_round_decay(upgrades: list) -> bool:
    return any(e.decay == Decay.PER_ROUND for e in _all_effects(upgrades, ComboCounter))


def get_comeback_multiplier(upgrades: list) -> float:
    """Bonus multiplier for the hit that follows a miss."""
    return sum(e.multiplier for e in _all_effects(upgrades, ConditionalBonus)
               if e.condition == Condition.ON_MISS and e.multiplier)


def get_conditional_bank_delta(upgrades: list, hit: bool) -> int:
    """Bank rewards minus penalties for relics whose condition matches the draw."""
    delta = 0
    for effect in _all_effects(upgrades, ConditionalBonus):
        if hit and effect.condition == Condition.ON_HIT:
            delta += effect.bank_reward
            delta -= effect.bank_penalty
        elif not hit and effect.condition == Condition.ON_MISS:
            delta -= effect.bank_penalty
    return delta


def get_rarity_score(upgrades: list) -> int:
    points = {Rarity.LEGENDARY: 6, Rarity.RARE: 3, Rarity.UNCOMMON: 1, Rarity.COMMON: 0}
    return sum(points[u.rarity] for u in upgrades)


def describe_effect(effect: UpgradeEffect, bet_label=None) -> str:
    """Short human-readable effect text for shop and summary screens."""
    bet_label = bet_label or (lambda bet_id: bet_id)
    if isinstance(effect, ExtraDraws):
        return f"{effect.value:+d} draws per round"
    elif isinstance(effect, BetMultiplier):
        return f"{bet_label(effect.bet_id)} +{effect.value}×"
    elif isinstance(effect, FlatBonus):
        return f"+{effect.value} points per draw"
    elif isinstance(effect, InterestRate):
        return f"+{effect.value * 100:.0f}% interest"
    elif isinstance(effect, SynergyMultiplier):
        return f"+{effect.value} per {effect.tag} item"
    elif isinstance(effect, Transformation):
        return f"{effect.set_id.title()} set piece {effect.piece}/{TRANSFORMATION_THRESHOLD}"
    elif isinstance(effect, ConditionalBonus):
        parts = []
        if effect.multiplier:
            parts.append(f"+{effect.multiplier}×")
        if effect.flat_bonus:
            parts.append(f"+{effect.flat_bonus} points")
        if effect.bank_reward:
            parts.append(f"+{effect.bank_reward} bank")
        if effect.bank_penalty:
            parts.append(f"-{effect.bank_penalty} bank")
        return f"{effect.condition.value}: {', '.join(parts)}"
    elif isinstance(effect, ComboCounter):
        return f"+{effect.value}× per consecutive hit ({effect.decay.value} reset)"
    elif isinstance(effect, GlobalMultiplier):
        return f"All bets +{effect.value}×"
    raise TypeError(f"Unhandled effect: {effect!r}")
