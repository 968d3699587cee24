"""
Preset configurations for Card Clicker simulation.
Pairs a deck with a bet strategy, a shop style and optional starting relics.
"""

from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class StrategyType(Enum):
    SAFE = "safe"
    BASIC = "basic"
    GREEDY = "greedy"


@dataclass
class Preset:
    """A complete preset configuration for a run."""
    name: str
    description: str
    deck_id: str = "balanced"
    strategy: StrategyType = StrategyType.BASIC
    shop_strategy: str = "balanced"  # "balanced", "aggressive", "economy"
    starting_relics: list[str] = field(default_factory=list)  # template ids
    config_overrides: dict = field(default_factory=dict)


# Built-in presets
PRESETS = {
    "standard": Preset(
        name="Standard",
        description="Balanced deck, no relics, basic odds play",
    ),

    "safe_hands": Preset(
        name="Safe Hands",
        description="Always takes the likeliest hit",
        strategy=StrategyType.SAFE,
    ),

    "greedy": Preset(
        name="Greedy",
        description="Chases the best expected draw every time",
        strategy=StrategyType.GREEDY,
        shop_strategy="aggressive",
    ),

    "red_hunter": Preset(
        name="Red Hunter",
        description="Starts with the red synergy package",
        strategy=StrategyType.GREEDY,
        starting_relics=["bet-bonus-red-small", "bet-bonus-red", "synergy-red-hunter"],
    ),

    "banker": Preset(
        name="Banker",
        description="Interest-first economy on the Banker's deck",
        deck_id="banker",
        strategy=StrategyType.BASIC,
        shop_strategy="economy",
        starting_relics=["interest-boost-0"],
    ),

    "high_roller": Preset(
        name="High Roller",
        description="Premium-heavy deck with aggressive buying",
        deck_id="high-roller",
        strategy=StrategyType.GREEDY,
        shop_strategy="aggressive",
    ),

    "chaos": Preset(
        name="Chaos",
        description="110 cards and six jokers",
        deck_id="chaos",
        strategy=StrategyType.GREEDY,
    ),

    "no_shop": Preset(
        name="No Shop Challenge",
        description="Survive on the base deck without buying anything",
        config_overrides={"enable_shop": False},
    ),
}


def get_preset(name: str) -> Optional[Preset]:
    """Get a preset by name."""
    return PRESETS.get(name.lower().replace(" ", "_"))


def list_presets() -> list[str]:
    return list(PRESETS.keys())


def get_preset_info(name: str) -> Optional[dict]:
    preset = get_preset(name)
    if preset:
        return {
            "name": preset.name,
            "description": preset.description,
            "deck": preset.deck_id,
            "strategy": preset.strategy.value,
            "shop_strategy": preset.shop_strategy,
            "starting_relics": preset.starting_relics,
        }
    return None
