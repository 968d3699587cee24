"""
Card Clicker engine components.
"""

from .deck import Card, Deck, Suit, RANKS, RANK_VALUES, build_standard_deck, shuffle_deck
from .decks import DeckModifier, DeckPreset, DECK_PRESETS, get_deck_preset
from .bets import BetCategory, BetOption, BET_OPTIONS, get_bet
from .boss_modifiers import BossModifier, BossRoundState, BOSS_MODIFIERS, get_boss_for_round, is_boss_round
from .upgrades import OwnedUpgrade, ShopUpgrade, Rarity, UPGRADE_TEMPLATES
from .scoring import DrawBreakdown, score_draw
from .shop import ShopAI, generate_shop_choices
from .game import (
    ActionResult, GameConfig, GamePhase, RoundOutcome, RunState,
    calculate_round_target, new_state,
)
