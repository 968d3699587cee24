"""
Card Clicker: a push-your-luck card wagering game and simulator.
"""

from .engine.deck import Card, Deck, Suit
from .engine.game import ActionResult, GameConfig, GamePhase, RunState, new_state
from .engine.session import GameSession

__version__ = "0.1.0"
