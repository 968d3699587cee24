"""
Autoplay bet strategies for Card Clicker simulation.
"""

from dataclasses import dataclass
from typing import Optional

from .bets import BetOption, available_bets, hit_probability
from .game import DEFAULT_CONFIG, GameConfig, RunState
from .scoring import expected_draw_score


@dataclass
class BetEvaluation:
    """A legal bet with its odds over the remaining pile."""
    bet: BetOption
    hit_probability: float
    expected_score: float


def legal_bets(state: RunState) -> list[BetOption]:
    """Bets that may be drawn on now: not boss-disabled and outside the locked category."""
    bets = available_bets(state.boss.disabled_bet_ids())
    if state.locked_bet_category is not None:
        bets = [b for b in bets if b.category != state.locked_bet_category]
    return bets


def remaining_pile(state: RunState) -> list:
    return state.deck.cards or state.deck.builder()


def evaluate_bets(state: RunState) -> list[BetEvaluation]:
    pile = remaining_pile(state)
    boss = state.boss
    return [
        BetEvaluation(
            bet=bet,
            hit_probability=hit_probability(bet, pile),
            expected_score=expected_draw_score(bet, pile, state.owned_upgrades,
                                               state.combo_streak, state.last_bet_hit,
                                               boss, state.deck_modifiers),
        )
        for bet in legal_bets(state)
    ]


class BasicStrategy:
    """
    Picks the bet with the best hit chance × base multiplier.
    Ignores relics entirely.
    """

    name = "basic"

    def __init__(self, config: GameConfig = DEFAULT_CONFIG):
        self.config = config

    def rank(self, evaluation: BetEvaluation) -> float:
        return evaluation.hit_probability * evaluation.bet.base_multiplier

    def choose_bet(self, state: RunState) -> Optional[str]:
        evaluations = evaluate_bets(state)
        if not evaluations:
            return None
        return max(evaluations, key=self.rank).bet.id

    def should_cash_out(self, state: RunState) -> bool:
        """Cash out once the target is met and a guaranteed draw beats the best expected one."""
        if not state.target_achieved or state.draws_remaining <= 0:
            return False
        evaluations = evaluate_bets(state)
        best = max((e.expected_score for e in evaluations), default=0.0)
        return self.config.guaranteed_draw_value >= best


class SafeStrategy(BasicStrategy):
    """Always takes the likeliest hit."""

    name = "safe"

    def rank(self, evaluation: BetEvaluation) -> float:
        return evaluation.hit_probability


class GreedyStrategy(BasicStrategy):
    """Maximizes expected draw score using the full scoring pipeline."""

    name = "greedy"

    def rank(self, evaluation: BetEvaluation) -> float:
        return evaluation.expected_score


STRATEGIES = {cls.name: cls for cls in (SafeStrategy, BasicStrategy, GreedyStrategy)}


def get_strategy(name: str, config: GameConfig = DEFAULT_CONFIG) -> BasicStrategy:
    if name not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {name}")
    return STRATEGIES[name](config)
