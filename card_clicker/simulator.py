"""
Main API for Card Clicker simulation.
Plays whole runs with an autoplay strategy and summarizes them.
"""

import random
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .engine import game
from .engine.decks import DECK_PRESETS
from .engine.game import GameConfig, GamePhase, RoundOutcome, RunState
from .engine.history import RunHistory
from .engine.profiles import PlayerProfile
from .engine.shop import ShopAI
from .engine.strategy import get_strategy
from .engine.upgrades import TEMPLATE_MAP
from .presets import Preset, StrategyType, get_preset, list_presets, PRESETS

# Simulated runs may use any deck
SIMULATION_PROFILE = PlayerProfile(
    id="simulator", name="Simulator",
    unlocked_decks=tuple(p.id for p in DECK_PRESETS),
)


@dataclass
class RoundDetail:
    """Details of a single round."""
    round_number: int
    boss_name: Optional[str]
    score: int
    target: int
    success: bool
    draws_used: int
    hits: int
    interest_earned: int = 0
    cashed_out_draws: int = 0

    @property
    def margin_pct(self) -> float:
        if self.target == 0:
            return 0
        return (self.score - self.target) / self.target * 100


@dataclass
class ShopDetail:
    """Details of a shop visit."""
    round_number: int
    offers: list[str]
    relics_bought: list[str]
    bank_spent: int
    bank_remaining: int


@dataclass
class RunSummary:
    """Summary of a simulation run."""
    survived: bool  # reached the round cap without losing
    round_reached: int
    rounds_cleared: int
    final_bank: int
    relics_collected: list[str]
    transformations: list[str]
    total_draws: int
    total_hits: int
    preset_used: str
    round_history: list[RoundDetail] = field(default_factory=list)
    shop_history: list[ShopDetail] = field(default_factory=list)
    bosses_encountered: list[str] = field(default_factory=list)

    @property
    def hit_rate(self) -> float:
        return self.total_hits / self.total_draws * 100 if self.total_draws else 0.0

    def __str__(self):
        result = "SURVIVED" if self.survived else "GAME OVER"
        lines = [
            f"{'='*50}",
            f"  {result} - Round {self.round_reached}",
            f"{'='*50}",
            f"  Rounds cleared: {self.rounds_cleared}",
            f"  Final bank: {self.final_bank}",
            f"  Hit rate: {self.total_hits}/{self.total_draws} ({self.hit_rate:.1f}%)",
            f"  Relics: {', '.join(self.relics_collected) if self.relics_collected else 'None'}",
        ]
        if self.transformations:
            lines.append(f"  Transformations: {', '.join(self.transformations)}")
        lines.append(f"{'='*50}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "survived": self.survived,
            "round_reached": self.round_reached,
            "rounds_cleared": self.rounds_cleared,
            "final_bank": self.final_bank,
            "relics_collected": self.relics_collected,
            "transformations": self.transformations,
            "total_draws": self.total_draws,
            "total_hits": self.total_hits,
            "preset_used": self.preset_used,
        }


@dataclass
class BatchResult:
    """Results from multiple simulation runs."""
    runs: int
    survivals: int
    avg_rounds_cleared: float
    avg_round: float
    max_round: int
    avg_bank: float
    avg_relics: float
    avg_hit_rate: float
    round_distribution: dict[int, int]
    preset_used: str

    def __str__(self):
        lines = [
            f"{'='*50}",
            f"  BATCH RESULTS ({self.runs} runs)",
            f"  Preset: {self.preset_used}",
            f"{'='*50}",
            f"  Survived to cap: {self.survivals}/{self.runs}",
            f"  Avg rounds cleared: {self.avg_rounds_cleared:.1f}",
            f"  Avg round reached: {self.avg_round:.1f}",
            f"  Max round reached: {self.max_round}",
            f"  Avg final bank: {self.avg_bank:.0f}",
            f"  Avg relics collected: {self.avg_relics:.1f}",
            f"  Avg hit rate: {self.avg_hit_rate:.1f}%",
            "",
            "  Round distribution:",
        ]

        for round_number in sorted(self.round_distribution.keys()):
            count = self.round_distribution[round_number]
            pct = count / self.runs * 100
            bar = "█" * int(pct / 2)
            lines.append(f"    Round {round_number:>2}: {count:>3} ({pct:>5.1f}%) {bar}")

        lines.append(f"{'='*50}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "runs": self.runs,
            "survivals": self.survivals,
            "avg_rounds_cleared": self.avg_rounds_cleared,
            "avg_round": self.avg_round,
            "max_round": self.max_round,
            "avg_bank": self.avg_bank,
            "avg_relics": self.avg_relics,
            "avg_hit_rate": self.avg_hit_rate,
            "round_distribution": self.round_distribution,
            "preset_used": self.preset_used,
        }


class Simulator:
    """
    Main simulator class.

    Usage:
        sim = Simulator(seed=7)
        result = sim.run("red_hunter")
        print(result)

        # Or run many:
        batch = sim.run_batch("standard", runs=100)
        print(batch)
    """

    def __init__(self, seed: Optional[int] = None, max_rounds: int = 30,
                 log_dir: Optional[str] = None):
        self.rng = random.Random(seed)
        self.max_rounds = max_rounds
        self.log_dir = Path(log_dir) if log_dir else None

    def get_available_presets(self) -> list[dict]:
        return [
            {
                "id": key,
                "name": p.name,
                "description": p.description,
                "deck": p.deck_id,
                "strategy": p.strategy.value,
                "starting_relics": p.starting_relics,
            }
            for key, p in PRESETS.items()
        ]

    def _resolve_preset(self, preset: Union[str, Preset]) -> tuple[Preset, str]:
        if isinstance(preset, str):
            p = get_preset(preset)
            if p is None:
                raise ValueError(f"Unknown preset: {preset}. Available: {list_presets()}")
            return p, preset
        return preset, preset.name

    def run(self, preset: Union[str, Preset] = "standard",
            verbose: bool = False,
            strategy_override: Optional[StrategyType] = None) -> RunSummary:
        """
        Run a single simulation.

        Args:
            preset: Preset name (string) or Preset object
            verbose: Print each round as it resolves
            strategy_override: StrategyType replacing the preset's strategy

        Returns:
            RunSummary with results
        """
        p, preset_name = self._resolve_preset(preset)

        config = GameConfig()
        config_names = {f.name for f in fields(GameConfig)}
        for key, value in p.config_overrides.items():
            if key in config_names:
                setattr(config, key, value)
        enable_shop = p.config_overrides.get("enable_shop", True)

        strategy = get_strategy((strategy_override or p.strategy).value, config)
        shop_ai = ShopAI(p.shop_strategy)
        starting = tuple(TEMPLATE_MAP[r] for r in p.starting_relics if r in TEMPLATE_MAP)

        result = game.start_run(game.new_state(), p.deck_id, SIMULATION_PROFILE,
                                starting, self.rng, config)
        state = result.state
        history = RunHistory(preset_name=preset_name, deck_id=state.active_deck_id)
        history.add_run_start(bank=state.bank, relics=[u.name for u in state.owned_upgrades])

        round_history: list[RoundDetail] = []
        shop_history: list[ShopDetail] = []
        round_hits = 0
        round_allowance = state.draws_remaining
        total_draws = 0
        total_hits = 0
        survived = False

        def close_round(closing: RunState, settlement=None):
            boss = closing.boss.boss
            cashed_out = settlement.conversion_points // config.guaranteed_draw_value if settlement else 0
            detail = RoundDetail(
                round_number=closing.round_number,
                boss_name=boss.name if boss else None,
                score=closing.round_score,
                target=closing.round_target,
                success=closing.round_outcome == RoundOutcome.WON,
                draws_used=round_allowance - cashed_out - closing.draws_remaining,
                hits=round_hits,
                interest_earned=settlement.interest_earned if settlement else 0,
                cashed_out_draws=cashed_out,
            )
            round_history.append(detail)
            history.add_round_result(detail.round_number, detail.score, detail.target,
                                     detail.success, detail.draws_used,
                                     detail.interest_earned, detail.cashed_out_draws,
                                     detail.boss_name)
            if verbose:
                status = "WIN" if detail.success else "LOSS"
                print(f"Round {detail.round_number}: {detail.score:,}/{detail.target:,} - {status}")

        while state.game_phase != GamePhase.GAME_OVER:
            if state.game_phase == GamePhase.GAMEPLAY:
                if state.pending is not None:
                    result = game.resolve_pending(state, self.rng, config)
                elif strategy.should_cash_out(state):
                    result = game.cash_out_unused_draws(state, self.rng, config)
                else:
                    bet_id = strategy.choose_bet(state)
                    if bet_id is None:
                        break
                    if bet_id != state.selected_bet_id:
                        state = game.select_bet(state, bet_id).state
                    result = game.draw(state, self.rng, config)
                    if result.draw is not None:
                        total_draws += 1
                        round_hits += result.draw.hit
                        total_hits += result.draw.hit
                        history.add_draw(state.round_number, str(result.draw.card), bet_id,
                                         result.draw.hit, result.draw.score,
                                         result.draw.bank_delta)

                if not result.accepted:
                    break
                lost_now = (result.state.round_outcome == RoundOutcome.LOST
                            and state.round_outcome == RoundOutcome.ACTIVE)
                if result.settlement is not None or lost_now:
                    close_round(result.state, result.settlement)
                state = result.state

            elif state.game_phase == GamePhase.SHOP_TRANSITION:
                state = game.resolve_pending(state, self.rng, config).state

            elif state.game_phase == GamePhase.SHOP:
                if state.round_number >= self.max_rounds:
                    survived = True
                    break
                bank_before = state.bank
                bought = []
                if enable_shop:
                    for offer_id in shop_ai.decide_purchases(state.current_shop_choices, state):
                        purchase = game.buy_upgrade(state, offer_id)
                        if purchase.accepted:
                            state = purchase.state
                            relic = state.owned_upgrades[-1]
                            bought.append(relic.name)
                            history.add_relic_acquired(state.round_number, relic.name,
                                                       relic.rarity.value)
                shop_history.append(ShopDetail(
                    round_number=state.round_number,
                    offers=[o.name for o in state.current_shop_choices],
                    relics_bought=bought,
                    bank_spent=bank_before - state.bank,
                    bank_remaining=state.bank,
                ))
                history.add_shop_visit(state.round_number, bought, bank_before - state.bank,
                                       state.bank, len(state.current_shop_choices))
                state = game.proceed_to_next_round(state, self.rng, config).state
                round_hits = 0
                round_allowance = state.draws_remaining
            else:
                break

        rounds_cleared = sum(1 for r in round_history if r.success)
        history.add_run_end(state.round_number, rounds_cleared, state.bank,
                            [u.name for u in state.owned_upgrades],
                            list(state.transformations_completed))

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            history.save(str(self.log_dir / f"run_{timestamp}_{preset_name}.json"))

        return RunSummary(
            survived=survived,
            round_reached=state.round_number,
            rounds_cleared=rounds_cleared,
            final_bank=state.bank,
            relics_collected=[u.name for u in state.owned_upgrades],
            transformations=list(state.transformations_completed),
            total_draws=total_draws,
            total_hits=total_hits,
            preset_used=preset_name,
            round_history=round_history,
            shop_history=shop_history,
            bosses_encountered=[r.boss_name for r in round_history if r.boss_name],
        )

    def run_batch(self, preset: Union[str, Preset] = "standard",
                  runs: int = 100, verbose: bool = False,
                  strategy_override: Optional[StrategyType] = None) -> BatchResult:
        """
        Run multiple simulations and aggregate results.
        """
        if runs < 1:
            raise ValueError(f"runs must be at least 1, got {runs}")
        _, preset_name = self._resolve_preset(preset)

        summaries = []
        for i in range(runs):
            if verbose and (i + 1) % 10 == 0:
                print(f"  Run {i + 1}/{runs}...")
            summaries.append(self.run(preset, verbose=False, strategy_override=strategy_override))

        round_distribution: dict[int, int] = {}
        for s in summaries:
            round_distribution[s.round_reached] = round_distribution.get(s.round_reached, 0) + 1

        return BatchResult(
            runs=runs,
            survivals=sum(1 for s in summaries if s.survived),
            avg_rounds_cleared=sum(s.rounds_cleared for s in summaries) / runs,
            avg_round=sum(s.round_reached for s in summaries) / runs,
            max_round=max(s.round_reached for s in summaries),
            avg_bank=sum(s.final_bank for s in summaries) / runs,
            avg_relics=sum(len(s.relics_collected) for s in summaries) / runs,
            avg_hit_rate=sum(s.hit_rate for s in summaries) / runs,
            round_distribution=round_distribution,
            preset_used=preset_name,
        )


# Convenience functions
def run(preset: str = "standard", verbose: bool = False, seed: Optional[int] = None) -> RunSummary:
    """Quick run with a default simulator."""
    return Simulator(seed=seed).run(preset, verbose)


def run_batch(preset: str = "standard", runs: int = 100, verbose: bool = False,
              seed: Optional[int] = None) -> BatchResult:
    """Quick batch run with a default simulator."""
    return Simulator(seed=seed).run_batch(preset, runs, verbose)
