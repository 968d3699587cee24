#!/usr/bin/env python3
"""
Compare autoplay strategies for Card Clicker simulation.
"""

import time

from .presets import StrategyType, list_presets
from .simulator import Simulator


def compare_strategies(preset: str = "standard", num_runs: int = 100,
                       seed: int = None, max_rounds: int = 30) -> dict:
    """Run the same preset under each strategy and compare results."""
    sim = Simulator(seed=seed, max_rounds=max_rounds)

    print("=" * 70)
    print(f"STRATEGY COMPARISON ({num_runs} runs each, preset: {preset})")
    print("=" * 70)

    results = {}
    for strategy in StrategyType:
        print(f"\nTesting: {strategy.value}...", end=" ", flush=True)
        start_time = time.time()
        batch = sim.run_batch(preset, runs=num_runs, strategy_override=strategy)
        elapsed = time.time() - start_time
        results[strategy.value] = batch
        print(f"done ({elapsed:.1f}s)")

    print("\n" + "=" * 70)
    print(f"{'Strategy':<10} {'Avg Cleared':>12} {'Max Round':>10} {'Avg Bank':>10} {'Hit %':>7}")
    print("-" * 70)
    for name, batch in sorted(results.items(), key=lambda x: -x[1].avg_rounds_cleared):
        print(f"{name:<10} {batch.avg_rounds_cleared:>12.2f} {batch.max_round:>10} "
              f"{batch.avg_bank:>10.0f} {batch.avg_hit_rate:>6.1f}%")
    print("=" * 70)
    return results


def detailed_single_run(preset: str, strategy: str, seed: int = None):
    """Play one run and print every round."""
    summary = Simulator(seed=seed).run(preset, verbose=True,
                                       strategy_override=StrategyType(strategy))
    print(summary)
    for shop in summary.shop_history:
        if shop.relics_bought:
            print(f"  Round {shop.round_number} shop: {', '.join(shop.relics_bought)}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Compare Card Clicker autoplay strategies")
    parser.add_argument("--preset", default="standard", choices=list_presets())
    parser.add_argument("--runs", type=int, default=100, help="Number of runs per strategy")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-rounds", type=int, default=30)
    parser.add_argument("--detailed", type=str, choices=[s.value for s in StrategyType],
                        help="Run a detailed single game with this strategy")

    args = parser.parse_args()

    if args.detailed:
        detailed_single_run(args.preset, args.detailed, args.seed)
    else:
        compare_strategies(args.preset, args.runs, args.seed, args.max_rounds)
