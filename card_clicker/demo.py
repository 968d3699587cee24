#!/usr/bin/env python3
"""
Demo script for Card Clicker.
Walks through bets, draw scoring, relic synergies and a simulated run.
"""

import random

from .engine import game
from .engine.bets import BET_OPTIONS, get_bet
from .engine.boss_modifiers import BOSS_MODIFIERS, BossRoundState
from .engine.deck import Suit, create_card, create_joker_card
from .engine.scoring import score_draw
from .engine.upgrades import TEMPLATE_MAP, get_bet_bonus_map, get_interest_bonus
from .simulator import Simulator


def demo_bets():
    print("=" * 60)
    print("WAGER CATALOG")
    print("=" * 60)
    for bet in BET_OPTIONS:
        print(f"  {bet.category.value:<10} {bet.label:<22} {bet.base_multiplier}×  ({bet.risk.value})")


def demo_scoring():
    print("\n" + "=" * 60)
    print("DRAW SCORING")
    print("=" * 60)

    red = get_bet("color-red")
    for card in (create_card(Suit.HEARTS, "10"), create_card(Suit.SPADES, "K"),
                 create_joker_card("red", "joker-red")):
        breakdown = score_draw(card, red, [])
        print(f"\n{card} on {red.label}: {breakdown.score}")
        for line in breakdown.details:
            print(f"  {line}")


def demo_relics():
    print("\n" + "=" * 60)
    print("RELIC SYNERGY")
    print("=" * 60)

    owned = [TEMPLATE_MAP[t] for t in ("bet-bonus-red-small", "bet-bonus-red", "synergy-red-hunter")]
    print(f"Owned: {', '.join(u.name for u in owned)}")
    print(f"  Red bet bonus: +{get_bet_bonus_map(owned)['color-red']:.2f}×")

    bankers = [TEMPLATE_MAP[f"transform-banker-{i}"] for i in (1, 2, 3)]
    print(f"Owned: {', '.join(u.name for u in bankers)}")
    print(f"  Interest bonus: +{get_interest_bonus(bankers) * 100:.0f}%")


def demo_bosses():
    print("\n" + "=" * 60)
    print("BOSS ROUNDS")
    print("=" * 60)
    for i, boss in enumerate(BOSS_MODIFIERS):
        round_number = (i + 1) * 5
        state = BossRoundState(round_number)
        print(f"  Round {round_number:>2}: {boss.name:<16} target ×{state.get_target_multiplier()}"
              f"  {boss.description}")


def demo_round():
    print("\n" + "=" * 60)
    print("SINGLE ROUND")
    print("=" * 60)

    rng = random.Random(3)
    state = game.start_run(game.new_state(), rng=rng).state
    print(f"Target {state.round_target}, {state.draws_remaining} draws")

    bets = ["color-red", "rank-number", "color-black", "value-high"]
    i = 0
    while state.draws_remaining > 0 and state.pending is None:
        result = game.select_bet(state, bets[i % len(bets)])
        i += 1
        if not result.accepted:
            continue
        result = game.draw(result.state, rng)
        state = result.state
        print(f"  {result.message}  (score {state.round_score}/{state.round_target})")

    state = game.resolve_pending(state, rng).state
    print(f"Phase: {state.game_phase.value}, bank {state.bank}")


def demo_simulation():
    print("\n" + "=" * 60)
    print("SIMULATED RUN")
    print("=" * 60)
    print(Simulator(seed=11, max_rounds=15).run("red_hunter", verbose=True))


if __name__ == "__main__":
    demo_bets()
    demo_scoring()
    demo_relics()
    demo_bosses()
    demo_round()
    demo_simulation()
