"""
Run state and reducer-style actions for Card Clicker.

Every action takes a RunState and returns an ActionResult holding a new
state; the input state is never mutated. Timed transitions are recorded on
the state as a PendingTransition and applied by resolve_pending.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .bets import BetCategory, get_bet
from .boss_modifiers import BossRoundState
from .deck import Card, Deck
from .decks import (
    DEFAULT_DECK_ID, DeckModifier, get_deck_preset,
)
from .profiles import PlayerProfile, is_deck_unlocked
from .scoring import (
    BASE_INTEREST, JOKER_BASE_SCORE, MISS_FACTOR, DrawBreakdown,
    apply_bank_delta, compute_interest_rate, score_draw,
)
from .shop import generate_shop_choices
from .upgrades import (
    OwnedUpgrade, ShopUpgrade, get_completed_transformations,
    get_extra_draws, get_rarity_score, has_round_decay,
)

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    MENU = "menu"
    GAMEPLAY = "gameplay"
    SHOP_TRANSITION = "shopTransition"
    SHOP = "shop"
    GAME_OVER = "gameOver"


class RoundOutcome(Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class PendingKind(Enum):
    FINALIZE_ROUND = "finalizeRound"
    ENTER_SHOP = "enterShop"
    GAME_OVER = "gameOver"


@dataclass(frozen=True)
class PendingTransition:
    """A phase change the presentation layer should apply after ``delay_ms``."""
    kind: PendingKind
    delay_ms: int


@dataclass
class GameConfig:
    """Configuration for a game run."""
    base_draws: int = 5
    base_interest: float = BASE_INTEREST
    guaranteed_draw_value: int = 12
    joker_base_score: int = JOKER_BASE_SCORE
    miss_factor: float = MISS_FACTOR
    shop_transition_delay_ms: int = 1100
    round_finalize_delay_ms: int = 900
    game_over_delay_ms: int = 600
    max_recent_cards: int = 6
    min_round_target: int = 25


DEFAULT_CONFIG = GameConfig()


@dataclass(frozen=True)
class RecentCardEntry:
    """One recent draw, newest first on the state."""
    card: Card
    bet_id: str
    hit: bool
    gain: int

    def to_dict(self) -> dict:
        return {"card": self.card.to_dict(), "bet_id": self.bet_id,
                "hit": self.hit, "gain": self.gain}

    @classmethod
    def from_dict(cls, data: dict) -> "RecentCardEntry":
        return cls(card=Card.from_dict(data["card"]), bet_id=str(data["bet_id"]),
                   hit=bool(data["hit"]), gain=int(data["gain"]))


@dataclass
class RunState:
    """Round and run state for one player."""
    round_number: int = 1
    round_score: int = 0
    round_target: int = 30
    draws_remaining: int = 5
    round_outcome: RoundOutcome = RoundOutcome.ACTIVE
    bank: int = 0
    selected_bet_id: Optional[str] = None
    owned_upgrades: list[OwnedUpgrade] = field(default_factory=list)
    combo_streak: int = 0
    last_bet_hit: Optional[bool] = None
    locked_bet_category: Optional[BetCategory] = None
    require_bet_change_after_hit: bool = False
    target_achieved: bool = False
    game_phase: GamePhase = GamePhase.MENU
    deck: Deck = field(default_factory=Deck)
    current_shop_choices: list[ShopUpgrade] = field(default_factory=list)
    purchased_shop_ids: list[str] = field(default_factory=list)
    active_deck_id: str = DEFAULT_DECK_ID
    deck_modifiers: DeckModifier = field(default_factory=DeckModifier)
    recent_cards: list[RecentCardEntry] = field(default_factory=list)
    transformations_completed: list[str] = field(default_factory=list)
    pending: Optional[PendingTransition] = None

    @property
    def boss(self) -> BossRoundState:
        return BossRoundState(self.round_number)

    @property
    def has_run(self) -> bool:
        """True if there is a run worth continuing."""
        return bool(self.deck.cards) or self.round_number > 1 or self.round_score > 0

    def copy(self) -> "RunState":
        return replace(
            self,
            owned_upgrades=list(self.owned_upgrades),
            deck=Deck(builder=self.deck.builder, cards=list(self.deck.cards)),
            current_shop_choices=list(self.current_shop_choices),
            purchased_shop_ids=list(self.purchased_shop_ids),
            recent_cards=list(self.recent_cards),
            transformations_completed=list(self.transformations_completed),
        )


@dataclass
class RoundSettlement:
    """Result of finalizing a won round."""
    round_number: int
    base_score: int
    conversion_points: int
    final_score: int
    interest_rate: float
    interest_earned: int
    bank_before: int
    bank_after: int


@dataclass
class ActionResult:
    """Outcome of a player action. Rejected actions carry the unchanged state."""
    state: RunState
    accepted: bool = True
    message: str = ""
    draw: Optional[DrawBreakdown] = None
    settlement: Optional[RoundSettlement] = None


def _reject(state: RunState, message: str) -> ActionResult:
    return ActionResult(state=state, accepted=False, message=message)


def calculate_round_target(round_number: int, owned: list,
                           config: GameConfig = DEFAULT_CONFIG) -> int:
    """
    Score needed to clear a round.

    Exponential growth plus a linear momentum term, scaled up by the rarity
    of owned relics, then by the boss multiplier on boss rounds.
    """
    rounds_completed = max(0, round_number - 1)
    exponential = 30 * 1.55 ** rounds_completed
    momentum = 6 * rounds_completed
    rarity_pressure = 1 + 0.03 * get_rarity_score(owned)
    target = max(config.min_round_target, math.floor((exponential + momentum) * rarity_pressure))

    multiplier = BossRoundState(round_number).get_target_multiplier()
    if multiplier != 1.0:
        target = math.floor(target * multiplier)
    return target


def get_draw_allowance(owned: list, deck_modifiers: Optional[DeckModifier] = None,
                       config: GameConfig = DEFAULT_CONFIG) -> int:
    deck_extra = deck_modifiers.extra_draws if deck_modifiers else 0
    return max(1, config.base_draws + deck_extra + get_extra_draws(owned))


def new_state() -> RunState:
    """A fresh menu state with no run in progress."""
    return RunState()


def start_run(state: RunState, deck_id: str = DEFAULT_DECK_ID,
              profile: Optional[PlayerProfile] = None,
              starting_upgrades: tuple = (), rng=None,
              config: GameConfig = DEFAULT_CONFIG) -> ActionResult:
    """Begin a new run on the chosen deck, discarding any run in progress."""
    if state.game_phase not in (GamePhase.MENU, GamePhase.GAME_OVER):
        return _reject(state, "Finish or reset the current run first")
    preset = get_deck_preset(deck_id)
    if preset.requirement is not None and not is_deck_unlocked(profile, preset.id):
        return _reject(state, f"{preset.name} is locked: {preset.requirement.label}")

    owned = [u if isinstance(u, OwnedUpgrade) else OwnedUpgrade.from_offer(u, 0)
             for u in starting_upgrades]
    modifiers = preset.modifiers
    fresh = RunState(
        round_number=1,
        round_target=calculate_round_target(1, owned, config),
        draws_remaining=get_draw_allowance(owned, modifiers, config),
        bank=modifiers.starting_bank,
        owned_upgrades=owned,
        game_phase=GamePhase.GAMEPLAY,
        deck=Deck.fresh(preset.build_deck, rng),
        active_deck_id=preset.id,
        deck_modifiers=modifiers,
        transformations_completed=sorted(get_completed_transformations(owned)),
    )
    logger.info("Run started on %s (target %d)", preset.name, fresh.round_target)
    return ActionResult(state=fresh, message=f"New run: {preset.name}")


def continue_run(state: RunState) -> ActionResult:
    """Resume a saved run from the menu in the phase its round implies."""
    if state.game_phase != GamePhase.MENU:
        return _reject(state, "Already in a run")
    if not state.has_run:
        return _reject(state, "No run to continue")

    new = state.copy()
    new.pending = None
    if new.round_outcome == RoundOutcome.LOST:
        new.game_phase = GamePhase.GAME_OVER
    elif new.round_outcome == RoundOutcome.WON:
        new.game_phase = GamePhase.SHOP
    else:
        new.game_phase = GamePhase.GAMEPLAY
    return ActionResult(state=new, message=f"Round {new.round_number}")


def return_to_menu(state: RunState) -> ActionResult:
    """Leave to the menu keeping the run available for continue_run."""
    new = state.copy()
    new.game_phase = GamePhase.MENU
    new.pending = None
    return ActionResult(state=new)


def reset_to_menu(state: RunState) -> ActionResult:
    """Discard the run entirely."""
    logger.debug("Run reset from phase %s", state.game_phase.value)
    return ActionResult(state=new_state(), message="Run discarded")


def select_bet(state: RunState, bet_id: str) -> ActionResult:
    if state.game_phase != GamePhase.GAMEPLAY:
        return _reject(state, "Not in a round")
    bet = get_bet(bet_id)
    if bet is None:
        return _reject(state, "Unknown bet")
    if state.boss.is_bet_disabled(bet.id):
        return _reject(state, f"{bet.label} is disabled this round")
    if state.locked_bet_category is not None and bet.category == state.locked_bet_category:
        return _reject(state, f"Pick a bet outside {bet.category.value} after a hit")

    new = state.copy()
    new.selected_bet_id = bet.id
    if new.locked_bet_category is not None:
        new.locked_bet_category = None
        new.require_bet_change_after_hit = False
    return ActionResult(state=new, message=f"Betting on {bet.label}")


def draw(state: RunState, rng=None, config: GameConfig = DEFAULT_CONFIG) -> ActionResult:
    """Draw one card against the selected bet and resolve the round if out of draws."""
    if state.game_phase != GamePhase.GAMEPLAY or state.round_outcome != RoundOutcome.ACTIVE:
        return _reject(state, "Round is not active")
    if state.draws_remaining <= 0:
        return _reject(state, "No draws left")
    bet = get_bet(state.selected_bet_id)
    if bet is None:
        return _reject(state, "Select a bet first")
    boss = state.boss
    if boss.is_bet_disabled(bet.id):
        return _reject(state, f"{bet.label} is disabled this round")
    if state.locked_bet_category is not None and bet.category == state.locked_bet_category:
        return _reject(state, f"Pick a bet outside {bet.category.value} after a hit")

    new = state.copy()
    card = new.deck.draw(rng)
    breakdown = score_draw(card, bet, new.owned_upgrades,
                           combo_streak=new.combo_streak,
                           last_bet_hit=new.last_bet_hit,
                           boss=boss,
                           deck_modifiers=new.deck_modifiers,
                           joker_base_score=config.joker_base_score,
                           miss_factor=config.miss_factor)

    if breakdown.hit:
        new.combo_streak += 1
        new.locked_bet_category = bet.category
        new.require_bet_change_after_hit = True
    else:
        new.combo_streak = 0
        new.locked_bet_category = None
        new.require_bet_change_after_hit = False
    new.last_bet_hit = breakdown.hit

    new.bank = apply_bank_delta(new.bank, breakdown.bank_delta)
    new.round_score += breakdown.score
    new.draws_remaining -= 1
    entry = RecentCardEntry(card=card, bet_id=bet.id, hit=breakdown.hit, gain=breakdown.score)
    new.recent_cards = [entry] + new.recent_cards[:config.max_recent_cards - 1]

    verdict = "Hit" if breakdown.hit else "Miss"
    message = f"{verdict}! {card} +{breakdown.score}"
    if not new.target_achieved and new.round_score >= new.round_target:
        new.target_achieved = True
        message += " · Target reached!"

    if new.draws_remaining == 0:
        if new.target_achieved:
            new.pending = PendingTransition(PendingKind.FINALIZE_ROUND, config.round_finalize_delay_ms)
        else:
            new.round_outcome = RoundOutcome.LOST
            new.pending = PendingTransition(PendingKind.GAME_OVER, config.game_over_delay_ms)
            logger.info("Round %d lost (%d/%d)", new.round_number, new.round_score, new.round_target)
            message += " · Round lost"

    return ActionResult(state=new, message=message, draw=breakdown)


def finalize_round(state: RunState, convert_unused: bool = False, rng=None,
                   config: GameConfig = DEFAULT_CONFIG) -> ActionResult:
    """
    Bank the round score, pay interest and open the shop for the next round.

    With ``convert_unused`` each remaining draw is worth a guaranteed value
    added to both the round score and the bank.
    """
    if state.round_outcome != RoundOutcome.ACTIVE or state.game_phase != GamePhase.GAMEPLAY:
        return _reject(state, "Round already finalized")
    if not state.target_achieved and state.round_score < state.round_target:
        return _reject(state, "Target not reached yet")

    new = state.copy()
    base_score = new.round_score
    conversion = new.draws_remaining * config.guaranteed_draw_value if convert_unused else 0
    final_score = base_score + conversion
    pre_interest = new.bank + final_score

    boss = new.boss
    rate = boss.apply_interest_rate(
        compute_interest_rate(new.owned_upgrades, new.deck_modifiers, config.base_interest))
    interest = math.floor(pre_interest * rate)

    settlement = RoundSettlement(
        round_number=new.round_number,
        base_score=base_score,
        conversion_points=conversion,
        final_score=final_score,
        interest_rate=rate,
        interest_earned=interest,
        bank_before=state.bank,
        bank_after=pre_interest + interest,
    )

    new.round_score = final_score
    new.bank = settlement.bank_after
    new.draws_remaining = 0
    new.round_outcome = RoundOutcome.WON
    new.target_achieved = False
    new.locked_bet_category = None
    new.require_bet_change_after_hit = False
    new.game_phase = GamePhase.SHOP_TRANSITION
    new.current_shop_choices = generate_shop_choices(new.round_number + 1, new.owned_upgrades, rng)
    new.purchased_shop_ids = []
    new.pending = PendingTransition(PendingKind.ENTER_SHOP, config.shop_transition_delay_ms)

    logger.info("Round %d won: %d points, +%d interest, bank %d",
                new.round_number, final_score, interest, new.bank)
    message = f"Round {new.round_number} cleared! +{final_score}"
    if interest:
        message += f" (+{interest} interest)"
    return ActionResult(state=new, message=message, settlement=settlement)


def cash_out_unused_draws(state: RunState, rng=None,
                          config: GameConfig = DEFAULT_CONFIG) -> ActionResult:
    """Trade the remaining draws for a guaranteed value each and finalize."""
    if not state.target_achieved:
        return _reject(state, "Reach the target before cashing out")
    if state.draws_remaining <= 0:
        return _reject(state, "No draws left to cash out")
    return finalize_round(state, convert_unused=True, rng=rng, config=config)


def buy_upgrade(state: RunState, offer_id: str) -> ActionResult:
    if state.game_phase not in (GamePhase.SHOP, GamePhase.SHOP_TRANSITION):
        return _reject(state, "The shop is closed")
    offer = next((o for o in state.current_shop_choices if o.id == offer_id), None)
    if offer is None:
        return _reject(state, "That relic is not on offer")
    if offer.id in state.purchased_shop_ids:
        return _reject(state, "Already purchased")
    if offer.cost > state.bank:
        return _reject(state, f"Need {offer.cost - state.bank} more bank")

    new = state.copy()
    new.bank -= offer.cost
    new.owned_upgrades.append(OwnedUpgrade.from_offer(offer, new.round_number))
    new.purchased_shop_ids.append(offer.id)

    completed = sorted(get_completed_transformations(new.owned_upgrades))
    newly_completed = [s for s in completed if s not in new.transformations_completed]
    new.transformations_completed = completed

    logger.info("Bought %s for %d (bank %d)", offer.name, offer.cost, new.bank)
    message = f"Bought {offer.name}"
    for set_id in newly_completed:
        message += f" · {set_id.title()} transformation complete!"
    return ActionResult(state=new, message=message)


def proceed_to_next_round(state: RunState, rng=None,
                          config: GameConfig = DEFAULT_CONFIG) -> ActionResult:
    """Leave the shop and set up the next round with a fresh deck."""
    if state.game_phase not in (GamePhase.SHOP, GamePhase.SHOP_TRANSITION):
        return _reject(state, "Not in the shop")

    new = state.copy()
    new.round_number += 1
    preset = get_deck_preset(new.active_deck_id)
    new.deck = Deck.fresh(preset.build_deck, rng)
    new.round_score = 0
    new.round_target = calculate_round_target(new.round_number, new.owned_upgrades, config)
    new.draws_remaining = get_draw_allowance(new.owned_upgrades, new.deck_modifiers, config)
    new.round_outcome = RoundOutcome.ACTIVE
    new.target_achieved = False
    new.locked_bet_category = None
    new.require_bet_change_after_hit = False
    new.selected_bet_id = None
    new.recent_cards = []
    new.current_shop_choices = []
    new.purchased_shop_ids = []
    new.pending = None
    new.game_phase = GamePhase.GAMEPLAY
    if has_round_decay(new.owned_upgrades):
        new.combo_streak = 0

    boss = new.boss.boss
    message = f"Round {new.round_number}: target {new.round_target}"
    if boss:
        message += f" · Boss: {boss.name}"
        logger.info("Boss round %d: %s", new.round_number, boss.name)
    return ActionResult(state=new, message=message)


def resolve_pending(state: RunState, rng=None, config: GameConfig = DEFAULT_CONFIG) -> ActionResult:
    """Apply the pending timed transition immediately."""
    pending = state.pending
    if pending is None:
        return _reject(state, "Nothing pending")

    if pending.kind == PendingKind.FINALIZE_ROUND:
        return finalize_round(state, rng=rng, config=config)

    new = state.copy()
    new.pending = None
    if pending.kind == PendingKind.ENTER_SHOP:
        new.game_phase = GamePhase.SHOP
    elif pending.kind == PendingKind.GAME_OVER:
        new.game_phase = GamePhase.GAME_OVER
    logger.debug("Resolved %s -> %s", pending.kind.value, new.game_phase.value)
    return ActionResult(state=new)

