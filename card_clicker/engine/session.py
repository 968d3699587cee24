"""
Stateful game session: wraps the reducer with timers, saving and profiles.
"""

import logging
import random
from typing import Optional

from . import game
from .game import ActionResult, DEFAULT_CONFIG, GameConfig, GamePhase, RunState
from .persistence import ProfileStore, SaveStore
from .profiles import (
    PlayerProfile, create_profile, default_profile, delete_profile,
    record_round_reached,
)

logger = logging.getLogger(__name__)


class GameSession:
    """
    Holds the current RunState for the active profile.

    Each accepted action replaces the state, reports progress to the profile
    and saves. ``tick`` advances a clock that fires pending transitions once
    their delay has elapsed.
    """

    def __init__(self, save_store: Optional[SaveStore] = None,
                 profile_store: Optional[ProfileStore] = None,
                 rng=None, config: GameConfig = DEFAULT_CONFIG):
        self.save_store = save_store
        self.profile_store = profile_store
        self.rng = rng or random.Random()
        self.config = config

        if profile_store is not None:
            self.profiles, self.active_profile_id = profile_store.load()
        else:
            profile = default_profile(self.rng)
            self.profiles, self.active_profile_id = [profile], profile.id

        self.state = self._load_state()
        self.last_message = ""
        self.newly_unlocked: list[str] = []
        self._elapsed_ms = 0

    @property
    def profile(self) -> PlayerProfile:
        return next(p for p in self.profiles if p.id == self.active_profile_id)

    def _load_state(self) -> RunState:
        if self.save_store is None:
            return game.new_state()
        state = self.save_store.load(self.active_profile_id, self.rng)
        # Resume from the menu; continue_run restores the phase
        if state.game_phase != GamePhase.MENU:
            state.game_phase = GamePhase.MENU
            state.pending = None
        return state

    def _save(self):
        if self.save_store is not None:
            self.save_store.save(self.active_profile_id, self.state)

    def _save_profiles(self):
        if self.profile_store is not None:
            self.profile_store.save(self.profiles, self.active_profile_id)

    def _record_progress(self):
        if self.state.game_phase != GamePhase.GAMEPLAY:
            return
        updated, unlocked = record_round_reached(self.profile, self.state.round_number)
        if updated is not self.profile:
            self.profiles = [updated if p.id == updated.id else p for p in self.profiles]
            self.newly_unlocked.extend(unlocked)
            self._save_profiles()

    def apply(self, result: ActionResult) -> ActionResult:
        """Adopt an action's state if accepted, then checkpoint."""
        self.last_message = result.message
        if not result.accepted:
            return result
        if result.state.pending is not self.state.pending:
            self._elapsed_ms = 0
        self.state = result.state
        self._record_progress()
        self._save()
        return result

    # Player actions

    def start_run(self, deck_id: str, starting_upgrades: tuple = ()) -> ActionResult:
        return self.apply(game.start_run(self.state, deck_id, self.profile,
                                         starting_upgrades, self.rng, self.config))

    def continue_run(self) -> ActionResult:
        return self.apply(game.continue_run(self.state))

    def select_bet(self, bet_id: str) -> ActionResult:
        return self.apply(game.select_bet(self.state, bet_id))

    def draw(self) -> ActionResult:
        return self.apply(game.draw(self.state, self.rng, self.config))

    def finish_round(self) -> ActionResult:
        return self.apply(game.finalize_round(self.state, rng=self.rng, config=self.config))

    def cash_out(self) -> ActionResult:
        return self.apply(game.cash_out_unused_draws(self.state, self.rng, self.config))

    def buy(self, offer_id: str) -> ActionResult:
        return self.apply(game.buy_upgrade(self.state, offer_id))

    def proceed(self) -> ActionResult:
        return self.apply(game.proceed_to_next_round(self.state, self.rng, self.config))

    def return_to_menu(self) -> ActionResult:
        return self.apply(game.return_to_menu(self.state))

    def reset_to_menu(self) -> ActionResult:
        return self.apply(game.reset_to_menu(self.state))

    # Timers

    def tick(self, elapsed_ms: int) -> Optional[ActionResult]:
        """Advance the clock; fire the pending transition if its delay has passed."""
        pending = self.state.pending
        if pending is None:
            self._elapsed_ms = 0
            return None
        self._elapsed_ms += elapsed_ms
        if self._elapsed_ms < pending.delay_ms:
            return None
        return self.apply(game.resolve_pending(self.state, self.rng, self.config))

    def flush(self) -> None:
        """Fire every pending transition immediately."""
        while self.state.pending is not None:
            result = self.apply(game.resolve_pending(self.state, self.rng, self.config))
            if not result.accepted:
                break

    # Profiles

    def create_profile(self, name: str) -> Optional[PlayerProfile]:
        profile = create_profile(name, self.profiles, inherit_from=self.profile, rng=self.rng)
        if profile is None:
            self.last_message = "Profile name is blank or taken"
            return None
        self.profiles = self.profiles + [profile]
        self.switch_profile(profile.id)
        return profile

    def switch_profile(self, profile_id: str) -> bool:
        if profile_id not in {p.id for p in self.profiles}:
            return False
        self._save()
        self.active_profile_id = profile_id
        self.state = self._load_state()
        self._elapsed_ms = 0
        self._save_profiles()
        logger.info("Switched to profile %s", self.profile.name)
        return True

    def delete_profile(self, profile_id: str) -> bool:
        remaining = delete_profile(self.profiles, profile_id)
        if remaining is None:
            self.last_message = "At least one profile must remain"
            return False
        self.profiles = remaining
        if self.save_store is not None:
            self.save_store.clear(profile_id)
        if profile_id == self.active_profile_id:
            self.active_profile_id = remaining[0].id
            self.state = self._load_state()
        self._save_profiles()
        return True
