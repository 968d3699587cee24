"""Tests for the stateful session: timers, saving and profile switching."""

import random

import pytest

from card_clicker.engine.deck import Suit
from card_clicker.engine.game import GamePhase, PendingKind, RoundOutcome
from card_clicker.engine.persistence import ProfileStore, SaveStore
from card_clicker.engine.session import GameSession

from conftest import card, playing_state


@pytest.fixture
def session(tmp_path):
    return GameSession(SaveStore(tmp_path / "saves"), ProfileStore(tmp_path / "profiles.json"),
                       rng=random.Random(7))


def losing_state():
    return playing_state([card("2", Suit.SPADES)], "color-red", draws_remaining=1, round_target=1000)


def winning_state():
    return playing_state([card("K", Suit.HEARTS)], "color-red", draws_remaining=1, round_target=10)


class TestTimers:
    def test_game_over_fires_after_delay(self, session):
        session.state = losing_state()
        session.draw()
        assert session.state.pending.kind == PendingKind.GAME_OVER
        assert session.tick(500) is None
        assert session.state.game_phase == GamePhase.GAMEPLAY
        result = session.tick(400)
        assert result.accepted
        assert session.state.game_phase == GamePhase.GAME_OVER

    def test_win_chains_finalize_then_shop(self, session):
        session.state = winning_state()
        session.draw()
        session.tick(900)
        assert session.state.game_phase == GamePhase.SHOP_TRANSITION
        assert session.state.round_outcome == RoundOutcome.WON
        assert session.tick(1000) is None
        session.tick(100)
        assert session.state.game_phase == GamePhase.SHOP

    def test_flush(self, session):
        session.state = winning_state()
        session.draw()
        session.flush()
        assert session.state.game_phase == GamePhase.SHOP
        assert session.state.pending is None

    def test_reset_cancels_pending(self, session):
        session.state = losing_state()
        session.draw()
        session.reset_to_menu()
        assert session.state.pending is None
        assert session.tick(1000) is None
        assert session.state.game_phase == GamePhase.MENU

    def test_tick_without_pending(self, session):
        assert session.tick(5000) is None


class TestProgress:
    def test_start_records_round_one(self, session):
        session.start_run("balanced")
        assert session.state.game_phase == GamePhase.GAMEPLAY
        assert session.profile.best_round == 1

    def test_proceeding_updates_best_round(self, session):
        session.state = playing_state(game_phase=GamePhase.SHOP, round_outcome=RoundOutcome.WON,
                                      round_number=4)
        session.proceed()
        assert session.profile.best_round == 5
        assert "high-roller" in session.newly_unlocked

    def test_locked_deck_message(self, session):
        result = session.start_run("chaos")
        assert not result.accepted
        assert session.last_message == result.message
        assert session.state.game_phase == GamePhase.MENU

    def test_rejected_action_keeps_state(self, session):
        session.start_run("balanced")
        before = session.state
        session.draw()
        assert session.state is before


class TestPersistence:
    def test_run_survives_new_session(self, tmp_path, session):
        session.start_run("balanced")
        session.select_bet("color-red")
        session.draw()
        score = session.state.round_score

        reopened = GameSession(SaveStore(tmp_path / "saves"), ProfileStore(tmp_path / "profiles.json"))
        assert reopened.active_profile_id == session.active_profile_id
        assert reopened.state.game_phase == GamePhase.MENU
        reopened.continue_run()
        assert reopened.state.game_phase == GamePhase.GAMEPLAY
        assert reopened.state.round_score == score
        assert reopened.state.draws_remaining == 4

    def test_discarded_run_stays_discarded_after_reload(self, tmp_path, session):
        session.start_run("balanced")
        session.reset_to_menu()
        assert not session.state.has_run

        reopened = GameSession(SaveStore(tmp_path / "saves"), ProfileStore(tmp_path / "profiles.json"))
        assert not reopened.state.has_run
        assert not reopened.continue_run().accepted

    def test_bad_save_does_not_block_startup(self, tmp_path, session):
        store = SaveStore(tmp_path / "saves")
        session.start_run("balanced")
        store.path_for(session.active_profile_id).write_text(
            '{"purchased_shop_ids": 3, "selected_bet_id": ["x"]}', encoding="utf-8")

        reopened = GameSession(store, ProfileStore(tmp_path / "profiles.json"))
        assert reopened.state.game_phase == GamePhase.MENU
        assert reopened.state.purchased_shop_ids == []
        assert reopened.state.selected_bet_id is None

    def test_profile_switching_keeps_separate_runs(self, session):
        session.start_run("balanced")
        first_id = session.active_profile_id

        created = session.create_profile("Second")
        assert created is not None
        assert session.active_profile_id == created.id
        assert not session.state.has_run

        assert session.switch_profile(first_id)
        assert session.state.has_run
        session.continue_run()
        assert session.state.game_phase == GamePhase.GAMEPLAY

    def test_duplicate_profile_name(self, session):
        assert session.create_profile(session.profile.name.upper()) is None
        assert len(session.profiles) == 1

    def test_delete_profiles(self, session):
        assert not session.delete_profile(session.active_profile_id)
        first_id = session.active_profile_id
        session.create_profile("Second")
        assert session.delete_profile(session.active_profile_id)
        assert session.active_profile_id == first_id
        assert len(session.profiles) == 1

    def test_switch_to_unknown_profile(self, session):
        assert not session.switch_profile("nope")
