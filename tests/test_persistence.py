"""Tests for run save hydration and the on-disk stores."""

import json

from card_clicker.engine import game
from card_clicker.engine.bets import BetCategory
from card_clicker.engine.deck import Suit
from card_clicker.engine.game import GamePhase, PendingKind, RoundOutcome
from card_clicker.engine.persistence import (
    ProfileStore, SaveStore, state_from_dict, state_to_dict,
)
from card_clicker.engine.profiles import PlayerProfile
from card_clicker.engine.upgrades import TEMPLATE_MAP, OwnedUpgrade

from conftest import card, playing_state


class TestStateRoundTrip:
    def test_round_trip_through_json(self, rng):
        state = playing_state([card("K", Suit.HEARTS), card("2", Suit.CLUBS)], "color-red",
                              owned_upgrades=[OwnedUpgrade.from_offer(TEMPLATE_MAP["flat-bonus-4"], 1)])
        state = game.draw(state).state
        blob = json.loads(json.dumps(state_to_dict(state)))
        loaded = state_from_dict(blob, rng)

        assert loaded.round_score == state.round_score
        assert loaded.draws_remaining == state.draws_remaining
        assert loaded.locked_bet_category == BetCategory.COLOR
        assert loaded.require_bet_change_after_hit
        assert loaded.last_bet_hit is True
        assert loaded.combo_streak == 1
        assert [c.id for c in loaded.deck.cards] == [c.id for c in state.deck.cards]
        assert loaded.owned_upgrades[0].template_id == "flat-bonus-4"
        assert loaded.owned_upgrades[0].purchased_at_round == 1
        assert loaded.recent_cards[0].card.rank == "K"
        assert loaded.game_phase == GamePhase.GAMEPLAY

    def test_pending_survives(self, rng):
        state = playing_state([card("2", Suit.SPADES)], "color-red",
                              draws_remaining=1, round_target=1000)
        state = game.draw(state).state
        loaded = state_from_dict(state_to_dict(state), rng)
        assert loaded.pending.kind == PendingKind.GAME_OVER
        assert loaded.round_outcome == RoundOutcome.LOST


class TestHydrationDefaults:
    def test_malformed_blob_is_no_save(self, rng):
        for blob in (None, "garbage", 42, ["a"]):
            state = state_from_dict(blob, rng)
            assert state.game_phase == GamePhase.MENU
            assert not state.has_run

    def test_empty_dict_gets_defaults(self, rng):
        state = state_from_dict({}, rng)
        assert state.round_number == 1
        assert state.round_target == 30
        assert state.draws_remaining == 5
        assert state.active_deck_id == "balanced"
        assert len(state.deck.cards) == 54
        assert state.game_phase == GamePhase.MENU

    def test_unknown_deck_falls_back(self, rng):
        state = state_from_dict({"active_deck_id": "nope"}, rng)
        assert state.active_deck_id == "balanced"

    def test_missing_target_is_recomputed(self, rng):
        state = state_from_dict({"round_number": 2}, rng)
        assert state.round_target == 52

    def test_invalid_lock_is_dropped(self, rng):
        state = state_from_dict({"locked_bet_category": "bogus",
                                 "require_bet_change_after_hit": True}, rng)
        assert state.locked_bet_category is None
        assert not state.require_bet_change_after_hit

    def test_negative_values_are_clamped(self, rng):
        state = state_from_dict({"bank": -40, "round_score": -3, "round_number": 0}, rng)
        assert state.bank == 0
        assert state.round_score == 0
        assert state.round_number == 1

    def test_shop_without_choices_regenerates(self, rng):
        state = state_from_dict({"game_phase": "shop", "round_number": 3,
                                 "round_outcome": "won"}, rng)
        assert len(state.current_shop_choices) == 7

    def test_wrong_typed_lists_are_dropped(self, rng):
        state = state_from_dict({"purchased_shop_ids": 5, "transformations_completed": 7}, rng)
        assert state.purchased_shop_ids == []
        assert state.transformations_completed == []

    def test_non_string_list_entries_are_dropped(self, rng):
        state = state_from_dict({"purchased_shop_ids": ["a", 3, None],
                                 "transformations_completed": [["gambler"], "banker"]}, rng)
        assert state.purchased_shop_ids == ["a"]
        assert state.transformations_completed == ["banker"]

    def test_unhashable_deck_id_falls_back(self, rng):
        state = state_from_dict({"active_deck_id": ["balanced"]}, rng)
        assert state.active_deck_id == "balanced"
        assert len(state.deck.cards) == 54

    def test_bad_deck_modifier_values_are_ignored(self, rng):
        state = state_from_dict({"active_deck_id": "minimalist",
                                 "deck_modifiers": {"extra_draws": "two", "flat_bonus": [1],
                                                    "starting_bank": True, "interest_bonus": 0.04}},
                                rng)
        assert state.deck_modifiers.extra_draws == 2
        assert state.deck_modifiers.flat_bonus == 6
        assert state.deck_modifiers.starting_bank == 0
        assert state.deck_modifiers.interest_bonus == 0.04
        assert state.draws_remaining == 7

    def test_selected_bet_must_be_a_known_id(self, rng):
        assert state_from_dict({"selected_bet_id": ["color-red"]}, rng).selected_bet_id is None
        assert state_from_dict({"selected_bet_id": "nope"}, rng).selected_bet_id is None
        assert state_from_dict({"selected_bet_id": "color-red"}, rng).selected_bet_id == "color-red"

    def test_wrong_typed_bet_cannot_break_draw(self, rng):
        state = state_from_dict({"game_phase": "gameplay", "selected_bet_id": {"id": 1}}, rng)
        result = game.draw(state, rng)
        assert not result.accepted

    def test_wrong_typed_scalars_fall_back(self, rng):
        state = state_from_dict({"round_number": [2], "bank": {"a": 1}, "locked_bet_category": [1],
                                 "game_phase": {}, "pending": {"kind": [], "delay_ms": "x"}}, rng)
        assert state.round_number == 1
        assert state.bank == 0
        assert state.locked_bet_category is None
        assert state.game_phase == GamePhase.MENU
        assert state.pending is None

    def test_empty_stored_deck_stays_empty(self, rng):
        state = state_from_dict(state_to_dict(game.new_state()), rng)
        assert state.deck.cards == []
        assert not state.has_run

    def test_malformed_entries_are_dropped(self, rng):
        blob = {"owned_upgrades": [{"bad": 1}, OwnedUpgrade.from_offer(TEMPLATE_MAP["flat-bonus-2"], 2).to_dict()],
                "deck": [{"nope": True}]}
        state = state_from_dict(blob, rng)
        assert [u.template_id for u in state.owned_upgrades] == ["flat-bonus-2"]
        assert len(state.deck.cards) == 54


class TestSaveStore:
    def test_save_and_load(self, tmp_path, rng):
        store = SaveStore(tmp_path)
        state = playing_state(bank=77, round_score=9)
        assert store.save("p1", state)
        assert store.path_for("p1").exists()
        loaded = store.load("p1", rng)
        assert loaded.bank == 77
        assert loaded.round_score == 9

    def test_no_temp_files_left(self, tmp_path):
        store = SaveStore(tmp_path)
        store.save("p1", playing_state())
        assert [p.name for p in tmp_path.iterdir()] == ["run_p1.json"]

    def test_missing_save(self, tmp_path, rng):
        state = SaveStore(tmp_path).load("ghost", rng)
        assert state.game_phase == GamePhase.MENU
        assert not state.has_run

    def test_corrupt_save(self, tmp_path, rng):
        store = SaveStore(tmp_path)
        store.path_for("p1").write_text("{not json", encoding="utf-8")
        assert not store.load("p1", rng).has_run

    def test_clear(self, tmp_path):
        store = SaveStore(tmp_path)
        store.save("p1", playing_state())
        store.clear("p1")
        store.clear("p1")
        assert not store.path_for("p1").exists()


class TestProfileStore:
    def test_defaults_when_missing(self, tmp_path):
        profiles, active = ProfileStore(tmp_path / "profiles.json").load()
        assert len(profiles) == 1
        assert profiles[0].name == "Player 1"
        assert active == profiles[0].id

    def test_round_trip(self, tmp_path):
        store = ProfileStore(tmp_path / "profiles.json")
        profiles = [PlayerProfile(id="a", name="Ann"),
                    PlayerProfile(id="b", name="Bo", unlocked_decks=("balanced", "chaos"), best_round=9)]
        store.save(profiles, "b")
        loaded, active = store.load()
        assert active == "b"
        assert loaded[1].unlocked_decks == ("balanced", "chaos")
        assert loaded[1].best_round == 9

    def test_unknown_active_id(self, tmp_path):
        store = ProfileStore(tmp_path / "profiles.json")
        store.save([PlayerProfile(id="a", name="Ann")], "zzz")
        assert store.load()[1] == "a"

    def test_unhashable_active_id(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"profiles": [{"id": "a", "name": "Ann"}],
                                    "active_profile_id": []}), encoding="utf-8")
        profiles, active = ProfileStore(path).load()
        assert active == "a"

    def test_bad_unlock_list_keeps_profile(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"profiles": [{"id": "a", "name": "Ann", "unlocked_decks": 5}],
                                    "active_profile_id": "a"}), encoding="utf-8")
        profiles, _ = ProfileStore(path).load()
        assert profiles[0].id == "a"
        assert profiles[0].unlocked_decks == ("balanced",)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text("[]", encoding="utf-8")
        profiles, active = ProfileStore(path).load()
        assert len(profiles) == 1
        assert active == profiles[0].id
