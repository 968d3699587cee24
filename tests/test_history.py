"""Tests for the run history event log."""

from card_clicker.engine.history import RunHistory


def sample_history():
    history = RunHistory(preset_name="standard", deck_id="balanced")
    history.add_run_start(bank=0, relics=[])
    history.add_draw(1, "K♥", "color-red", True, 23)
    history.add_draw(1, "2♠", "color-red", False, 1)
    history.add_round_result(1, score=33, target=30, success=True, draws_used=5, interest_earned=1)
    history.add_relic_acquired(1, "Lucky Coin", "uncommon")
    history.add_shop_visit(1, ["Lucky Coin"], 140, 10, offers_seen=6)
    history.add_round_result(2, score=20, target=52, success=False, draws_used=5)
    history.add_round_result(5, score=90, target=88, success=True, draws_used=5, boss_name="The Purist")
    history.add_run_end(final_round=6, rounds_cleared=2, final_bank=10, relics=["Lucky Coin"])
    return history


class TestRunHistory:
    def test_events_are_sequenced(self):
        history = sample_history()
        assert [e.timestamp for e in history.events] == list(range(len(history.events)))

    def test_close_calls(self):
        close = sample_history().get_close_calls()
        assert [e.round_number for e in close] == [1, 5]

    def test_round_result_margin(self):
        event = sample_history().events[3]
        assert event.data["margin"] == 3
        assert event.data["margin_pct"] == 10.0

    def test_relic_timeline(self):
        timeline = sample_history().get_relic_timeline()
        assert timeline == [{"round": 1, "relic": "Lucky Coin", "rarity": "uncommon", "source": "shop"}]

    def test_summary(self):
        summary = sample_history().summary()
        assert summary["rounds_attempted"] == 3
        assert summary["rounds_won"] == 2
        assert summary["draws"] == 2
        assert summary["hits"] == 1
        assert summary["interest_earned"] == 1
        assert summary["boss_rounds"] == 1
        assert summary["bosses_defeated"] == 1
        assert summary["final_round"] == 6

    def test_save_and_load(self, tmp_path):
        history = sample_history()
        path = tmp_path / "logs" / "run.json"
        history.save(str(path))
        loaded = RunHistory.load(str(path))
        assert loaded.metadata["preset"] == "standard"
        assert len(loaded.events) == len(history.events)
        assert loaded.summary() == history.summary()
        loaded.add_draw(6, "A♠", "special-ace", True, 77)
        assert loaded.events[-1].timestamp == len(history.events)
