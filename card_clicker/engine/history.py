"""
Run history tracking.
Records draws, rounds, shop visits and relics so a run can be summarized or replayed.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

CLOSE_CALL_PCT = 20


@dataclass
class RunEvent:
    """Single event in a run."""
    round_number: int
    event_type: str  # "run_start", "draw", "round_result", "shop_visit", "relic_acquired", "run_end"
    data: dict
    timestamp: int = 0  # sequence number within the run


class RunHistory:
    """Ordered event log for one run."""

    def __init__(self, preset_name: str, deck_id: str):
        self.events: list[RunEvent] = []
        self.metadata = {"preset": preset_name, "deck": deck_id}
        self._event_counter = 0

    def add_event(self, round_number: int, event_type: str, data: dict):
        self.events.append(RunEvent(round_number, event_type, data, self._event_counter))
        self._event_counter += 1

    def add_run_start(self, bank: int, relics: list):
        self.add_event(1, "run_start", {"starting_bank": bank, "starting_relics": relics})

    def add_draw(self, round_number: int, card: str, bet_id: str, hit: bool,
                 score: int, bank_delta: int = 0):
        self.add_event(round_number, "draw", {
            "card": card, "bet": bet_id, "hit": hit,
            "score": score, "bank_delta": bank_delta,
        })

    def add_round_result(self, round_number: int, score: int, target: int, success: bool,
                         draws_used: int, interest_earned: int = 0,
                         cashed_out_draws: int = 0, boss_name: str = None):
        """Log a finished round; rounds within 20% of the target are close calls."""
        margin = score - target
        margin_pct = margin / target * 100 if target > 0 else 0
        data = {
            "score": score,
            "target": target,
            "success": success,
            "margin": margin,
            "margin_pct": round(margin_pct, 1),
            "draws_used": draws_used,
            "interest_earned": interest_earned,
            "cashed_out_draws": cashed_out_draws,
            "close_call": abs(margin_pct) < CLOSE_CALL_PCT,
        }
        if boss_name:
            data["boss_name"] = boss_name
        self.add_event(round_number, "round_result", data)

    def add_shop_visit(self, round_number: int, relics_bought: list, bank_spent: int,
                       bank_remaining: int, offers_seen: int = 0):
        self.add_event(round_number, "shop_visit", {
            "relics_bought": relics_bought, "bank_spent": bank_spent,
            "bank_remaining": bank_remaining, "offers_seen": offers_seen,
        })

    def add_relic_acquired(self, round_number: int, relic_name: str, rarity: str,
                           source: str = "shop"):
        self.add_event(round_number, "relic_acquired",
                       {"relic": relic_name, "rarity": rarity, "source": source})

    def add_run_end(self, final_round: int, rounds_cleared: int, final_bank: int,
                    relics: list, transformations: list = None):
        self.add_event(final_round, "run_end", {
            "rounds_cleared": rounds_cleared,
            "final_bank": final_bank,
            "final_relics": relics,
            "transformations": transformations or [],
        })

    def of_type(self, event_type: str) -> list[RunEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def get_close_calls(self) -> list[RunEvent]:
        return [e for e in self.of_type("round_result") if e.data.get("close_call")]

    def get_relic_timeline(self) -> list[dict]:
        return [{"round": e.round_number, **e.data} for e in self.of_type("relic_acquired")]

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata,
            "events": [asdict(e) for e in self.events],
            "summary": self.summary(),
        }

    def summary(self) -> dict:
        rounds = self.of_type("round_result")
        draws = self.of_type("draw")
        boss_rounds = [e for e in rounds if e.data.get("boss_name")]
        run_end: Optional[RunEvent] = next(iter(self.of_type("run_end")), None)

        return {
            "rounds_attempted": len(rounds),
            "rounds_won": sum(1 for e in rounds if e.data.get("success")),
            "close_calls": sum(1 for e in rounds if e.data.get("close_call")),
            "draws": len(draws),
            "hits": sum(1 for e in draws if e.data.get("hit")),
            "relics_acquired": len(self.of_type("relic_acquired")),
            "interest_earned": sum(e.data.get("interest_earned", 0) for e in rounds),
            "boss_rounds": len(boss_rounds),
            "bosses_defeated": sum(1 for e in boss_rounds if e.data.get("success")),
            "final_round": run_end.round_number if run_end else None,
        }

    def save(self, filepath: str):
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> "RunHistory":
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)

        history = cls(data["metadata"]["preset"], data["metadata"]["deck"])
        history.metadata = data["metadata"]
        for event_data in data["events"]:
            event = RunEvent(**event_data)
            history.events.append(event)
            history._event_counter = max(history._event_counter, event.timestamp + 1)
        return history
