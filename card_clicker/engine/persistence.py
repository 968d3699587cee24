"""
Serialization of run state and profiles.

Hydration never fails: a malformed blob is treated as no save, and each
missing or invalid field falls back to its default. Writes are best effort.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .bets import BetCategory, get_bet
from .deck import Card, Deck
from .decks import get_deck_preset, merge_deck_modifiers
from .game import (
    DEFAULT_CONFIG, GameConfig, GamePhase, PendingKind, PendingTransition,
    RecentCardEntry, RoundOutcome, RunState, calculate_round_target,
    get_draw_allowance, new_state,
)
from .profiles import PlayerProfile, default_profile
from .shop import generate_shop_choices
from .upgrades import OwnedUpgrade, ShopUpgrade

logger = logging.getLogger(__name__)


def state_to_dict(state: RunState) -> dict:
    return {
        "round_number": state.round_number,
        "round_score": state.round_score,
        "round_target": state.round_target,
        "draws_remaining": state.draws_remaining,
        "round_outcome": state.round_outcome.value,
        "bank": state.bank,
        "selected_bet_id": state.selected_bet_id,
        "owned_upgrades": [u.to_dict() for u in state.owned_upgrades],
        "combo_streak": state.combo_streak,
        "last_bet_hit": state.last_bet_hit,
        "locked_bet_category": state.locked_bet_category.value if state.locked_bet_category else None,
        "require_bet_change_after_hit": state.require_bet_change_after_hit,
        "target_achieved": state.target_achieved,
        "game_phase": state.game_phase.value,
        "deck": [c.to_dict() for c in state.deck.cards],
        "current_shop_choices": [u.to_dict() for u in state.current_shop_choices],
        "purchased_shop_ids": list(state.purchased_shop_ids),
        "active_deck_id": state.active_deck_id,
        "deck_modifiers": state.deck_modifiers.to_dict(),
        "recent_cards": [e.to_dict() for e in state.recent_cards],
        "transformations_completed": list(state.transformations_completed),
        "pending": ({"kind": state.pending.kind.value, "delay_ms": state.pending.delay_ms}
                    if state.pending else None),
    }


def _int(data: dict, key: str, default: Optional[int]) -> Optional[int]:
    try:
        return int(data[key])
    except (KeyError, TypeError, ValueError, OverflowError):
        return default


def _enum(enum_cls, value, default):
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return default


def _require_str(value) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def _parse_list(items, parse, label: str) -> list:
    parsed = []
    for item in items if isinstance(items, list) else []:
        try:
            parsed.append(parse(item))
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            logger.warning("Dropping malformed %s entry: %s", label, e)
    return parsed


def state_from_dict(data, rng=None, config: GameConfig = DEFAULT_CONFIG) -> RunState:
    """Hydrate a RunState, filling anything missing with sane defaults."""
    if not isinstance(data, dict):
        return new_state()

    preset = get_deck_preset(data.get("active_deck_id"))
    modifiers = merge_deck_modifiers(
        preset.modifiers,
        data.get("deck_modifiers") if isinstance(data.get("deck_modifiers"), dict) else None)

    # An empty stored pile stays empty; only a missing or unreadable one is rebuilt
    raw_deck = data.get("deck")
    cards = _parse_list(raw_deck, Card.from_dict, "card")
    if isinstance(raw_deck, list) and (cards or not raw_deck):
        deck = Deck(builder=preset.build_deck, cards=cards)
    else:
        deck = Deck.fresh(preset.build_deck, rng)

    owned = _parse_list(data.get("owned_upgrades"), OwnedUpgrade.from_dict, "relic")
    round_number = max(1, _int(data, "round_number", 1))
    phase = _enum(GamePhase, data.get("game_phase"), GamePhase.MENU)

    draws = _int(data, "draws_remaining", None)
    if draws is None:
        draws = get_draw_allowance(owned, modifiers, config)
    target = _int(data, "round_target", None)
    if target is None:
        target = calculate_round_target(round_number, owned, config)

    choices = _parse_list(data.get("current_shop_choices"), ShopUpgrade.from_dict, "shop offer")
    if not choices and phase in (GamePhase.SHOP, GamePhase.SHOP_TRANSITION):
        choices = generate_shop_choices(round_number + 1, owned, rng)

    locked = data.get("locked_bet_category")
    locked_category = _enum(BetCategory, locked, None) if locked else None

    selected_bet = get_bet(data.get("selected_bet_id"))
    last_hit = data.get("last_bet_hit")
    pending = None
    raw_pending = data.get("pending")
    if isinstance(raw_pending, dict):
        kind = _enum(PendingKind, raw_pending.get("kind"), None)
        if kind is not None:
            pending = PendingTransition(kind, _int(raw_pending, "delay_ms", 0))

    return RunState(
        round_number=round_number,
        round_score=max(0, _int(data, "round_score", 0)),
        round_target=target,
        draws_remaining=max(0, draws),
        round_outcome=_enum(RoundOutcome, data.get("round_outcome"), RoundOutcome.ACTIVE),
        bank=max(0, _int(data, "bank", modifiers.starting_bank)),
        selected_bet_id=selected_bet.id if selected_bet else None,
        owned_upgrades=owned,
        combo_streak=max(0, _int(data, "combo_streak", 0)),
        last_bet_hit=last_hit if isinstance(last_hit, bool) else None,
        locked_bet_category=locked_category,
        require_bet_change_after_hit=bool(data.get("require_bet_change_after_hit")) and locked_category is not None,
        target_achieved=bool(data.get("target_achieved", False)),
        game_phase=phase,
        deck=deck,
        current_shop_choices=choices,
        purchased_shop_ids=_parse_list(data.get("purchased_shop_ids"), _require_str, "purchase id"),
        active_deck_id=preset.id,
        deck_modifiers=modifiers,
        recent_cards=_parse_list(data.get("recent_cards"), RecentCardEntry.from_dict, "recent card"),
        transformations_completed=_parse_list(data.get("transformations_completed"),
                                              _require_str, "transformation"),
        pending=pending,
    )


def _atomic_write_json(path: Path, data) -> bool:
    """Write JSON through a temp file in the same directory. Returns success."""
    tmp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(prefix="save_", suffix=".tmp", dir=path.parent)
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Could not write %s: %s", path, e)
        return False
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)


def _read_json(path: Path):
    """Return parsed JSON, or None when missing or unreadable."""
    if not path.exists():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable save %s: %s", path, e)
        return None


class SaveStore:
    """One run save per profile under a directory."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, profile_id: str) -> Path:
        return self.directory / f"run_{profile_id}.json"

    def load(self, profile_id: str, rng=None) -> RunState:
        return state_from_dict(_read_json(self.path_for(profile_id)), rng)

    def save(self, profile_id: str, state: RunState) -> bool:
        return _atomic_write_json(self.path_for(profile_id), state_to_dict(state))

    def clear(self, profile_id: str) -> None:
        path = self.path_for(profile_id)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)


class ProfileStore:
    """Profile list plus the active profile id, in a single JSON file."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> tuple[list[PlayerProfile], str]:
        """Always returns at least one profile and a valid active id."""
        data = _read_json(self.path)
        profiles = []
        active_id = None
        if isinstance(data, dict):
            profiles = _parse_list(data.get("profiles"), PlayerProfile.from_dict, "profile")
            active_id = data.get("active_profile_id")
        if not profiles:
            profiles = [default_profile()]
        if not isinstance(active_id, str) or active_id not in {p.id for p in profiles}:
            active_id = profiles[0].id
        return profiles, active_id

    def save(self, profiles: list[PlayerProfile], active_id: str) -> bool:
        return _atomic_write_json(self.path, {
            "profiles": [p.to_dict() for p in profiles],
            "active_profile_id": active_id,
        })
