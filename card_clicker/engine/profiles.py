"""
Player profiles: unlock checks and best-round tracking.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from .decks import DECK_PRESETS, DEFAULT_DECK_ID, get_deck_preset

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "Player 1"


@dataclass(frozen=True)
class PlayerProfile:
    id: str
    name: str
    unlocked_decks: tuple = (DEFAULT_DECK_ID,)
    best_round: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unlocked_decks": list(self.unlocked_decks),
            "best_round": self.best_round,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerProfile":
        raw = data.get("unlocked_decks")
        unlocked = tuple(d for d in raw if isinstance(d, str)) if isinstance(raw, list) else ()
        if DEFAULT_DECK_ID not in unlocked:
            unlocked = (DEFAULT_DECK_ID,) + unlocked
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or DEFAULT_PROFILE_NAME),
            unlocked_decks=unlocked,
            best_round=max(0, int(data.get("best_round", 0))),
        )


def new_profile_id(rng=None) -> str:
    rng = rng or random
    return f"profile-{rng.randrange(16 ** 8):08x}"


def default_profile(rng=None) -> PlayerProfile:
    return PlayerProfile(id=new_profile_id(rng), name=DEFAULT_PROFILE_NAME)


def is_deck_unlocked(profile: Optional[PlayerProfile], deck_id: str) -> bool:
    """A deck is usable with no requirement, a high enough best round, or an explicit unlock."""
    preset = get_deck_preset(deck_id)
    if preset.requirement is None:
        return True
    if profile is None:
        return False
    return (profile.best_round >= preset.requirement.best_round
            or preset.id in profile.unlocked_decks)


def record_round_reached(profile: PlayerProfile, round_number: int) -> tuple[PlayerProfile, list[str]]:
    """
    Report a reached round. Returns the updated profile and the ids of
    decks unlocked by this update.
    """
    if round_number <= profile.best_round:
        return profile, []

    newly_unlocked = [
        p.id for p in DECK_PRESETS
        if p.requirement is not None
        and p.id not in profile.unlocked_decks
        and p.requirement.best_round <= round_number
    ]
    updated = replace(profile, best_round=round_number,
                      unlocked_decks=profile.unlocked_decks + tuple(newly_unlocked))
    for deck_id in newly_unlocked:
        logger.info("Profile %s unlocked deck %s", profile.name, deck_id)
    return updated, newly_unlocked


def create_profile(name: str, existing: list[PlayerProfile],
                   inherit_from: Optional[PlayerProfile] = None,
                   rng=None) -> Optional[PlayerProfile]:
    """
    Create a profile with a unique (case-insensitive) name.

    The new profile inherits unlocks and best round from ``inherit_from``.
    Returns None when the name is blank or taken.
    """
    name = name.strip()
    if not name:
        return None
    if any(p.name.lower() == name.lower() for p in existing):
        return None
    if inherit_from is not None:
        return PlayerProfile(id=new_profile_id(rng), name=name,
                             unlocked_decks=inherit_from.unlocked_decks,
                             best_round=inherit_from.best_round)
    return PlayerProfile(id=new_profile_id(rng), name=name)


def delete_profile(profiles: list[PlayerProfile], profile_id: str) -> Optional[list[PlayerProfile]]:
    """Remove a profile. Returns None if it is the last one or does not exist."""
    if len(profiles) <= 1:
        return None
    remaining = [p for p in profiles if p.id != profile_id]
    if len(remaining) == len(profiles):
        return None
    return remaining
