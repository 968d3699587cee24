"""Tests for the relic catalog and effect aggregation."""

import pytest

from card_clicker.engine.upgrades import (
    UPGRADE_TEMPLATES, TEMPLATE_MAP, BetMultiplier, ComboCounter,
    ConditionalBonus, Condition, Decay, OwnedUpgrade, Rarity, ShopUpgrade,
    base_template_id, effect_from_dict, effect_to_dict, get_bet_bonus_map,
    get_comeback_multiplier, get_completed_transformations,
    get_conditional_bank_delta, get_extra_draws, get_flat_bonus,
    get_global_multiplier, get_interest_bonus, get_rarity_score,
    get_synergy_bonuses, has_round_decay,
)


def relics(*ids):
    return [TEMPLATE_MAP[i] for i in ids]


class TestCatalog:
    def test_size_and_rarity_spread(self):
        assert len(UPGRADE_TEMPLATES) == 33
        counts = {r: sum(1 for t in UPGRADE_TEMPLATES if t.rarity == r) for r in Rarity}
        assert counts == {Rarity.COMMON: 5, Rarity.UNCOMMON: 10,
                          Rarity.RARE: 11, Rarity.LEGENDARY: 7}

    def test_ids_unique_and_every_relic_has_effects(self):
        assert len(TEMPLATE_MAP) == len(UPGRADE_TEMPLATES)
        assert all(t.effects for t in UPGRADE_TEMPLATES)

    def test_six_affordable_relics(self):
        assert len([t for t in UPGRADE_TEMPLATES if t.cost <= 120]) == 6


class TestSimpleFolds:
    def test_extra_draws_sum(self):
        assert get_extra_draws(relics("extra-draw-1", "extra-draw-2", "transform-gambler-3")) == 4

    def test_flat_bonus_sum(self):
        assert get_flat_bonus(relics("flat-bonus-2", "flat-bonus-8", "transform-banker-2")) == 15

    def test_global_multiplier_sum(self):
        assert get_global_multiplier(relics("global-small", "global-amplifier")) == pytest.approx(0.45)

    def test_empty_collection(self):
        assert get_extra_draws([]) == 0
        assert get_bet_bonus_map([]) == {}
        assert get_interest_bonus([]) == 0

    def test_rarity_score(self):
        assert get_rarity_score(relics("flat-bonus-2", "extra-draw-1", "extra-draw-2", "flat-bonus-15")) == 10


class TestSynergy:
    def test_three_red_relics_add_point_four_five(self):
        owned = relics("bet-bonus-red-small", "bet-bonus-red", "synergy-red-hunter")
        assert get_synergy_bonuses(owned)["red-synergy"].multiplier == pytest.approx(0.45)
        # 0.2 + 0.4 + 0.3 direct, plus 0.15 × 3
        assert get_bet_bonus_map(owned)["color-red"] == pytest.approx(1.35)

    def test_lone_synergy_relic_counts_itself(self):
        owned = relics("synergy-black-hunter")
        assert get_bet_bonus_map(owned)["color-black"] == pytest.approx(0.45)

    def test_interest_synergy_feeds_interest(self):
        owned = relics("synergy-interest-compound", "interest-boost-0")
        # 0.02 + 0.02 direct, plus 0.01 × 2
        assert get_interest_bonus(owned) == pytest.approx(0.06)
        assert "interest-synergy" not in get_bet_bonus_map(owned)


class TestTransformations:
    def test_two_pieces_do_not_complete(self):
        owned = relics("transform-gambler-1", "transform-gambler-2")
        assert get_completed_transformations(owned) == set()
        assert get_bet_bonus_map(owned)["special-joker"] == pytest.approx(0.5)

    def test_gambler_set_adds_two_to_extremes(self):
        owned = relics("transform-gambler-1", "transform-gambler-2", "transform-gambler-3")
        assert get_completed_transformations(owned) == {"gambler"}
        bonus = get_bet_bonus_map(owned)
        assert bonus["special-joker"] == pytest.approx(2.5)
        assert bonus["special-ace"] == pytest.approx(2.5)

    def test_banker_set_adds_interest(self):
        owned = relics("transform-banker-1", "transform-banker-2", "transform-banker-3")
        assert get_interest_bonus(owned) == pytest.approx(0.03 + 0.02 + 0.08)

    def test_copies_of_one_piece_complete_the_set(self):
        piece = TEMPLATE_MAP["transform-banker-1"]
        assert get_completed_transformations([piece, piece, piece]) == {"banker"}

    def test_fourth_piece_does_not_scale_bonus(self):
        piece = TEMPLATE_MAP["transform-banker-1"]
        three = get_interest_bonus([piece] * 3)
        four = get_interest_bonus([piece] * 4)
        assert four - three == pytest.approx(0.03)


class TestConditionals:
    def test_double_down_bank(self):
        owned = relics("conditional-double-down")
        assert get_conditional_bank_delta(owned, hit=True) == 50
        assert get_conditional_bank_delta(owned, hit=False) == -15

    def test_high_roller_costs_on_hit(self):
        owned = relics("conditional-high-roller")
        assert get_conditional_bank_delta(owned, hit=True) == -10
        assert get_conditional_bank_delta(owned, hit=False) == 0

    def test_comeback_multiplier(self):
        assert get_comeback_multiplier(relics("conditional-comeback")) == 1.0
        assert get_comeback_multiplier(relics("conditional-double-down")) == 0

    def test_round_decay_detection(self):
        assert not has_round_decay(relics("conditional-streak"))
        custom = ShopUpgrade("custom", "Custom", "", Rarity.RARE, 1, "*",
                             (ComboCounter(0.2, Decay.PER_ROUND),))
        assert has_round_decay([custom])


class TestSerialization:
    def test_effect_dict_uses_type_tag(self):
        effect = ConditionalBonus(Condition.ON_MISS, bank_penalty=15)
        data = effect_to_dict(effect)
        assert data["type"] == "conditionalBonus"
        assert data["condition"] == "onMiss"
        assert effect_from_dict(data) == effect

    def test_unknown_effect_type_raises(self):
        with pytest.raises(ValueError):
            effect_from_dict({"type": "teleport", "value": 1})

    def test_missing_effect_field_raises(self):
        with pytest.raises(ValueError):
            effect_from_dict({"type": "betMultiplier", "value": 1})

    def test_owned_upgrade_round_trip(self):
        offer = TEMPLATE_MAP["synergy-red-hunter"]
        owned = OwnedUpgrade.from_offer(offer, 4)
        restored = OwnedUpgrade.from_dict(owned.to_dict())
        assert restored == owned
        assert restored.purchased_at_round == 4
        assert restored.effects_of(BetMultiplier) == [BetMultiplier("color-red", 0.3)]


def test_base_template_id_strips_offer_suffix():
    assert base_template_id("flat-bonus-2-3-1700000000000-a1b2c3") == "flat-bonus-2"
    assert base_template_id("transform-gambler-1") == "transform-gambler-1"
