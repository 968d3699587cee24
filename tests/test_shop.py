"""Tests for shop generation and the purchase AI."""

import random

import pytest

from card_clicker.engine.game import RunState
from card_clicker.engine.shop import (
    ShopAI, ShopConfig, generate_shop_choices, get_rarity_weight,
    get_shop_slot_count, weighted_index,
)
from card_clicker.engine.upgrades import (
    TEMPLATE_MAP, UPGRADE_TEMPLATES, OwnedUpgrade, Rarity, base_template_id,
)


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestSlotsAndWeights:
    @pytest.mark.parametrize("round_number,slots", [(1, 6), (3, 6), (4, 7), (7, 8), (20, 8)])
    def test_slot_count(self, round_number, slots):
        assert get_shop_slot_count(round_number) == slots

    def test_round_one_weights(self):
        assert get_rarity_weight(Rarity.LEGENDARY, 1) == 8
        assert get_rarity_weight(Rarity.RARE, 1) == 18
        assert get_rarity_weight(Rarity.UNCOMMON, 1) == 28
        assert get_rarity_weight(Rarity.COMMON, 1) == 46

    def test_weights_shift_toward_rare(self):
        assert get_rarity_weight(Rarity.LEGENDARY, 11) == 33
        assert get_rarity_weight(Rarity.COMMON, 30) == 12
        assert get_rarity_weight(Rarity.UNCOMMON, 30) == 18

    def test_weighted_index(self):
        weights = [1, 1, 2]
        assert weighted_index(weights, FixedRandom(0.0)) == 0
        assert weighted_index(weights, FixedRandom(0.3)) == 1
        assert weighted_index(weights, FixedRandom(0.9)) == 2
        assert weighted_index(weights, FixedRandom(0.9999999)) == 2


class TestGenerateChoices:
    def test_offer_count_and_ids(self, rng):
        choices = generate_shop_choices(1, [], rng)
        assert len(choices) == 6
        for offer in choices:
            assert base_template_id(offer.id) in TEMPLATE_MAP
            assert offer.id != offer.template_id
        assert len({o.id for o in choices}) == 6
        assert len({o.template_id for o in choices}) == 6

    def test_first_offer_is_cheap(self):
        for seed in range(10):
            choices = generate_shop_choices(3, [], random.Random(seed))
            assert choices[0].cost <= ShopConfig().guaranteed_cheap_cost

    def test_owned_relics_are_excluded(self, rng):
        owned = [OwnedUpgrade.from_offer(t, 1) for t in UPGRADE_TEMPLATES[:20]]
        owned_ids = {u.template_id for u in owned}
        for _ in range(5):
            choices = generate_shop_choices(2, owned, rng)
            assert not owned_ids & {o.template_id for o in choices}

    def test_empty_when_everything_is_owned(self, rng):
        owned = [OwnedUpgrade.from_offer(t, 1) for t in UPGRADE_TEMPLATES]
        assert generate_shop_choices(4, owned, rng) == []

    def test_fewer_candidates_than_slots(self, rng):
        owned = [OwnedUpgrade.from_offer(t, 1) for t in UPGRADE_TEMPLATES[3:]]
        assert len(generate_shop_choices(1, owned, rng)) == 3

    def test_explicit_empty_catalog(self, rng):
        assert generate_shop_choices(1, [], rng, templates=[]) == []

    def test_legendary_only_catalog(self, rng):
        legendaries = [t for t in UPGRADE_TEMPLATES if t.rarity == Rarity.LEGENDARY]
        choices = generate_shop_choices(1, [], rng, templates=legendaries)
        assert len(choices) == 6
        assert len({o.template_id for o in choices}) == 6
        assert all(o.rarity == Rarity.LEGENDARY for o in choices)


class TestShopAI:
    def offers(self, *template_ids):
        return generate_shop_choices(2, [], random.Random(1),
                                     templates=[TEMPLATE_MAP[i] for i in template_ids])

    def test_respects_reserve(self):
        choices = self.offers("flat-bonus-2", "flat-bonus-4")
        state = RunState(bank=100)
        # balanced keeps 25 back: only one of 60/80 fits
        bought = ShopAI("balanced").decide_purchases(choices, state)
        assert len(bought) == 1

    def test_aggressive_spends_everything(self):
        choices = self.offers("flat-bonus-2", "flat-bonus-4")
        state = RunState(bank=140)
        bought = ShopAI("aggressive").decide_purchases(choices, state)
        assert len(bought) == 2

    def test_nothing_affordable(self):
        choices = self.offers("flat-bonus-15")
        assert ShopAI().decide_purchases(choices, RunState(bank=50)) == []

    def test_skips_already_purchased(self):
        choices = self.offers("flat-bonus-2")
        state = RunState(bank=500, purchased_shop_ids=[choices[0].id])
        assert ShopAI().decide_purchases(choices, state) == []

    def test_prefers_value_for_cost(self):
        choices = self.offers("flat-bonus-2", "flat-bonus-4")
        state = RunState(bank=1000)
        bought = ShopAI("aggressive").decide_purchases(choices, state)
        assert base_template_id(bought[0]) == "flat-bonus-4"
