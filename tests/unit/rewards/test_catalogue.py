"""
Unit tests for the reward catalogue.
"""

from unittest.mock import patch

import pytest
from django.core.cache import cache

from core.exceptions import InvalidArgument, NotFound, Unauthorized
from rewards import caching
from rewards.models import RewardItem
from rewards.services import RewardCatalogue
from tests.factories.rewards import ADMIN, CUSTOMER, MERCHANT, RewardItemFactory, fund


class TestAddReward:
    def test_add_reward_is_returned_by_lookup(self, engine):
        engine.add_reward(ADMIN, "R1", "10% Off", 100, 2)

        details = engine.get_reward_details("R1")

        assert details.as_dict() == {"id": "R1", "name": "10% Off", "cost": 100, "stock": 2, "available": True}
        assert details.limited is True

    def test_zero_stock_means_unlimited(self, engine):
        item = engine.add_reward(ADMIN, "COFFEE", "Free Coffee", 150, 0)

        assert item.limited is False
        assert item.sold_out is False

    def test_cost_zero_is_rejected(self, engine):
        """
        Scenario: add_reward is called with cost=0.
        Expected: InvalidArgument, no catalogue entry created.
        """
        with pytest.raises(InvalidArgument):
            engine.add_reward(ADMIN, "FREE", "Free Lunch", 0, 5)

        assert not RewardItem.objects.filter(state=engine.state, reward_id="FREE").exists()
        assert engine.get_reward_details("FREE").cost == 0

    @pytest.mark.parametrize(
        "reward_id, cost, stock",
        [("", 100, 0), ("R1", -5, 0), ("R1", 100, -1), ("R1", 10.5, 0), ("R1", 100, None)],
    )
    def test_invalid_arguments(self, engine, reward_id, cost, stock):
        with pytest.raises(InvalidArgument):
            engine.add_reward(ADMIN, reward_id, "Reward", cost, stock)

        assert RewardItem.objects.filter(state=engine.state).count() == 0

    def test_only_admin_adds_rewards(self, engine):
        with pytest.raises(Unauthorized):
            engine.add_reward(MERCHANT, "R1", "10% Off", 100, 2)

        assert not RewardItem.objects.filter(state=engine.state).exists()

    def test_add_overwrites_and_reenables(self, engine):
        """
        Re-adding an id replaces the entry and makes it available again.
        """
        engine.add_reward(ADMIN, "R1", "10% Off", 100, 2)
        engine.set_availability(ADMIN, "R1", False)

        engine.add_reward(ADMIN, "R1", "20% Off", 200, 0)

        details = engine.get_reward_details("R1")
        assert details.name == "20% Off"
        assert details.cost == 200
        assert details.available is True
        assert details.limited is False
        assert RewardItem.objects.filter(state=engine.state, reward_id="R1").count() == 1


class TestSetAvailability:
    def test_toggle_availability(self, engine):
        reward = RewardItemFactory(state=engine.state)

        engine.set_availability(ADMIN, reward.reward_id, False)
        assert engine.get_reward_details(reward.reward_id).available is False

        engine.set_availability(ADMIN, reward.reward_id, True)
        assert engine.get_reward_details(reward.reward_id).available is True

    def test_unknown_reward(self, engine):
        with pytest.raises(NotFound):
            engine.set_availability(ADMIN, "missing", True)

    def test_only_admin_changes_availability(self, engine):
        reward = RewardItemFactory(state=engine.state)

        with pytest.raises(Unauthorized):
            engine.set_availability(MERCHANT, reward.reward_id, False)

        assert engine.get_reward_details(reward.reward_id).available is True


class TestGetRewardDetails:
    def test_absent_reward_is_zero_value(self, engine):
        details = engine.get_reward_details("missing")

        assert details.exists is False
        assert details.as_dict() == {"id": "", "name": "", "cost": 0, "stock": 0, "available": False}

    def test_lookup_inside_a_transaction_is_not_cached(self, engine):
        reward = RewardItemFactory(state=engine.state)

        engine.get_reward_details(reward.reward_id)

        version = caching.current_version(engine.state.pk, reward.reward_id)
        assert cache.get(caching.entry_key(engine.state.pk, reward.reward_id, version)) is None

    def test_cached_absence_is_replaced_once_reward_is_added(self, engine):
        assert engine.get_reward_details("R1").exists is False

        engine.add_reward(ADMIN, "R1", "10% Off", 100, 0)

        assert engine.get_reward_details("R1").exists is True


@pytest.mark.django_db(transaction=True)
class TestCatalogueCache:
    """
    Outside a transaction lookups are served from the cache, keyed by the reward's version.
    """

    def test_lookup_is_cached(self, engine):
        reward = RewardItemFactory(state=engine.state)
        engine.get_reward_details(reward.reward_id)

        with patch.object(RewardCatalogue, "_load", side_effect=AssertionError("database read")):
            assert engine.get_reward_details(reward.reward_id).pk == reward.pk

    def test_committed_save_replaces_cached_entry(self, engine):
        reward = RewardItemFactory(state=engine.state, name="Old Name")
        engine.get_reward_details(reward.reward_id)

        reward.name = "New Name"
        reward.save()

        assert engine.get_reward_details(reward.reward_id).name == "New Name"

    def test_cached_absence_is_replaced_once_reward_is_added(self, engine):
        assert engine.get_reward_details("R1").exists is False

        engine.add_reward(ADMIN, "R1", "10% Off", 100, 0)

        assert engine.get_reward_details("R1").exists is True

    def test_row_read_before_a_commit_is_not_served_after_it(self, engine):
        """
        Scenario: A lookup misses the cache and reads stock 2. A redemption commits
        (stock 1) before the lookup stores what it read.
        Expected: The late write lands under a retired version; later lookups see stock 1.
        """
        reward = RewardItemFactory(state=engine.state, cost=100, stock=2)
        fund(engine, CUSTOMER, 100)
        load = RewardCatalogue._load

        def load_then_redeem(catalogue, reward_id):
            item = load(catalogue, reward_id)
            engine.redeem_reward(CUSTOMER, reward_id)
            return item

        with patch.object(RewardCatalogue, "_load", autospec=True, side_effect=load_then_redeem):
            assert engine.get_reward_details(reward.reward_id).stock == 2

        assert RewardItem.objects.get(pk=reward.pk).stock == 1
        assert engine.get_reward_details(reward.reward_id).stock == 1


class TestFieldLengths:
    def test_reward_id_longer_than_column_is_rejected(self, engine):
        with pytest.raises(InvalidArgument):
            engine.add_reward(ADMIN, "R" * 65, "Reward", 100, 0)

        assert not RewardItem.objects.filter(state=engine.state).exists()

    def test_reward_id_at_column_length_is_accepted(self, engine):
        engine.add_reward(ADMIN, "R" * 64, "Reward", 100, 0)

        assert engine.get_reward_details("R" * 64).exists is True

    @pytest.mark.parametrize("name", ["N" * 256, 42])
    def test_invalid_name_is_rejected(self, engine, name):
        with pytest.raises(InvalidArgument):
            engine.add_reward(ADMIN, "R1", name, 100, 0)

        assert not RewardItem.objects.filter(state=engine.state).exists()
