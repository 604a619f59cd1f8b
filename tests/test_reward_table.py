from decimal import Decimal

from soundcoin.config import settings
from soundcoin.core.rewards import AdKind, RewardTable


class TestRewardTable:
    def test_player_ad_rewards_by_kind(self):
        table = RewardTable()
        assert table.coins_for_ad_kind(AdKind.AUDIO) == 1
        assert table.coins_for_ad_kind(AdKind.VIDEO) == 3
        assert table.coins_for_ad_kind("video") == 3

    def test_configured_ad_reward_defaults_to_five(self):
        table = RewardTable()
        assert table.coins_for_configured_ad(None) == 5
        assert table.coins_for_configured_ad(0) == 5
        assert table.coins_for_configured_ad(12) == 12

    def test_single_conversion_rate(self):
        table = RewardTable()
        assert table.coins_to_usd(1000) == Decimal("0.10")
        assert table.coins_to_usd(10000) == Decimal("1")
        assert table.coins_to_usd(1) == Decimal("0.0001")

    def test_redemption_tiers(self):
        tiers = RewardTable().redemption_tiers()
        assert [tier.coins for tier in tiers] == [1000, 2500, 5000, 10000]
        assert [tier.label for tier in tiers] == ["$0.10", "$0.25", "$0.50", "$1.00"]

    def test_from_settings(self):
        table = RewardTable.from_settings(settings)
        assert table.coin_value_usd == settings.COIN_VALUE_USD
        assert table.tier_coins == sorted(settings.REDEMPTION_TIER_COINS)
