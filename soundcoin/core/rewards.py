"""
코인 보상 정책 테이블

광고 종류별 지급 코인, 관리자 설정 광고의 기본 보상, 코인-달러 환산율과
환전 티어를 한 곳에 모아 둔다. I/O 없는 순수 데이터/계산만 포함한다.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Union


class AdKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"


@dataclass(frozen=True)
class RedemptionTier:
    coins: int
    usd: Decimal

    @property
    def label(self) -> str:
        return f"${self.usd:.2f}"


class RewardTable:
    """광고 보상 및 환전 정책"""

    def __init__(
        self,
        audio_ad_coins: int = 1,
        video_ad_coins: int = 3,
        default_ad_coin_reward: int = 5,
        coin_value_usd: Union[Decimal, str] = Decimal("0.0001"),
        tier_coins: Iterable[int] = (1000, 2500, 5000, 10000),
    ):
        self.audio_ad_coins = audio_ad_coins
        self.video_ad_coins = video_ad_coins
        self.default_ad_coin_reward = default_ad_coin_reward
        self.coin_value_usd = Decimal(str(coin_value_usd))
        self.tier_coins = sorted(tier_coins)

    @classmethod
    def from_settings(cls, settings) -> "RewardTable":
        return cls(
            audio_ad_coins=settings.AUDIO_AD_COINS,
            video_ad_coins=settings.VIDEO_AD_COINS,
            default_ad_coin_reward=settings.DEFAULT_AD_COIN_REWARD,
            coin_value_usd=settings.COIN_VALUE_USD,
            tier_coins=settings.REDEMPTION_TIER_COINS,
        )

    def coins_for_ad_kind(self, kind: Union[AdKind, str]) -> int:
        """플레이어에서 광고를 끝까지 재생했을 때 지급할 코인"""
        kind = AdKind(kind)
        if kind == AdKind.VIDEO:
            return self.video_ad_coins
        return self.audio_ad_coins

    def coins_for_configured_ad(self, coin_reward: Optional[int]) -> int:
        """관리자가 설정한 광고 보상 (미설정/0이면 기본값)"""
        return coin_reward or self.default_ad_coin_reward

    def coins_to_usd(self, coins: int) -> Decimal:
        return Decimal(coins) * self.coin_value_usd

    def redemption_tiers(self) -> List[RedemptionTier]:
        return [
            RedemptionTier(coins=coins, usd=self.coins_to_usd(coins))
            for coins in self.tier_coins
        ]
