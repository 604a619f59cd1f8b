from decimal import Decimal

from pydantic import BaseModel, Field


class AdminStats(BaseModel):
    """관리자 대시보드 집계"""

    total_users: int = Field(..., description="전체 프로필 수")
    total_tracks: int = Field(..., description="전체 트랙 수")
    total_ads: int = Field(..., description="전체 광고 수")
    pending_redemptions: int = Field(..., description="대기 중인 환전 요청 수")
    total_coins_earned: int = Field(0, description="누적 지급 코인")
    total_paid_out_usd: Decimal = Field(
        Decimal("0"), description="승인/완료된 환전 금액 합계"
    )
