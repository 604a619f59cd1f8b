"""
코인 원장 모델

모든 잔액 변동은 coin_transactions에 한 줄씩 기록된다.
레코드는 수정/삭제되지 않으며, balance_after로 거래 직후 잔액을 남긴다.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from soundcoin.models.base import Base, BigIntId


class TransactionType(str, Enum):
    EARNED = "earned"
    REDEEMED = "redeemed"
    BONUS = "bonus"
    REFERRAL = "referral"


class CoinTransaction(Base):
    __tablename__ = "coin_transactions"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False, index=True
    )
    # 양수면 적립, 음수면 차감
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    related_ad_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("ads.id"), nullable=True
    )
    balance_after: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
