from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from soundcoin.models.base import Base, BigIntId


class RedemptionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class PayoutMethod(str, Enum):
    PAYPAL = "paypal"
    GIFTCARD = "giftcard"


# 허용되는 상태 전이 (completed / rejected는 종료 상태)
REDEMPTION_TRANSITIONS = {
    RedemptionStatus.PENDING: {RedemptionStatus.APPROVED, RedemptionStatus.REJECTED},
    RedemptionStatus.APPROVED: {RedemptionStatus.COMPLETED},
    RedemptionStatus.REJECTED: set(),
    RedemptionStatus.COMPLETED: set(),
}


class Redemption(Base):
    """코인 환전 요청"""

    __tablename__ = "redemptions"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    coins_used: Mapped[int] = mapped_column(BigInteger, nullable=False)
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    paypal_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=RedemptionStatus.PENDING.value, nullable=False, index=True
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
