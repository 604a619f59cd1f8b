from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from soundcoin.models.base import Base, BaseModel, BigIntId


class Ad(BaseModel):
    """광고 소재 (audio / video)"""

    __tablename__ = "ads"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    ad_type: Mapped[str] = mapped_column(String(10), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content_url: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    subtitle_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # NULL이면 기본 보상(5 코인)
    coin_reward: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    impressions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Ad(id={self.id}, type={self.ad_type}, title={self.title})>"


class AdView(Base):
    """광고 시청 기록 (append-only)"""

    __tablename__ = "ad_views"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False, index=True
    )
    ad_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("ads.id"), nullable=False, index=True
    )
    track_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("tracks.id"), nullable=True
    )
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    coins_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
