from datetime import datetime
from enum import Enum
from typing import Optional, Union

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from soundcoin.models.base import BaseModel


class ProfileRole(str, Enum):
    """프로필 역할"""

    USER = "user"
    ADMIN = "admin"

    @classmethod
    def is_admin(cls, role: Union[str, "ProfileRole"]) -> bool:
        if isinstance(role, cls):
            role = role.value
        return role == cls.ADMIN.value


class Profile(BaseModel):
    """
    사용자 프로필 - 코인 잔액을 보관

    id는 외부 인증 제공자가 발급한 사용자 ID를 그대로 사용한다.
    coins는 coin_transactions 합계의 캐시이며, balance_version으로
    낙관적 동시성 제어(compare-and-swap)를 수행한다.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # 현재 잔액 / 누적 획득량
    coins: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_earned: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # 잔액이 바뀔 때마다 1씩 증가 (CAS 및 ETag 용)
    balance_version: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    role: Mapped[str] = mapped_column(
        String(20), default=ProfileRole.USER.value, nullable=False
    )
    streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email}, coins={self.coins})>"

    @property
    def is_admin(self) -> bool:
        return ProfileRole.is_admin(str(self.role))
