from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from soundcoin.models.profile import ProfileRole


class Profile(BaseModel):
    id: str
    email: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    coins: int = 0
    total_earned: int = 0
    balance_version: int = 0
    role: ProfileRole = ProfileRole.USER
    streak_days: int = 0
    is_premium: bool = False
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_admin(self) -> bool:
        return ProfileRole.is_admin(self.role)


class BalanceResponse(BaseModel):
    """잔액 조회 응답 (ETag = balance_version)"""

    user_id: str = Field(..., description="사용자 ID")
    coins: int = Field(..., description="현재 코인 잔액")
    total_earned: int = Field(..., description="누적 획득 코인")
    balance_version: int = Field(..., description="잔액 버전")


class ProfileListResponse(BaseModel):
    profiles: List[Profile]
