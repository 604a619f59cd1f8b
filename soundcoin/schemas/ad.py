from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from soundcoin.core.rewards import AdKind


class Ad(BaseModel):
    id: int
    ad_type: AdKind
    title: str
    content_url: str
    duration: int
    subtitle_text: Optional[str] = None
    coin_reward: Optional[int] = None
    impressions: int = 0
    active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdCreate(BaseModel):
    ad_type: AdKind
    title: str = Field(..., min_length=1, max_length=255)
    content_url: str = Field(..., min_length=1)
    duration: Optional[int] = Field(None, gt=0, description="초 단위 (기본 30)")
    subtitle_text: Optional[str] = None
    coin_reward: Optional[int] = Field(None, gt=0, description="미설정 시 5 코인")


class AdView(BaseModel):
    id: int
    user_id: str
    ad_id: int
    track_id: Optional[int] = None
    completed: bool
    verified: bool
    coins_earned: int
    viewed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdViewRequest(BaseModel):
    """광고 시청 보고"""

    ad_id: int
    track_id: Optional[int] = None
    completed: bool = False
    user_id: str = Field(..., min_length=1)


class AdViewResponse(BaseModel):
    success: bool
    coins_earned: int


class NextAdResponse(BaseModel):
    ad: Optional[Ad] = None


class AdListResponse(BaseModel):
    ads: List[Ad]
