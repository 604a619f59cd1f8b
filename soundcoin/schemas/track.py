from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TrackSort(str, Enum):
    NEWEST = "newest"
    POPULAR = "popular"
    DURATION = "duration"
    ALPHABETICAL = "alphabetical"


class Track(BaseModel):
    id: int
    title: str
    artist: str
    album: Optional[str] = None
    duration: int
    cover_url: Optional[str] = None
    audio_url: str
    genre: Optional[str] = None
    mood: Optional[str] = None
    bpm: Optional[int] = None
    tags: Optional[List[str]] = None
    plays: int = 0
    likes: int = 0
    is_ai_generated: bool = False
    source: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TrackQuery(BaseModel):
    """트랙 목록 필터"""

    genre: Optional[str] = None
    mood: Optional[str] = None
    search: Optional[str] = None
    bpm_min: Optional[int] = Field(None, ge=0)
    bpm_max: Optional[int] = Field(None, ge=0)
    sort_by: TrackSort = TrackSort.NEWEST
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class TrackCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    artist: str = Field(..., min_length=1, max_length=255)
    album: Optional[str] = None
    duration: Optional[int] = Field(None, gt=0, description="초 단위 (기본 180)")
    cover_url: Optional[str] = None
    audio_url: str = Field(..., min_length=1, description="외부 스토리지에 업로드된 URL")
    genre: Optional[str] = None
    mood: Optional[str] = None
    bpm: Optional[int] = Field(None, gt=0)
    tags: Optional[List[str]] = None
    is_ai_generated: bool = False
    source: Optional[str] = None


class TrackListResponse(BaseModel):
    tracks: List[Track]


class TrackDetailResponse(BaseModel):
    track: Optional[Track] = None


class TrackFiltersResponse(BaseModel):
    genres: List[str]
    moods: List[str]
