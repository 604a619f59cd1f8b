from typing import List, Optional

from pydantic import BaseModel, Field

from soundcoin.core.playback import PlaybackAction, RepeatMode
from soundcoin.core.rewards import AdKind
from soundcoin.schemas.ad import Ad
from soundcoin.schemas.track import Track


class PlayerSessionCreate(BaseModel):
    """재생 세션 생성 (queue 미지정 시 활성 트랙 전체)"""

    user_id: str = Field(..., min_length=1)
    queue: Optional[List[int]] = None
    start_index: int = Field(0, ge=0)
    ad_mode: AdKind = AdKind.AUDIO
    shuffle: bool = False
    repeat: RepeatMode = RepeatMode.NONE


class PlayerSettingsUpdate(BaseModel):
    toggle_shuffle: bool = False
    cycle_repeat: bool = False
    ad_mode: Optional[AdKind] = None


class PlayerStateResponse(BaseModel):
    session_id: str
    user_id: str
    action: PlaybackAction
    queue: List[int]
    current_index: int
    track: Optional[Track] = None
    ad: Optional[Ad] = None
    is_playing: bool
    is_playing_ad: bool
    shuffle: bool
    repeat: RepeatMode
    ad_mode: AdKind
    tracks_since_last_ad: int
    coins_awarded: int = 0
    balance: Optional[int] = None
