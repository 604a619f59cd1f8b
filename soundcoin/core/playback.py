"""
재생 오케스트레이터 - 트랙 사이에 광고를 끼워 넣는 상태 머신

핵심 규칙:
1. 마지막 광고 이후 자연 종료된 트랙 수가 ad_interval 이상이면 다음 전환에서 광고 재생
2. 광고가 없으면 카운터만 0으로 리셋하고 트랙 재생 (재시도 없음)
3. 광고 완료 시 코인 지급 후 카운터 0, 원래 재생하려던 트랙으로 복귀
4. 사용자 스킵은 카운터를 올리지 않음
5. 광고 도중 스킵/이동은 미완료 시청(0 코인)으로 기록하고 카운터를 리셋

I/O는 PlaybackHooks 구현체에 위임한다 (광고 조회, 노출수/재생수 증가, 코인 지급).
"""

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from soundcoin.core.rewards import AdKind, RewardTable


class RepeatMode(str, Enum):
    NONE = "none"
    ALL = "all"
    ONE = "one"


class PlaybackAction(str, Enum):
    TRACK = "track"
    AD = "ad"
    STOPPED = "stopped"


@dataclass
class AdSlot:
    ad_id: int
    kind: AdKind
    content_url: str
    duration: int


@dataclass
class PlaybackState:
    queue: List[int]
    current_index: int = 0
    repeat: RepeatMode = RepeatMode.NONE
    shuffle: bool = False
    ad_mode: AdKind = AdKind.AUDIO
    tracks_since_last_ad: int = 0
    is_playing: bool = False
    is_playing_ad: bool = False
    current_ad: Optional[AdSlot] = None
    ad_started_at: Optional[float] = None
    resume_index: Optional[int] = None

    @property
    def current_track_id(self) -> Optional[int]:
        if 0 <= self.current_index < len(self.queue):
            return self.queue[self.current_index]
        return None


@dataclass
class PlaybackDecision:
    action: PlaybackAction
    index: Optional[int] = None
    track_id: Optional[int] = None
    ad: Optional[AdSlot] = None
    coins_awarded: int = 0


class PlaybackHooks:
    """오케스트레이터 부수효과 인터페이스 (기본 구현은 아무것도 하지 않음)"""

    def pick_ad(self, kind: AdKind) -> Optional[AdSlot]:
        return None

    def ad_started(self, ad: AdSlot) -> None:
        pass

    def ad_completed(
        self, ad: AdSlot, track_id: Optional[int], completed: bool, coins: int
    ) -> None:
        pass

    def track_started(self, track_id: int) -> None:
        pass


class PlaybackOrchestrator:
    def __init__(
        self,
        state: PlaybackState,
        hooks: Optional[PlaybackHooks] = None,
        reward_table: Optional[RewardTable] = None,
        ad_interval: int = 3,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = state
        self.hooks = hooks or PlaybackHooks()
        self.reward_table = reward_table or RewardTable()
        self.ad_interval = ad_interval
        self.rng = rng or random.Random()
        self.clock = clock

    @property
    def ad_due(self) -> bool:
        return (
            self.state.tracks_since_last_ad >= self.ad_interval
            and not self.state.is_playing_ad
        )

    def start(self, index: int) -> PlaybackDecision:
        """index 위치의 트랙 재생을 요청. 광고 차례면 광고가 먼저 나간다."""
        state = self.state
        if not state.queue:
            return self._stop()
        if not 0 <= index < len(state.queue):
            raise ValueError(f"Queue index out of range: {index}")

        if state.is_playing_ad:
            # 광고 도중 다른 트랙으로 이동하면 미완료 시청으로 기록
            return self._finish_ad(skipped=True, next_index=index)

        if self.ad_due:
            ad = self.hooks.pick_ad(state.ad_mode)
            if ad is not None:
                return self._start_ad(ad, resume_index=index)
            # 광고가 없으면 카운터만 리셋하고 그대로 진행
            state.tracks_since_last_ad = 0

        return self._start_track(index)

    def on_media_ended(self) -> PlaybackDecision:
        """현재 미디어(트랙 또는 광고)가 끝까지 재생됨"""
        if self.state.is_playing_ad:
            return self._finish_ad()
        if not self.state.is_playing:
            return self.current()

        self.state.tracks_since_last_ad += 1
        next_index = self._natural_next_index()
        if next_index is None:
            return self._stop()
        return self.start(next_index)

    def skip_next(self) -> PlaybackDecision:
        state = self.state
        if not state.queue:
            return self._stop()
        if state.is_playing_ad:
            return self._finish_ad(skipped=True)

        if state.shuffle:
            next_index = self.rng.randrange(len(state.queue))
        else:
            next_index = state.current_index + 1
            if next_index >= len(state.queue):
                if state.repeat != RepeatMode.ALL:
                    return self.current()
                next_index = 0
        return self.start(next_index)

    def skip_previous(self) -> PlaybackDecision:
        state = self.state
        if not state.queue:
            return self._stop()
        if state.is_playing_ad:
            return self._finish_ad(skipped=True)

        prev_index = state.current_index - 1
        if prev_index < 0:
            if state.repeat != RepeatMode.ALL:
                return self.current()
            prev_index = len(state.queue) - 1
        return self.start(prev_index)

    def toggle_shuffle(self) -> bool:
        self.state.shuffle = not self.state.shuffle
        return self.state.shuffle

    def cycle_repeat(self) -> RepeatMode:
        order = [RepeatMode.NONE, RepeatMode.ALL, RepeatMode.ONE]
        position = order.index(self.state.repeat)
        self.state.repeat = order[(position + 1) % len(order)]
        return self.state.repeat

    def set_ad_mode(self, mode: AdKind) -> None:
        self.state.ad_mode = AdKind(mode)

    def _natural_next_index(self) -> Optional[int]:
        state = self.state
        if state.repeat == RepeatMode.ONE:
            return state.current_index
        if state.shuffle:
            return self.rng.randrange(len(state.queue))

        next_index = state.current_index + 1
        if next_index >= len(state.queue):
            if state.repeat == RepeatMode.ALL:
                return 0
            return None
        return next_index

    def _start_track(self, index: int) -> PlaybackDecision:
        state = self.state
        state.current_index = index
        state.is_playing = True
        state.is_playing_ad = False
        state.current_ad = None
        state.ad_started_at = None
        state.resume_index = None

        track_id = state.queue[index]
        self.hooks.track_started(track_id)
        return PlaybackDecision(
            action=PlaybackAction.TRACK, index=index, track_id=track_id
        )

    def _start_ad(self, ad: AdSlot, resume_index: int) -> PlaybackDecision:
        state = self.state
        state.is_playing = True
        state.is_playing_ad = True
        state.current_ad = ad
        state.ad_started_at = self.clock()
        state.resume_index = resume_index

        self.hooks.ad_started(ad)
        return PlaybackDecision(
            action=PlaybackAction.AD,
            index=resume_index,
            track_id=state.queue[resume_index],
            ad=ad,
        )

    def _finish_ad(
        self, skipped: bool = False, next_index: Optional[int] = None
    ) -> PlaybackDecision:
        """광고 종료 처리. 스킵이면 재생 시간과 무관하게 미완료(0 코인)."""
        state = self.state
        ad = state.current_ad
        resume_index = state.resume_index
        if resume_index is None:
            resume_index = state.current_index
        resume_track_id = state.queue[resume_index]

        # 광고 길이만큼 재생되지 않았으면 완료로 인정하지 않음
        elapsed = self.clock() - (state.ad_started_at or 0.0)
        completed = not skipped and ad is not None and elapsed >= ad.duration
        coins = self.reward_table.coins_for_ad_kind(ad.kind) if completed else 0

        if ad is not None:
            self.hooks.ad_completed(ad, resume_track_id, completed, coins)

        state.tracks_since_last_ad = 0
        state.is_playing_ad = False
        state.current_ad = None
        state.ad_started_at = None

        target = resume_index if next_index is None else next_index
        decision = self._start_track(target)
        decision.coins_awarded = coins
        decision.ad = ad
        return decision

    def current(self) -> PlaybackDecision:
        """상태를 바꾸지 않고 현재 재생 중인 항목을 반환"""
        state = self.state
        if state.is_playing_ad:
            return PlaybackDecision(
                action=PlaybackAction.AD,
                index=state.resume_index,
                track_id=state.queue[state.resume_index]
                if state.resume_index is not None
                else None,
                ad=state.current_ad,
            )
        if not state.is_playing:
            return PlaybackDecision(action=PlaybackAction.STOPPED)
        return PlaybackDecision(
            action=PlaybackAction.TRACK,
            index=state.current_index,
            track_id=state.current_track_id,
        )

    def _stop(self) -> PlaybackDecision:
        self.state.is_playing = False
        return PlaybackDecision(action=PlaybackAction.STOPPED)
