"""
서버측 재생 세션 서비스

세션 상태(PlaybackState)는 프로세스 메모리의 PlayerSessionRegistry에 보관하고,
요청마다 현재 DB 세션으로 훅을 만들어 PlaybackOrchestrator를 구동한다.
광고 완료 보상은 LedgerService를 통해 ad_views 기록과 같은 트랜잭션으로 커밋된다.
"""

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.config import settings
from soundcoin.core.exceptions import (
    BaseAPIException,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from soundcoin.core.playback import (
    AdSlot,
    PlaybackAction,
    PlaybackDecision,
    PlaybackHooks,
    PlaybackOrchestrator,
    PlaybackState,
)
from soundcoin.core.rewards import AdKind, RewardTable
from soundcoin.repositories.ad_repository import AdRepository, AdViewRepository
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.repositories.track_repository import TrackRepository
from soundcoin.schemas.player import (
    PlayerSessionCreate,
    PlayerSettingsUpdate,
    PlayerStateResponse,
)
from soundcoin.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


@dataclass
class PlayerSession:
    session_id: str
    user_id: str
    state: PlaybackState
    rng: random.Random = field(default_factory=random.Random)
    lock: threading.Lock = field(default_factory=threading.Lock)


class PlayerSessionRegistry:
    """프로세스 내 재생 세션 저장소"""

    def __init__(self):
        self._sessions: Dict[str, PlayerSession] = {}
        self._lock = threading.Lock()

    def create(
        self, user_id: str, state: PlaybackState, rng: Optional[random.Random] = None
    ) -> PlayerSession:
        session = PlayerSession(
            session_id=uuid.uuid4().hex,
            user_id=user_id,
            state=state,
            rng=rng or random.Random(),
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[PlayerSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class DatabasePlaybackHooks(PlaybackHooks):
    def __init__(self, db: Session, user_id: str, ledger_service: LedgerService):
        self.db = db
        self.user_id = user_id
        self.ledger_service = ledger_service
        self.ad_repo = AdRepository(db)
        self.view_repo = AdViewRepository(db)
        self.track_repo = TrackRepository(db)

    def pick_ad(self, kind: AdKind) -> Optional[AdSlot]:
        ad = self.ad_repo.least_shown(AdKind(kind).value)
        if ad is None:
            logger.info(f"No active {AdKind(kind).value} ad available, skipping ad slot")
            return None
        return AdSlot(
            ad_id=ad.id,
            kind=ad.ad_type,
            content_url=ad.content_url,
            duration=ad.duration,
        )

    def ad_started(self, ad: AdSlot) -> None:
        self.ad_repo.increment_impressions(ad.ad_id)

    def ad_completed(
        self, ad: AdSlot, track_id: Optional[int], completed: bool, coins: int
    ) -> None:
        if coins:
            self.ledger_service.credit(
                self.user_id,
                coins,
                description=f"{ad.kind.value.capitalize()} ad reward",
                related_ad_id=ad.ad_id,
                commit=False,
            )
        self.view_repo.record_view(
            user_id=self.user_id,
            ad_id=ad.ad_id,
            track_id=track_id,
            completed=completed,
            coins_earned=coins,
        )
        self.db.commit()

    def track_started(self, track_id: int) -> None:
        self.track_repo.increment_plays(track_id)


class PlayerService:
    def __init__(
        self,
        db: Session,
        registry: PlayerSessionRegistry,
        ledger_service: Optional[LedgerService] = None,
        reward_table: Optional[RewardTable] = None,
        ad_interval: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.db = db
        self.registry = registry
        self.ledger_service = ledger_service or LedgerService(db)
        self.reward_table = reward_table or RewardTable()
        self.ad_interval = ad_interval or settings.AD_INTERVAL_TRACKS
        self.clock = clock
        self.profile_repo = ProfileRepository(db)
        self.track_repo = TrackRepository(db)
        self.ad_repo = AdRepository(db)

    def create_session(
        self, request: PlayerSessionCreate, rng: Optional[random.Random] = None
    ) -> PlayerStateResponse:
        if self.profile_repo.get_by_id(request.user_id) is None:
            raise NotFoundError(f"Profile not found: {request.user_id}")

        queue = self._resolve_queue(request.queue)
        if request.start_index >= len(queue):
            raise ValidationError(
                "start_index is outside the queue",
                details={"start_index": request.start_index, "queue_length": len(queue)},
            )

        state = PlaybackState(
            queue=queue,
            shuffle=request.shuffle,
            repeat=request.repeat,
            ad_mode=request.ad_mode,
        )
        session = self.registry.create(request.user_id, state, rng)
        logger.info(
            f"Player session {session.session_id} created for {request.user_id} "
            f"({len(queue)} tracks)"
        )
        return self._run(session, lambda player: player.start(request.start_index))

    def get_state(self, session_id: str) -> PlayerStateResponse:
        session = self._get_session(session_id)
        return self._run(session, lambda player: player.current())

    def media_ended(self, session_id: str) -> PlayerStateResponse:
        session = self._get_session(session_id)
        return self._run(session, lambda player: player.on_media_ended())

    def skip_next(self, session_id: str) -> PlayerStateResponse:
        session = self._get_session(session_id)
        return self._run(session, lambda player: player.skip_next())

    def skip_previous(self, session_id: str) -> PlayerStateResponse:
        session = self._get_session(session_id)
        return self._run(session, lambda player: player.skip_previous())

    def play_index(self, session_id: str, index: int) -> PlayerStateResponse:
        session = self._get_session(session_id)
        if not 0 <= index < len(session.state.queue):
            raise ValidationError(
                "Queue index out of range",
                details={"index": index, "queue_length": len(session.state.queue)},
            )
        return self._run(session, lambda player: player.start(index))

    def update_settings(
        self, session_id: str, request: PlayerSettingsUpdate
    ) -> PlayerStateResponse:
        session = self._get_session(session_id)

        def apply(player: PlaybackOrchestrator) -> PlaybackDecision:
            if request.toggle_shuffle:
                player.toggle_shuffle()
            if request.cycle_repeat:
                player.cycle_repeat()
            if request.ad_mode is not None:
                player.set_ad_mode(request.ad_mode)
            return player.current()

        return self._run(session, apply)

    def close_session(self, session_id: str) -> None:
        if not self.registry.remove(session_id):
            raise NotFoundError(f"Player session not found: {session_id}")
        logger.info(f"Player session {session_id} closed")

    def _resolve_queue(self, queue: Optional[List[int]]) -> List[int]:
        if queue is None:
            queue = self.track_repo.active_ids()
        else:
            for track_id in queue:
                track = self.track_repo.get_by_id(track_id)
                if track is None or not track.active:
                    raise ValidationError(
                        f"Track is not available: {track_id}",
                        details={"track_id": track_id},
                    )
        if not queue:
            raise ValidationError("No tracks available to play")
        return list(queue)

    def _get_session(self, session_id: str) -> PlayerSession:
        session = self.registry.get(session_id)
        if session is None:
            raise NotFoundError(f"Player session not found: {session_id}")
        return session

    def _run(
        self,
        session: PlayerSession,
        operation: Callable[[PlaybackOrchestrator], PlaybackDecision],
    ) -> PlayerStateResponse:
        hooks = DatabasePlaybackHooks(self.db, session.user_id, self.ledger_service)
        player = PlaybackOrchestrator(
            session.state,
            hooks=hooks,
            reward_table=self.reward_table,
            ad_interval=self.ad_interval,
            rng=session.rng,
            clock=self.clock,
        )
        with session.lock:
            try:
                decision = operation(player)
                return self._to_response(session, decision)
            except BaseAPIException:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(
                    f"Player session {session.session_id} failed: {str(e)}"
                )
                raise UpstreamError(f"Failed to update playback: {str(e)}")

    def _to_response(
        self, session: PlayerSession, decision: PlaybackDecision
    ) -> PlayerStateResponse:
        state = session.state
        track = None
        ad = None
        if decision.action == PlaybackAction.TRACK and decision.track_id is not None:
            track = self.track_repo.get_by_id(decision.track_id)
        if decision.action == PlaybackAction.AD and decision.ad is not None:
            ad = self.ad_repo.get_by_id(decision.ad.ad_id)

        balance = None
        if decision.coins_awarded:
            profile = self.profile_repo.get_by_id(session.user_id)
            balance = profile.coins if profile else None
            logger.info(
                f"User {session.user_id} earned {decision.coins_awarded} coins "
                f"in session {session.session_id}"
            )

        return PlayerStateResponse(
            session_id=session.session_id,
            user_id=session.user_id,
            action=decision.action,
            queue=state.queue,
            current_index=state.current_index,
            track=track,
            ad=ad,
            is_playing=state.is_playing,
            is_playing_ad=state.is_playing_ad,
            shuffle=state.shuffle,
            repeat=state.repeat,
            ad_mode=state.ad_mode,
            tracks_since_last_ad=state.tracks_since_last_ad,
            coins_awarded=decision.coins_awarded,
            balance=balance,
        )
