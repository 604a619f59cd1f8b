import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.config import settings
from soundcoin.core.exceptions import NotFoundError, UpstreamError
from soundcoin.repositories.track_repository import TrackRepository
from soundcoin.schemas.track import Track, TrackCreate, TrackFiltersResponse, TrackQuery

logger = logging.getLogger(__name__)


class TrackService:
    def __init__(self, db: Session):
        self.db = db
        self.track_repo = TrackRepository(db)

    def search_tracks(self, params: TrackQuery) -> List[Track]:
        try:
            return self.track_repo.search(params)
        except SQLAlchemyError as e:
            logger.error(f"Failed to search tracks: {str(e)}")
            raise UpstreamError(f"Failed to search tracks: {str(e)}")

    def get_track(self, track_id: int) -> Optional[Track]:
        try:
            return self.track_repo.get_by_id(track_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get track {track_id}: {str(e)}")
            raise UpstreamError(f"Failed to get track: {str(e)}")

    def get_filters(self) -> TrackFiltersResponse:
        try:
            return TrackFiltersResponse(
                genres=self.track_repo.distinct_values("genre"),
                moods=self.track_repo.distinct_values("mood"),
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load track filters: {str(e)}")
            raise UpstreamError(f"Failed to load track filters: {str(e)}")

    def active_track_ids(self) -> List[int]:
        return self.track_repo.active_ids()

    def record_play(self, track_id: int) -> Track:
        try:
            if not self.track_repo.increment_plays(track_id):
                raise NotFoundError(f"Track not found: {track_id}")
            return self.track_repo.get_by_id(track_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record play for track {track_id}: {str(e)}")
            raise UpstreamError(f"Failed to record play: {str(e)}")

    def list_tracks(self) -> List[Track]:
        return self.track_repo.find_all(order_by="id")

    def create_track(self, request: TrackCreate) -> Track:
        data = request.model_dump()
        data["duration"] = request.duration or settings.DEFAULT_TRACK_DURATION_SECONDS
        try:
            track = self.track_repo.create(plays=0, likes=0, active=True, **data)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create track: {str(e)}")
            raise UpstreamError(f"Failed to create track: {str(e)}")
        logger.info(f"Created track {track.id}: {track.artist} - {track.title}")
        return track

    def deactivate_track(self, track_id: int) -> Track:
        try:
            track = self.track_repo.update(track_id, active=False)
        except SQLAlchemyError as e:
            logger.error(f"Failed to deactivate track {track_id}: {str(e)}")
            raise UpstreamError(f"Failed to deactivate track: {str(e)}")
        if track is None:
            raise NotFoundError(f"Track not found: {track_id}")
        return track
