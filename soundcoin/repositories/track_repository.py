from typing import List

from sqlalchemy import asc, desc, or_, update
from sqlalchemy.orm import Session

from soundcoin.models.track import Track as TrackModel
from soundcoin.repositories.base import BaseRepository
from soundcoin.schemas.track import Track, TrackQuery, TrackSort


class TrackRepository(BaseRepository[TrackModel, Track]):
    def __init__(self, db: Session):
        super().__init__(TrackModel, Track, db)

    def search(self, params: TrackQuery) -> List[Track]:
        """활성 트랙만 필터/정렬/페이지네이션"""
        self._ensure_clean_session()
        query = self.db.query(TrackModel).filter(TrackModel.active.is_(True))

        if params.genre:
            query = query.filter(TrackModel.genre == params.genre)
        if params.mood:
            query = query.filter(TrackModel.mood == params.mood)
        if params.search:
            pattern = f"%{params.search}%"
            query = query.filter(
                or_(TrackModel.title.ilike(pattern), TrackModel.artist.ilike(pattern))
            )
        if params.bpm_min is not None:
            query = query.filter(TrackModel.bpm >= params.bpm_min)
        if params.bpm_max is not None:
            query = query.filter(TrackModel.bpm <= params.bpm_max)

        if params.sort_by == TrackSort.POPULAR:
            query = query.order_by(desc(TrackModel.plays), desc(TrackModel.id))
        elif params.sort_by == TrackSort.DURATION:
            query = query.order_by(asc(TrackModel.duration), asc(TrackModel.id))
        elif params.sort_by == TrackSort.ALPHABETICAL:
            query = query.order_by(asc(TrackModel.title), asc(TrackModel.id))
        else:
            query = query.order_by(desc(TrackModel.created_at), desc(TrackModel.id))

        rows = query.offset(params.offset).limit(params.limit).all()
        return self._to_schemas(rows)

    def active_ids(self) -> List[int]:
        self._ensure_clean_session()
        rows = (
            self.db.query(TrackModel.id)
            .filter(TrackModel.active.is_(True))
            .order_by(asc(TrackModel.id))
            .all()
        )
        return [row[0] for row in rows]

    def distinct_values(self, column_name: str) -> List[str]:
        self._ensure_clean_session()
        column = getattr(TrackModel, column_name)
        rows = (
            self.db.query(column)
            .filter(TrackModel.active.is_(True), column.isnot(None))
            .distinct()
            .order_by(asc(column))
            .all()
        )
        return [row[0] for row in rows]

    def increment_plays(self, track_id: int, commit: bool = True) -> bool:
        self._ensure_clean_session()
        result = self.db.execute(
            update(TrackModel)
            .where(TrackModel.id == track_id)
            .values(plays=TrackModel.plays + 1)
            .execution_options(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        return result.rowcount == 1
