from typing import Optional

from sqlalchemy import asc, update
from sqlalchemy.orm import Session

from soundcoin.models.ad import Ad as AdModel
from soundcoin.models.ad import AdView as AdViewModel
from soundcoin.repositories.base import BaseRepository
from soundcoin.schemas.ad import Ad, AdView


class AdRepository(BaseRepository[AdModel, Ad]):
    def __init__(self, db: Session):
        super().__init__(AdModel, Ad, db)

    def least_shown(self, ad_type: str) -> Optional[Ad]:
        """노출수가 가장 적은 활성 광고 (동률이면 먼저 등록된 광고)"""
        self._ensure_clean_session()
        row = (
            self.db.query(AdModel)
            .filter(AdModel.active.is_(True), AdModel.ad_type == ad_type)
            .order_by(asc(AdModel.impressions), asc(AdModel.id))
            .populate_existing()
            .first()
        )
        return self._to_schema(row)

    def increment_impressions(self, ad_id: int, commit: bool = True) -> bool:
        self._ensure_clean_session()
        result = self.db.execute(
            update(AdModel)
            .where(AdModel.id == ad_id)
            .values(impressions=AdModel.impressions + 1)
            .execution_options(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        return result.rowcount == 1


class AdViewRepository(BaseRepository[AdViewModel, AdView]):
    """ad_views 접근 (append-only)"""

    def __init__(self, db: Session):
        super().__init__(AdViewModel, AdView, db)

    def record_view(
        self,
        user_id: str,
        ad_id: int,
        track_id: Optional[int],
        completed: bool,
        coins_earned: int,
        verified: bool = True,
        commit: bool = False,
    ) -> AdView:
        return self.create(
            commit=commit,
            user_id=user_id,
            ad_id=ad_id,
            track_id=track_id,
            completed=completed,
            verified=verified,
            coins_earned=coins_earned,
        )
