import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.core.exceptions import UpstreamError
from soundcoin.models.redemption import RedemptionStatus
from soundcoin.repositories.ad_repository import AdRepository
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.repositories.redemption_repository import RedemptionRepository
from soundcoin.repositories.track_repository import TrackRepository
from soundcoin.schemas.admin import AdminStats

logger = logging.getLogger(__name__)


class AdminService:
    """관리자 대시보드 집계"""

    def __init__(self, db: Session):
        self.db = db
        self.profile_repo = ProfileRepository(db)
        self.track_repo = TrackRepository(db)
        self.ad_repo = AdRepository(db)
        self.redemption_repo = RedemptionRepository(db)

    def get_stats(self) -> AdminStats:
        try:
            return AdminStats(
                total_users=self.profile_repo.count(),
                total_tracks=self.track_repo.count(),
                total_ads=self.ad_repo.count(),
                pending_redemptions=self.redemption_repo.count(
                    {"status": RedemptionStatus.PENDING.value}
                ),
                total_coins_earned=self.profile_repo.sum_total_earned(),
                total_paid_out_usd=self.redemption_repo.sum_amount_by_status(
                    [RedemptionStatus.APPROVED.value, RedemptionStatus.COMPLETED.value]
                ),
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to aggregate admin stats: {str(e)}")
            raise UpstreamError(f"Failed to load stats: {str(e)}")
