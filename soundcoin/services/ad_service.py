import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.config import settings
from soundcoin.core.exceptions import BaseAPIException, NotFoundError, UpstreamError
from soundcoin.core.rewards import AdKind, RewardTable
from soundcoin.models.ledger import TransactionType
from soundcoin.repositories.ad_repository import AdRepository, AdViewRepository
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.schemas.ad import Ad, AdCreate, AdViewRequest, AdViewResponse
from soundcoin.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class AdService:
    """광고 조회/시청 기록/보상 지급"""

    def __init__(
        self,
        db: Session,
        ledger_service: Optional[LedgerService] = None,
        reward_table: Optional[RewardTable] = None,
    ):
        self.db = db
        self.ad_repo = AdRepository(db)
        self.view_repo = AdViewRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.ledger_service = ledger_service or LedgerService(db)
        self.reward_table = reward_table or RewardTable()

    def record_view(self, request: AdViewRequest) -> AdViewResponse:
        """
        광고 시청 기록. completed일 때만 광고에 설정된 보상(기본 5 코인) 지급.
        시청 기록은 완료 여부와 무관하게 항상 남긴다.
        """
        try:
            ad = self.ad_repo.get_by_id(request.ad_id)
            if ad is None:
                raise NotFoundError(f"Ad not found: {request.ad_id}")
            if self.profile_repo.get_by_id(request.user_id) is None:
                raise NotFoundError(f"Profile not found: {request.user_id}")

            coins = (
                self.reward_table.coins_for_configured_ad(ad.coin_reward)
                if request.completed
                else 0
            )
            if coins:
                self.ledger_service.credit(
                    request.user_id,
                    coins,
                    description="Ad view reward",
                    related_ad_id=ad.id,
                    commit=False,
                )
            self.view_repo.record_view(
                user_id=request.user_id,
                ad_id=ad.id,
                track_id=request.track_id,
                completed=request.completed,
                coins_earned=coins,
            )
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record ad view {request.ad_id}: {str(e)}")
            raise UpstreamError(f"Failed to record ad view: {str(e)}")

        logger.info(
            f"Ad {request.ad_id} viewed by {request.user_id} "
            f"(completed={request.completed}, coins={coins})"
        )
        return AdViewResponse(success=True, coins_earned=coins)

    def next_ad(self, kind: AdKind) -> Optional[Ad]:
        try:
            return self.ad_repo.least_shown(AdKind(kind).value)
        except SQLAlchemyError as e:
            logger.error(f"Failed to pick ad: {str(e)}")
            raise UpstreamError(f"Failed to pick ad: {str(e)}")

    def list_ads(self, include_inactive: bool = True) -> List[Ad]:
        filters = None if include_inactive else {"active": True}
        return self.ad_repo.find_all(filters=filters, order_by="id")

    def create_ad(self, request: AdCreate) -> Ad:
        try:
            ad = self.ad_repo.create(
                ad_type=request.ad_type.value,
                title=request.title,
                content_url=request.content_url,
                duration=request.duration or settings.DEFAULT_AD_DURATION_SECONDS,
                subtitle_text=request.subtitle_text,
                coin_reward=request.coin_reward,
                impressions=0,
                active=True,
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to create ad: {str(e)}")
            raise UpstreamError(f"Failed to create ad: {str(e)}")
        logger.info(f"Created {ad.ad_type.value} ad {ad.id}: {ad.title}")
        return ad

    def deactivate_ad(self, ad_id: int) -> Ad:
        try:
            ad = self.ad_repo.update(ad_id, active=False)
        except SQLAlchemyError as e:
            logger.error(f"Failed to deactivate ad {ad_id}: {str(e)}")
            raise UpstreamError(f"Failed to deactivate ad: {str(e)}")
        if ad is None:
            raise NotFoundError(f"Ad not found: {ad_id}")
        return ad
