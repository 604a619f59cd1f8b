import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.core.exceptions import NotFoundError, UpstreamError
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.schemas.profile import BalanceResponse, Profile

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session):
        self.db = db
        self.profile_repo = ProfileRepository(db)

    def get_balance(self, user_id: str) -> BalanceResponse:
        try:
            profile = self.profile_repo.get_by_id(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get balance for user {user_id}: {str(e)}")
            raise UpstreamError(f"Failed to retrieve balance: {str(e)}")
        if profile is None:
            raise NotFoundError(f"Profile not found: {user_id}")
        return BalanceResponse(
            user_id=profile.id,
            coins=profile.coins,
            total_earned=profile.total_earned,
            balance_version=profile.balance_version,
        )

    def ensure_profile(
        self, user_id: str, email: str, username: Optional[str] = None
    ) -> Profile:
        """가입 직후 로컬 프로필 생성 (이미 있으면 그대로 반환)"""
        try:
            existing = self.profile_repo.get_by_id(user_id)
            if existing is not None:
                return existing
            profile = self.profile_repo.create_profile(user_id, email, username)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create profile {user_id}: {str(e)}")
            raise UpstreamError(f"Failed to create profile: {str(e)}")
        logger.info(f"Created profile {user_id} ({email})")
        return profile
