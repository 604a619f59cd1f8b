from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from soundcoin.models.profile import Profile as ProfileModel
from soundcoin.repositories.base import BaseRepository
from soundcoin.schemas.profile import Profile


class ProfileRepository(BaseRepository[ProfileModel, Profile]):
    def __init__(self, db: Session):
        super().__init__(ProfileModel, Profile, db)

    def create_profile(
        self,
        user_id: str,
        email: str,
        username: Optional[str] = None,
        role: str = "user",
        commit: bool = True,
    ) -> Profile:
        """가입 시 0 코인으로 프로필 생성"""
        return self.create(
            commit=commit,
            id=user_id,
            email=email,
            username=username,
            role=role,
            coins=0,
            total_earned=0,
            balance_version=0,
        )

    def compare_and_swap_balance(
        self,
        user_id: str,
        expected_version: int,
        coins: int,
        total_earned: int,
    ) -> bool:
        """
        balance_version이 expected_version일 때만 잔액을 갱신

        다른 요청이 먼저 잔액을 바꿨다면 0행이 갱신되어 False를 반환한다.
        커밋은 호출자가 원장 기록과 함께 수행한다.
        """
        self._ensure_clean_session()
        stmt = (
            update(ProfileModel)
            .where(
                ProfileModel.id == user_id,
                ProfileModel.balance_version == expected_version,
            )
            .values(
                coins=coins,
                total_earned=total_earned,
                balance_version=expected_version + 1,
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def sum_total_earned(self) -> int:
        self._ensure_clean_session()
        total = self.db.query(func.coalesce(func.sum(ProfileModel.total_earned), 0)).scalar()
        return int(total or 0)
