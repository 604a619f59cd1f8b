"""
코인 원장 서비스

잔액 변경은 항상 이 서비스를 거친다.
1. 프로필을 새로 읽어 balance_version 확보
2. 새 잔액 계산 (음수면 InsufficientBalanceError, 아무것도 변경하지 않음)
3. balance_version 조건부 UPDATE (compare-and-swap)
4. 같은 DB 트랜잭션 안에서 coin_transactions 기록 후 커밋

CAS가 실패하면 롤백 후 BALANCE_UPDATE_MAX_RETRIES 회까지 재시도한다.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.config import settings
from soundcoin.core.exceptions import (
    BaseAPIException,
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from soundcoin.models.ledger import TransactionType
from soundcoin.repositories.ledger_repository import LedgerRepository
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.schemas.ledger import (
    IntegrityCheckResponse,
    LedgerResult,
    TransactionListResponse,
)

logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(self, db: Session, max_retries: Optional[int] = None):
        self.db = db
        self.profile_repo = ProfileRepository(db)
        self.ledger_repo = LedgerRepository(db)
        self.max_retries = max_retries or settings.BALANCE_UPDATE_MAX_RETRIES

    def apply_delta(
        self,
        user_id: str,
        delta: int,
        transaction_type: TransactionType,
        description: str,
        related_ad_id: Optional[int] = None,
        commit: bool = True,
    ) -> LedgerResult:
        """
        잔액에 delta를 반영하고 원장에 기록

        commit=False면 호출자가 같은 트랜잭션에 추가 작업(환전 요청 생성 등)을
        붙인 뒤 직접 커밋한다.
        """
        if delta == 0:
            raise ValidationError("Coin delta must be non-zero")
        transaction_type = TransactionType(transaction_type)

        try:
            for attempt in range(1, self.max_retries + 1):
                profile = self.profile_repo.get_by_id(user_id)
                if profile is None:
                    raise NotFoundError(f"Profile not found: {user_id}")

                new_balance = profile.coins + delta
                if new_balance < 0:
                    raise InsufficientBalanceError(
                        details={"balance": profile.coins, "requested": -delta}
                    )
                new_total_earned = profile.total_earned + max(delta, 0)

                swapped = self.profile_repo.compare_and_swap_balance(
                    user_id,
                    expected_version=profile.balance_version,
                    coins=new_balance,
                    total_earned=new_total_earned,
                )
                if not swapped:
                    logger.warning(
                        f"Balance version conflict for user {user_id} "
                        f"(attempt {attempt}/{self.max_retries})"
                    )
                    self.db.rollback()
                    continue

                transaction = self.ledger_repo.add_transaction(
                    user_id=user_id,
                    amount=delta,
                    transaction_type=transaction_type.value,
                    description=description,
                    related_ad_id=related_ad_id,
                    balance_after=new_balance,
                )
                if commit:
                    self.db.commit()

                logger.info(
                    f"Applied {delta:+d} coins to user {user_id} "
                    f"({transaction_type.value}), balance={new_balance}"
                )
                return LedgerResult(
                    user_id=user_id,
                    balance=new_balance,
                    total_earned=new_total_earned,
                    balance_version=profile.balance_version + 1,
                    transaction=transaction,
                )
        except BaseAPIException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update balance for user {user_id}: {str(e)}")
            raise UpstreamError(f"Failed to update balance: {str(e)}")

        raise ConflictError(
            "Balance was modified concurrently, please retry",
            details={"user_id": user_id, "attempts": self.max_retries},
        )

    def credit(
        self,
        user_id: str,
        coins: int,
        description: str,
        related_ad_id: Optional[int] = None,
        transaction_type: TransactionType = TransactionType.EARNED,
        commit: bool = True,
    ) -> LedgerResult:
        if coins <= 0:
            raise ValidationError("Credit amount must be positive")
        return self.apply_delta(
            user_id, coins, transaction_type, description, related_ad_id, commit
        )

    def debit(
        self,
        user_id: str,
        coins: int,
        description: str,
        transaction_type: TransactionType = TransactionType.REDEEMED,
        commit: bool = True,
    ) -> LedgerResult:
        if coins <= 0:
            raise ValidationError("Debit amount must be positive")
        return self.apply_delta(
            user_id, -coins, transaction_type, description, commit=commit
        )

    def get_transactions(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> TransactionListResponse:
        limit = min(limit, 100)
        try:
            profile = self.profile_repo.get_by_id(user_id)
            if profile is None:
                raise NotFoundError(f"Profile not found: {user_id}")

            transactions = self.ledger_repo.list_by_user(user_id, limit, offset)
            total = self.ledger_repo.count_by_user(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get transactions for user {user_id}: {str(e)}")
            raise UpstreamError(f"Failed to retrieve transactions: {str(e)}")

        return TransactionListResponse(
            user_id=user_id,
            balance=profile.coins,
            transactions=transactions,
            total_count=total,
            has_next=offset + len(transactions) < total,
        )

    def verify_integrity(self, user_id: str) -> IntegrityCheckResponse:
        """profiles.coins와 원장 합계 비교"""
        try:
            profile = self.profile_repo.get_by_id(user_id)
            if profile is None:
                raise NotFoundError(f"Profile not found: {user_id}")
            calculated = self.ledger_repo.sum_amount_by_user(user_id)
            count = self.ledger_repo.count_by_user(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Integrity check failed for user {user_id}: {str(e)}")
            raise UpstreamError(f"Failed to verify ledger: {str(e)}")

        status = "OK" if calculated == profile.coins else "MISMATCH"
        if status == "MISMATCH":
            logger.warning(
                f"Ledger mismatch for user {user_id}: "
                f"stored={profile.coins}, calculated={calculated}"
            )
        return IntegrityCheckResponse(
            status=status,
            user_id=user_id,
            stored_balance=profile.coins,
            calculated_balance=calculated,
            difference=profile.coins - calculated,
            transaction_count=count,
        )
