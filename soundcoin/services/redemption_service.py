"""
환전 요청 서비스

- 생성: 잔액 확인 → 원장 차감(redeemed) + pending 요청 생성을 한 트랜잭션으로 커밋
- 처리: 관리자만 pending → approved|rejected, approved → completed
- 처리 단계에서는 잔액을 건드리지 않는다 (거절되어도 환불 없음)
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soundcoin.core.exceptions import (
    BaseAPIException,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from soundcoin.core.rewards import RewardTable
from soundcoin.models.ledger import TransactionType
from soundcoin.models.redemption import (
    REDEMPTION_TRANSITIONS,
    RedemptionStatus,
)
from soundcoin.repositories.redemption_repository import RedemptionRepository
from soundcoin.schemas.redemption import (
    Redemption,
    RedemptionCreate,
    RedemptionTierSchema,
    RedemptionTiersResponse,
)
from soundcoin.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def format_usd(amount: Decimal) -> str:
    """센트 단위면 소수 둘째 자리까지, 그보다 작으면 그대로 표시"""
    cents = amount.quantize(Decimal("0.01"))
    if cents == amount:
        return f"{cents:.2f}"
    return f"{amount.normalize():f}"


class RedemptionService:
    def __init__(
        self,
        db: Session,
        ledger_service: Optional[LedgerService] = None,
        reward_table: Optional[RewardTable] = None,
    ):
        self.db = db
        self.redemption_repo = RedemptionRepository(db)
        self.ledger_service = ledger_service or LedgerService(db)
        self.reward_table = reward_table or RewardTable()

    def create_redemption(self, request: RedemptionCreate) -> Redemption:
        amount = self.reward_table.coins_to_usd(request.coins_used)
        if request.amount is not None and Decimal(request.amount) != amount:
            raise ValidationError(
                "Amount does not match coins_used",
                details={
                    "expected_amount": str(amount),
                    "amount": str(request.amount),
                },
            )

        try:
            self.ledger_service.debit(
                request.user_id,
                request.coins_used,
                description=f"Redemption: ${format_usd(amount)}",
                transaction_type=TransactionType.REDEEMED,
                commit=False,
            )
            redemption = self.redemption_repo.create(
                commit=False,
                user_id=request.user_id,
                amount=amount,
                coins_used=request.coins_used,
                method=request.method.value,
                paypal_email=request.paypal_email,
                status=RedemptionStatus.PENDING.value,
            )
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Failed to create redemption for user {request.user_id}: {str(e)}"
            )
            raise UpstreamError(f"Failed to create redemption: {str(e)}")

        logger.info(
            f"Redemption {redemption.id} requested by {request.user_id}: "
            f"{request.coins_used} coins -> ${format_usd(amount)}"
        )
        return redemption

    def list_user_redemptions(self, user_id: str) -> List[Redemption]:
        try:
            return self.redemption_repo.list_by_user(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list redemptions for {user_id}: {str(e)}")
            raise UpstreamError(f"Failed to list redemptions: {str(e)}")

    def list_redemptions(
        self, status: Optional[RedemptionStatus] = None
    ) -> List[Redemption]:
        try:
            return self.redemption_repo.list_by_status(
                status.value if status else None
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list redemptions: {str(e)}")
            raise UpstreamError(f"Failed to list redemptions: {str(e)}")

    def approve(
        self, redemption_id: int, admin_id: str, notes: Optional[str] = None
    ) -> Redemption:
        return self._transition(
            redemption_id, RedemptionStatus.APPROVED, admin_id, notes
        )

    def reject(
        self, redemption_id: int, admin_id: str, notes: Optional[str] = None
    ) -> Redemption:
        return self._transition(
            redemption_id, RedemptionStatus.REJECTED, admin_id, notes
        )

    def complete(
        self, redemption_id: int, admin_id: str, notes: Optional[str] = None
    ) -> Redemption:
        return self._transition(
            redemption_id, RedemptionStatus.COMPLETED, admin_id, notes
        )

    def redemption_tiers(self) -> RedemptionTiersResponse:
        return RedemptionTiersResponse(
            coin_value_usd=self.reward_table.coin_value_usd,
            tiers=[
                RedemptionTierSchema(coins=tier.coins, usd=tier.usd, label=tier.label)
                for tier in self.reward_table.redemption_tiers()
            ],
        )

    def _transition(
        self,
        redemption_id: int,
        target: RedemptionStatus,
        admin_id: str,
        notes: Optional[str],
    ) -> Redemption:
        try:
            current = self.redemption_repo.get_by_id(redemption_id)
            if current is None:
                raise NotFoundError(f"Redemption not found: {redemption_id}")

            if target not in REDEMPTION_TRANSITIONS[current.status]:
                raise ConflictError(
                    f"Cannot change redemption from {current.status.value} to {target.value}",
                    details={"status": current.status.value},
                )

            changed = self.redemption_repo.transition_status(
                redemption_id,
                from_status=current.status.value,
                to_status=target.value,
                processed_by=admin_id,
                notes=notes,
            )
            if not changed:
                raise ConflictError(
                    "Redemption was processed concurrently",
                    details={"redemption_id": redemption_id},
                )
            updated = self.redemption_repo.get_by_id(redemption_id)
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update redemption {redemption_id}: {str(e)}")
            raise UpstreamError(f"Failed to update redemption: {str(e)}")

        logger.info(
            f"Redemption {redemption_id} {current.status.value} -> {target.value} by {admin_id}"
        )
        return updated
