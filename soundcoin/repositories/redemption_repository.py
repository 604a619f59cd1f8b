from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from soundcoin.models.redemption import Redemption as RedemptionModel
from soundcoin.repositories.base import BaseRepository
from soundcoin.schemas.redemption import Redemption


class RedemptionRepository(BaseRepository[RedemptionModel, Redemption]):
    def __init__(self, db: Session):
        super().__init__(RedemptionModel, Redemption, db)

    def list_by_user(self, user_id: str) -> List[Redemption]:
        return self.find_all(
            filters={"user_id": user_id}, order_by="id", descending=True
        )

    def list_by_status(self, status: Optional[str] = None) -> List[Redemption]:
        filters = {"status": status} if status else None
        return self.find_all(filters=filters, order_by="id", descending=True)

    def transition_status(
        self,
        redemption_id: int,
        from_status: str,
        to_status: str,
        processed_by: str,
        notes: Optional[str] = None,
    ) -> bool:
        """현재 상태가 from_status일 때만 전이 (동시 처리 시 한쪽만 성공)"""
        self._ensure_clean_session()
        values = {
            "status": to_status,
            "processed_by": processed_by,
            "processed_at": datetime.now(timezone.utc),
        }
        if notes is not None:
            values["notes"] = notes

        result = self.db.execute(
            update(RedemptionModel)
            .where(
                RedemptionModel.id == redemption_id,
                RedemptionModel.status == from_status,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def sum_amount_by_status(self, statuses: Iterable[str]) -> Decimal:
        self._ensure_clean_session()
        total = (
            self.db.query(func.coalesce(func.sum(RedemptionModel.amount), 0))
            .filter(RedemptionModel.status.in_(list(statuses)))
            .scalar()
        )
        return Decimal(str(total or 0))
