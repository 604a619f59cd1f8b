from typing import List, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from soundcoin.models.ledger import CoinTransaction as CoinTransactionModel
from soundcoin.repositories.base import BaseRepository
from soundcoin.schemas.ledger import CoinTransaction


class LedgerRepository(BaseRepository[CoinTransactionModel, CoinTransaction]):
    """coin_transactions 접근 (append-only)"""

    def __init__(self, db: Session):
        super().__init__(CoinTransactionModel, CoinTransaction, db)

    def add_transaction(
        self,
        user_id: str,
        amount: int,
        transaction_type: str,
        description: str,
        balance_after: int,
        related_ad_id: Optional[int] = None,
        commit: bool = False,
    ) -> CoinTransaction:
        return self.create(
            commit=commit,
            user_id=user_id,
            amount=amount,
            type=transaction_type,
            description=description,
            related_ad_id=related_ad_id,
            balance_after=balance_after,
        )

    def list_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[CoinTransaction]:
        """최신 거래부터 조회"""
        self._ensure_clean_session()
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows)

    def count_by_user(self, user_id: str) -> int:
        return self.count({"user_id": user_id})

    def sum_amount_by_user(self, user_id: str) -> int:
        self._ensure_clean_session()
        total = (
            self.db.query(func.coalesce(func.sum(self.model_class.amount), 0))
            .filter(self.model_class.user_id == user_id)
            .scalar()
        )
        return int(total or 0)
