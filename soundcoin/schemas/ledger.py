from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from soundcoin.models.ledger import TransactionType


class CoinTransaction(BaseModel):
    """코인 원장 항목"""

    id: int = Field(..., description="원장 항목 ID")
    user_id: str = Field(..., description="사용자 ID")
    amount: int = Field(..., description="코인 변화량")
    type: TransactionType = Field(..., description="트랜잭션 타입")
    description: str = Field("", description="트랜잭션 사유")
    related_ad_id: Optional[int] = Field(None, description="관련 광고 ID")
    balance_after: int = Field(..., description="트랜잭션 후 잔액")
    created_at: Optional[datetime] = Field(None, description="생성 시간")

    class Config:
        from_attributes = True


class LedgerResult(BaseModel):
    """잔액 변경 결과"""

    user_id: str
    balance: int
    total_earned: int
    balance_version: int
    transaction: CoinTransaction


class TransactionListResponse(BaseModel):
    user_id: str
    balance: int
    transactions: List[CoinTransaction]
    total_count: int
    has_next: bool


class IntegrityCheckResponse(BaseModel):
    """원장 정합성 검증 응답"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    user_id: str
    stored_balance: int = Field(..., description="profiles.coins")
    calculated_balance: int = Field(..., description="원장 합계")
    difference: int
    transaction_count: int
