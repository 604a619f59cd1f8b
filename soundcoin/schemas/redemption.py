from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from soundcoin.models.redemption import PayoutMethod, RedemptionStatus


class Redemption(BaseModel):
    id: int
    user_id: str
    amount: Decimal
    coins_used: int
    method: PayoutMethod
    paypal_email: Optional[str] = None
    status: RedemptionStatus
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class RedemptionCreate(BaseModel):
    """환전 요청 (amount는 클라이언트 계산값, 서버에서 재계산 후 대조)"""

    user_id: str = Field(..., min_length=1)
    coins_used: int = Field(..., gt=0)
    method: PayoutMethod
    paypal_email: Optional[EmailStr] = None
    amount: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def paypal_requires_email(self):
        if self.method == PayoutMethod.PAYPAL and not self.paypal_email:
            raise ValueError("paypal_email is required for paypal payouts")
        return self


class RedemptionResponse(BaseModel):
    success: bool
    redemption: Redemption


class RedemptionListResponse(BaseModel):
    redemptions: List[Redemption]


class RedemptionResolveRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class RedemptionTierSchema(BaseModel):
    coins: int
    usd: Decimal
    label: str


class RedemptionTiersResponse(BaseModel):
    coin_value_usd: Decimal
    tiers: List[RedemptionTierSchema]
