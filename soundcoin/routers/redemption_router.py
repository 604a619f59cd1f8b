from fastapi import APIRouter, Depends, Query

from soundcoin.core.auth import verify_bearer_token
from soundcoin.deps import get_redemption_service
from soundcoin.schemas.redemption import (
    RedemptionCreate,
    RedemptionListResponse,
    RedemptionResponse,
    RedemptionTiersResponse,
)
from soundcoin.services.redemption_service import RedemptionService

router = APIRouter(prefix="/redemptions", tags=["redemptions"])


@router.post("", response_model=RedemptionResponse)
def create_redemption(
    request: RedemptionCreate,
    _token: str = Depends(verify_bearer_token),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedemptionResponse:
    """
    환전 요청 생성

    잔액이 부족하면 400 {"error": "Insufficient coins"} 이며 아무것도 변경되지 않는다.
    """
    redemption = redemption_service.create_redemption(request)
    return RedemptionResponse(success=True, redemption=redemption)


@router.get("", response_model=RedemptionListResponse)
def list_my_redemptions(
    user_id: str = Query(..., min_length=1),
    _token: str = Depends(verify_bearer_token),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedemptionListResponse:
    return RedemptionListResponse(
        redemptions=redemption_service.list_user_redemptions(user_id)
    )


@router.get("/tiers", response_model=RedemptionTiersResponse)
def get_redemption_tiers(
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedemptionTiersResponse:
    return redemption_service.redemption_tiers()
