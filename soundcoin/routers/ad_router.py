from fastapi import APIRouter, Depends, Query

from soundcoin.core.auth import verify_bearer_token
from soundcoin.core.rewards import AdKind
from soundcoin.deps import get_ad_service
from soundcoin.schemas.ad import AdViewRequest, AdViewResponse, NextAdResponse
from soundcoin.services.ad_service import AdService

router = APIRouter(prefix="/ads", tags=["ads"])


@router.post("/view", response_model=AdViewResponse)
def record_ad_view(
    request: AdViewRequest,
    _token: str = Depends(verify_bearer_token),
    ad_service: AdService = Depends(get_ad_service),
) -> AdViewResponse:
    """
    광고 시청 기록

    completed=true면 광고에 설정된 보상(미설정 시 5 코인)을 지급한다.
    """
    return ad_service.record_view(request)


@router.get("/next", response_model=NextAdResponse)
def get_next_ad(
    kind: AdKind = Query(AdKind.AUDIO),
    ad_service: AdService = Depends(get_ad_service),
) -> NextAdResponse:
    return NextAdResponse(ad=ad_service.next_ad(kind))
