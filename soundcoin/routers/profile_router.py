from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response

from soundcoin.core.auth import verify_bearer_token
from soundcoin.deps import get_ledger_service, get_profile_service
from soundcoin.schemas.ledger import TransactionListResponse
from soundcoin.schemas.profile import BalanceResponse
from soundcoin.services.ledger_service import LedgerService
from soundcoin.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _etag_matches(if_none_match: Optional[str], etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = [value.strip() for value in if_none_match.split(",")]
    return "*" in candidates or any(
        candidate.removeprefix("W/") == etag for candidate in candidates
    )


@router.get("/{user_id}/balance", response_model=BalanceResponse)
def get_balance(
    user_id: str,
    response: Response,
    if_none_match: Optional[str] = Header(None, alias="If-None-Match"),
    _token: str = Depends(verify_bearer_token),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """
    잔액 조회 (폴링용)

    ETag는 balance_version이며, If-None-Match가 일치하면 본문 없이 304를 반환한다.
    """
    balance = profile_service.get_balance(user_id)
    etag = f'"{balance.balance_version}"'
    if _etag_matches(if_none_match, etag):
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "no-cache"
    return balance


@router.get("/{user_id}/transactions", response_model=TransactionListResponse)
def get_transactions(
    user_id: str,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _token: str = Depends(verify_bearer_token),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    return ledger_service.get_transactions(user_id, limit=limit, offset=offset)
