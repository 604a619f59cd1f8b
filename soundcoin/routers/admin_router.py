"""
관리자 API

- GET /admin/stats: Bearer 토큰만 필요
- 나머지 엔드포인트: Bearer 토큰 + X-Admin-Id 헤더의 프로필이 admin 역할이어야 함
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from soundcoin.core.auth import require_admin, verify_bearer_token
from soundcoin.deps import (
    get_ad_service,
    get_admin_service,
    get_ledger_service,
    get_redemption_service,
    get_track_service,
)
from soundcoin.models.redemption import RedemptionStatus
from soundcoin.schemas.ad import Ad, AdCreate, AdListResponse
from soundcoin.schemas.admin import AdminStats
from soundcoin.schemas.ledger import IntegrityCheckResponse
from soundcoin.schemas.profile import Profile
from soundcoin.schemas.redemption import (
    Redemption,
    RedemptionListResponse,
    RedemptionResolveRequest,
)
from soundcoin.schemas.track import Track, TrackCreate, TrackListResponse
from soundcoin.services.ad_service import AdService
from soundcoin.services.admin_service import AdminService
from soundcoin.services.ledger_service import LedgerService
from soundcoin.services.redemption_service import RedemptionService
from soundcoin.services.track_service import TrackService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _notes(request: Optional[RedemptionResolveRequest]) -> Optional[str]:
    return request.notes if request else None


@router.get("/stats", response_model=AdminStats)
def get_stats(
    _token: str = Depends(verify_bearer_token),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminStats:
    return admin_service.get_stats()


# ---------------------------------------------------------------------------
# Redemptions
# ---------------------------------------------------------------------------


@router.get("/redemptions", response_model=RedemptionListResponse)
def list_redemptions(
    status: Optional[RedemptionStatus] = Query(None),
    _admin: Profile = Depends(require_admin),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedemptionListResponse:
    return RedemptionListResponse(
        redemptions=redemption_service.list_redemptions(status)
    )


@router.post("/redemptions/{redemption_id}/approve", response_model=Redemption)
def approve_redemption(
    redemption_id: int,
    request: Optional[RedemptionResolveRequest] = None,
    admin: Profile = Depends(require_admin),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> Redemption:
    return redemption_service.approve(redemption_id, admin.id, _notes(request))


@router.post("/redemptions/{redemption_id}/reject", response_model=Redemption)
def reject_redemption(
    redemption_id: int,
    request: Optional[RedemptionResolveRequest] = None,
    admin: Profile = Depends(require_admin),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> Redemption:
    return redemption_service.reject(redemption_id, admin.id, _notes(request))


@router.post("/redemptions/{redemption_id}/complete", response_model=Redemption)
def complete_redemption(
    redemption_id: int,
    request: Optional[RedemptionResolveRequest] = None,
    admin: Profile = Depends(require_admin),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> Redemption:
    return redemption_service.complete(redemption_id, admin.id, _notes(request))


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


@router.get("/tracks", response_model=TrackListResponse)
def list_tracks(
    _admin: Profile = Depends(require_admin),
    track_service: TrackService = Depends(get_track_service),
) -> TrackListResponse:
    return TrackListResponse(tracks=track_service.list_tracks())


@router.post("/tracks", response_model=Track, status_code=201)
def create_track(
    request: TrackCreate,
    admin: Profile = Depends(require_admin),
    track_service: TrackService = Depends(get_track_service),
) -> Track:
    track = track_service.create_track(request)
    logger.info(f"Admin {admin.id} created track {track.id}")
    return track


@router.post("/tracks/{track_id}/deactivate", response_model=Track)
def deactivate_track(
    track_id: int,
    _admin: Profile = Depends(require_admin),
    track_service: TrackService = Depends(get_track_service),
) -> Track:
    return track_service.deactivate_track(track_id)


# ---------------------------------------------------------------------------
# Ads
# ---------------------------------------------------------------------------


@router.get("/ads", response_model=AdListResponse)
def list_ads(
    _admin: Profile = Depends(require_admin),
    ad_service: AdService = Depends(get_ad_service),
) -> AdListResponse:
    return AdListResponse(ads=ad_service.list_ads())


@router.post("/ads", response_model=Ad, status_code=201)
def create_ad(
    request: AdCreate,
    admin: Profile = Depends(require_admin),
    ad_service: AdService = Depends(get_ad_service),
) -> Ad:
    ad = ad_service.create_ad(request)
    logger.info(f"Admin {admin.id} created ad {ad.id}")
    return ad


@router.post("/ads/{ad_id}/deactivate", response_model=Ad)
def deactivate_ad(
    ad_id: int,
    _admin: Profile = Depends(require_admin),
    ad_service: AdService = Depends(get_ad_service),
) -> Ad:
    return ad_service.deactivate_ad(ad_id)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@router.get("/users/{user_id}/integrity", response_model=IntegrityCheckResponse)
def check_user_integrity(
    user_id: str,
    _admin: Profile = Depends(require_admin),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> IntegrityCheckResponse:
    return ledger_service.verify_integrity(user_id)
