from typing import Optional

from fastapi import APIRouter, Depends, Query

from soundcoin.deps import get_track_service
from soundcoin.schemas.track import (
    TrackDetailResponse,
    TrackFiltersResponse,
    TrackListResponse,
    TrackQuery,
    TrackSort,
)
from soundcoin.services.track_service import TrackService

router = APIRouter(prefix="/tracks", tags=["tracks"])


@router.get("", response_model=TrackListResponse)
def list_tracks(
    genre: Optional[str] = Query(None),
    mood: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    bpm_min: Optional[int] = Query(None, ge=0),
    bpm_max: Optional[int] = Query(None, ge=0),
    sort_by: TrackSort = Query(TrackSort.NEWEST),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    track_service: TrackService = Depends(get_track_service),
) -> TrackListResponse:
    """활성 트랙 목록 (장르/무드/검색어/BPM 필터)"""
    params = TrackQuery(
        genre=genre,
        mood=mood,
        search=search,
        bpm_min=bpm_min,
        bpm_max=bpm_max,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    return TrackListResponse(tracks=track_service.search_tracks(params))


@router.get("/filters", response_model=TrackFiltersResponse)
def get_track_filters(
    track_service: TrackService = Depends(get_track_service),
) -> TrackFiltersResponse:
    return track_service.get_filters()


@router.get("/{track_id}", response_model=TrackDetailResponse)
def get_track(
    track_id: int, track_service: TrackService = Depends(get_track_service)
) -> TrackDetailResponse:
    """없는 트랙이면 404 대신 {"track": null}"""
    return TrackDetailResponse(track=track_service.get_track(track_id))


@router.post("/{track_id}/play", response_model=TrackDetailResponse)
def record_play(
    track_id: int, track_service: TrackService = Depends(get_track_service)
) -> TrackDetailResponse:
    return TrackDetailResponse(track=track_service.record_play(track_id))
