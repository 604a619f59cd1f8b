from fastapi import APIRouter, Depends

from soundcoin.core.auth import verify_bearer_token
from soundcoin.deps import get_player_service
from soundcoin.schemas.player import (
    PlayerSessionCreate,
    PlayerSettingsUpdate,
    PlayerStateResponse,
)
from soundcoin.services.player_service import PlayerService

router = APIRouter(
    prefix="/player/sessions",
    tags=["player"],
    dependencies=[Depends(verify_bearer_token)],
)


@router.post("", response_model=PlayerStateResponse, status_code=201)
def create_session(
    request: PlayerSessionCreate,
    player_service: PlayerService = Depends(get_player_service),
) -> PlayerStateResponse:
    """재생 세션을 만들고 start_index 트랙(또는 광고) 재생을 시작"""
    return player_service.create_session(request)


@router.get("/{session_id}", response_model=PlayerStateResponse)
def get_session(
    session_id: str, player_service: PlayerService = Depends(get_player_service)
) -> PlayerStateResponse:
    return player_service.get_state(session_id)


@router.post("/{session_id}/ended", response_model=PlayerStateResponse)
def report_media_ended(
    session_id: str, player_service: PlayerService = Depends(get_player_service)
) -> PlayerStateResponse:
    """현재 트랙/광고가 끝까지 재생됨. 광고였다면 코인이 지급된다."""
    return player_service.media_ended(session_id)


@router.post("/{session_id}/next", response_model=PlayerStateResponse)
def skip_next(
    session_id: str, player_service: PlayerService = Depends(get_player_service)
) -> PlayerStateResponse:
    return player_service.skip_next(session_id)


@router.post("/{session_id}/previous", response_model=PlayerStateResponse)
def skip_previous(
    session_id: str, player_service: PlayerService = Depends(get_player_service)
) -> PlayerStateResponse:
    return player_service.skip_previous(session_id)


@router.post("/{session_id}/play/{index}", response_model=PlayerStateResponse)
def play_index(
    session_id: str,
    index: int,
    player_service: PlayerService = Depends(get_player_service),
) -> PlayerStateResponse:
    return player_service.play_index(session_id, index)


@router.patch("/{session_id}/settings", response_model=PlayerStateResponse)
def update_settings(
    session_id: str,
    request: PlayerSettingsUpdate,
    player_service: PlayerService = Depends(get_player_service),
) -> PlayerStateResponse:
    return player_service.update_settings(session_id, request)


@router.delete("/{session_id}", status_code=204)
def close_session(
    session_id: str, player_service: PlayerService = Depends(get_player_service)
) -> None:
    player_service.close_session(session_id)
