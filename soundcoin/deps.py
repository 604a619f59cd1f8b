from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.orm import Session

from soundcoin.config import settings
from soundcoin.containers import Container
from soundcoin.core.rewards import RewardTable
from soundcoin.database.session import get_db

# Services
from soundcoin.services.ad_service import AdService
from soundcoin.services.admin_service import AdminService
from soundcoin.services.ledger_service import LedgerService
from soundcoin.services.player_service import PlayerService, PlayerSessionRegistry
from soundcoin.services.profile_service import ProfileService
from soundcoin.services.redemption_service import RedemptionService
from soundcoin.services.track_service import TrackService


def get_reward_table() -> RewardTable:
    return RewardTable.from_settings(settings)


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    return LedgerService(db=db)


def get_redemption_service(db: Session = Depends(get_db)) -> RedemptionService:
    return RedemptionService(
        db=db, ledger_service=LedgerService(db=db), reward_table=get_reward_table()
    )


def get_ad_service(db: Session = Depends(get_db)) -> AdService:
    return AdService(
        db=db, ledger_service=LedgerService(db=db), reward_table=get_reward_table()
    )


def get_track_service(db: Session = Depends(get_db)) -> TrackService:
    return TrackService(db=db)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db=db)


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    return AdminService(db=db)


@inject
def get_player_service(
    db: Session = Depends(get_db),
    registry: PlayerSessionRegistry = Depends(
        Provide[Container.services.player_sessions]
    ),
) -> PlayerService:
    return PlayerService(
        db=db,
        registry=registry,
        ledger_service=LedgerService(db=db),
        reward_table=get_reward_table(),
        ad_interval=settings.AD_INTERVAL_TRACKS,
    )
