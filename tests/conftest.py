import os
import sys
from pathlib import Path

# 앱 import 전에 테스트용 인메모리 DB로 고정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["AUTH_PROVIDER_URL"] = "https://auth.example.test"

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient

from soundcoin.database.connection import SessionLocal, engine
from soundcoin.main import app
from soundcoin.models import Base
from soundcoin.models.ledger import TransactionType
from soundcoin.repositories.ad_repository import AdRepository
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.repositories.track_repository import TrackRepository
from soundcoin.services.ledger_service import LedgerService


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-token"}


@pytest.fixture
def user_profile(db_session):
    return ProfileRepository(db_session).create_profile(
        "user-1", "listener@example.com", username="listener"
    )


@pytest.fixture
def admin_profile(db_session):
    return ProfileRepository(db_session).create_profile(
        "admin-1", "admin@example.com", username="admin", role="admin"
    )


@pytest.fixture
def admin_headers(auth_headers, admin_profile):
    return {**auth_headers, "X-Admin-Id": admin_profile.id}


@pytest.fixture
def fund(db_session):
    """사용자에게 보너스 코인을 지급하는 헬퍼"""

    def _fund(user_id: str, coins: int):
        return LedgerService(db_session).credit(
            user_id,
            coins,
            description="Test bonus",
            transaction_type=TransactionType.BONUS,
        )

    return _fund


@pytest.fixture
def make_track(db_session):
    def _make_track(title: str = "Night Drive", **overrides):
        data = {
            "title": title,
            "artist": "Lo-Fi Unit",
            "duration": 180,
            "audio_url": f"https://cdn.example.test/{title}.mp3",
            "genre": "lofi",
            "mood": "chill",
            "bpm": 90,
            "plays": 0,
            "likes": 0,
            "active": True,
        }
        data.update(overrides)
        return TrackRepository(db_session).create(**data)

    return _make_track


@pytest.fixture
def make_ad(db_session):
    def _make_ad(ad_type: str = "audio", **overrides):
        data = {
            "ad_type": ad_type,
            "title": f"{ad_type} spot",
            "content_url": f"https://cdn.example.test/{ad_type}-ad",
            "duration": 30,
            "impressions": 0,
            "active": True,
        }
        data.update(overrides)
        return AdRepository(db_session).create(**data)

    return _make_ad
