from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from soundcoin.config import settings


def _build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        # 인메모리 SQLite는 커넥션마다 별도 DB가 생기므로 단일 커넥션을 공유
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # 연결 유효성 검사
        pool_recycle=3600,  # 1시간마다 연결 재생성
        echo=settings.DEBUG,
    )


engine = _build_engine(settings.DATABASE_URL)

# expire_on_commit=False: 커밋 후에도 같은 요청 안에서 속성 접근 가능
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
