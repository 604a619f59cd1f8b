"""
요청 인증 의존성

Bearer 토큰은 존재 여부와 접두사만 확인한다 (서명 검증 없음).
관리자 엔드포인트는 추가로 X-Admin-Id 헤더의 프로필 역할을 확인한다.
"""

from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from soundcoin.core.exceptions import AuthenticationError, AuthorizationError
from soundcoin.database.session import get_db
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.schemas.profile import Profile

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def verify_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Authorization: Bearer <token> 헤더가 있으면 토큰 문자열을 반환"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Unauthorized")
    return credentials.credentials


def require_admin(
    token: str = Depends(verify_bearer_token),
    admin_id: Optional[str] = Header(None, alias="X-Admin-Id"),
    db: Session = Depends(get_db),
) -> Profile:
    """관리자 권한이 필요한 엔드포인트용 의존성"""
    if not admin_id:
        raise AuthorizationError("X-Admin-Id header required")

    profile = ProfileRepository(db).get_by_id(admin_id)
    if not profile or not profile.is_admin:
        raise AuthorizationError("Admin access required")
    return profile
