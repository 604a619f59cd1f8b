"""
외부 인증 제공자(GoTrue 호환) 프록시

회원가입/로그인 요청을 그대로 전달하고 응답 본문과 상태 코드를 그대로 돌려준다.
"""

import logging
from typing import Any, Optional, Tuple

import httpx

from soundcoin.config import Settings
from soundcoin.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class AuthProviderClient:
    def __init__(self, settings: Settings):
        self.base_url = settings.AUTH_PROVIDER_URL.rstrip("/")
        self.api_key = settings.AUTH_PROVIDER_KEY
        self.timeout = settings.AUTH_PROVIDER_TIMEOUT_SECONDS

    @property
    def headers(self) -> dict:
        return {"apikey": self.api_key, "Content-Type": "application/json"}

    async def signup(
        self, email: str, password: str, full_name: Optional[str] = None
    ) -> Tuple[int, Any]:
        payload = {
            "email": email,
            "password": password,
            "data": {"full_name": full_name},
        }
        return await self._post("/auth/v1/signup", payload)

    async def login(self, email: str, password: str) -> Tuple[int, Any]:
        payload = {"email": email, "password": password}
        return await self._post("/auth/v1/token?grant_type=password", payload)

    async def _post(self, path: str, payload: dict) -> Tuple[int, Any]:
        if not self.base_url:
            raise UpstreamError("Auth provider is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}{path}", json=payload, headers=self.headers
                )
        except httpx.TimeoutException:
            logger.error(f"Auth provider timeout: {path}")
            raise UpstreamError("Auth provider timeout")
        except httpx.HTTPError as e:
            logger.error(f"Auth provider request failed: {path}: {str(e)}")
            raise UpstreamError(f"Auth provider error: {str(e)}")

        try:
            body = response.json()
        except ValueError:
            body = {"error": response.text}

        if response.status_code >= 400:
            logger.warning(f"Auth provider {path} -> {response.status_code}")
        return response.status_code, body


def extract_user_id(body: Any) -> Optional[str]:
    """signup 응답에서 사용자 ID 추출 (user 객체가 중첩되거나 최상위일 수 있음)"""
    if not isinstance(body, dict):
        return None
    user = body.get("user")
    if isinstance(user, dict) and user.get("id"):
        return str(user["id"])
    if body.get("id"):
        return str(body["id"])
    return None
