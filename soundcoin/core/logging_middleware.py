import logging
import re
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from soundcoin.core.exception_handlers import request_context

logger = logging.getLogger("soundcoin")

PLAYER_SESSION_PATH = re.compile(r"/player/sessions/(?P<session_id>[^/]+)")
PROFILE_PATH = re.compile(r"/profiles/(?P<user_id>[^/]+)")


def actor_context(request: Request) -> str:
    """요청 경로/헤더에서 재생 세션, 사용자, 관리자 식별자를 뽑아 로그 태그로 만든다"""
    tags = []

    session = PLAYER_SESSION_PATH.search(request.url.path)
    if session:
        tags.append(f"session={session.group('session_id')}")

    profile = PROFILE_PATH.search(request.url.path)
    user_id = profile.group("user_id") if profile else request.query_params.get("user_id")
    if user_id:
        tags.append(f"user={user_id}")

    admin_id = request.headers.get("X-Admin-Id")
    if admin_id:
        tags.append(f"admin={admin_id}")

    if "authorization" not in request.headers:
        tags.append("anonymous")
    return " ".join(tags)


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        ctx = request_context(request)
        line = f"{ctx['method']} {ctx['url']} from {ctx['client']}"
        tags = actor_context(request)
        if tags:
            line = f"{line} [{tags}]"

        logger.info(f"[Request] {line}")
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[Unhandled Error] {line}")
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level, f"[Response] {line} -> {response.status_code} in {duration_ms:.1f}ms"
        )
        response.headers["X-Process-Time-Ms"] = f"{duration_ms:.1f}"
        return response
