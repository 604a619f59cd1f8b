"""
회원가입/로그인 프록시

외부 인증 제공자의 응답 본문과 상태 코드를 그대로 전달한다.
회원가입이 성공하면 로컬 프로필(0 코인)을 함께 만든다.
"""

import logging

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from soundcoin.containers import Container
from soundcoin.core.exceptions import UpstreamError
from soundcoin.deps import get_profile_service
from soundcoin.schemas.auth import LoginRequest, RegisterRequest
from soundcoin.services.auth_service import AuthProviderClient, extract_user_id
from soundcoin.services.profile_service import ProfileService

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/register")
@inject
async def register(
    request: RegisterRequest,
    auth_provider: AuthProviderClient = Depends(
        Provide[Container.services.auth_provider]
    ),
    profile_service: ProfileService = Depends(get_profile_service),
):
    status_code, body = await auth_provider.signup(
        request.email, request.password, request.full_name
    )

    if status_code < 400:
        user_id = extract_user_id(body)
        if user_id:
            try:
                await run_in_threadpool(
                    profile_service.ensure_profile,
                    user_id,
                    request.email,
                    username=request.full_name,
                )
            except UpstreamError as e:
                # 가입은 이미 끝났으므로 제공자 응답은 그대로 전달
                logger.error(f"Profile creation failed for {user_id}: {e.detail}")
        else:
            logger.warning(f"Signup for {request.email} returned no user id")

    return JSONResponse(status_code=status_code, content=body)


@router.post("/login")
@inject
async def login(
    request: LoginRequest,
    auth_provider: AuthProviderClient = Depends(
        Provide[Container.services.auth_provider]
    ),
):
    status_code, body = await auth_provider.login(request.email, request.password)
    return JSONResponse(status_code=status_code, content=body)
