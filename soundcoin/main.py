import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from mangum import Mangum

from soundcoin import containers
from soundcoin.config import settings
from soundcoin.core.cors import PermissiveCORSMiddleware
from soundcoin.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from soundcoin.core.exceptions import BaseAPIException
from soundcoin.core.logging_middleware import LoggingMiddleware
from soundcoin.logging_config import setup_logging
from soundcoin.routers import (
    ad_router,
    admin_router,
    auth_router,
    health_router,
    player_router,
    profile_router,
    redemption_router,
    track_router,
)

load_dotenv("soundcoin/.env")
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
app.container = containers.Container()  # type: ignore

# 나중에 추가한 미들웨어가 바깥쪽에서 실행됨 (CORS가 가장 먼저)
app.add_middleware(LoggingMiddleware)
app.add_middleware(PermissiveCORSMiddleware)

app.add_exception_handler(BaseAPIException, handle_base_api_exception)
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(Exception, handle_unexpected_error)

for module in (
    health_router,
    auth_router,
    track_router,
    ad_router,
    redemption_router,
    profile_router,
    admin_router,
    player_router,
):
    app.include_router(module.router, prefix=settings.API_PREFIX)

handler = Mangum(app)
