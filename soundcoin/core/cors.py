from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Admin-Id, If-None-Match",
    "Access-Control-Expose-Headers": "ETag, X-Process-Time-Ms",
}


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """모든 응답에 동일한 CORS 헤더를 붙이고 OPTIONS는 빈 본문으로 즉시 응답"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response
