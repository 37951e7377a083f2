# =============================================================================
# 공통 미들웨어 (집계 서버 / 위임 서버 공용)
# =============================================================================
# - Trace ID: 요청 추적 ID 발급 및 전파
# - Preflight: 모든 OPTIONS 요청을 204로 즉시 종료
# - Cache-Control: 실시간 공실 응답 캐시 방지
# =============================================================================

import logging
import re
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from app.core.context import set_trace_id, reset_trace_id, new_trace_id

logger = logging.getLogger(__name__)

# UUID 형식 검증 정규식 (8-4-4-4-12)
UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

TRACE_ID_HEADER = "X-Trace-ID"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Trace-ID",
}


class TraceIDMiddleware(BaseHTTPMiddleware):
    """
    HTTP 요청 추적을 위한 Trace ID 관리 미들웨어

    - 요청 헤더(X-Trace-ID)가 UUID 형식이면 그대로 사용 (위임 서버 호출 시 전파됨)
    - 없거나 형식이 잘못되었으면 새 UUIDv4 발급
    - 응답 헤더에 같은 값을 실어 반환하고, 처리 시간을 로그로 남김
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        trace_id = request.headers.get(TRACE_ID_HEADER)

        if trace_id and not UUID_PATTERN.match(trace_id):
            logger.warning(f"Invalid Trace ID received: {trace_id}")
            trace_id = None

        if not trace_id:
            trace_id = new_trace_id()

        token = set_trace_id(trace_id)
        request.state.trace_id = trace_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            reset_trace_id(token)

        response.headers[TRACE_ID_HEADER] = trace_id
        if request.url.path not in ("/ping", "/health"):
            logger.info({
                "message": f"{request.method} {request.url.path}",
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000),
                "trace_id": trace_id,
            })
        return response


class PreflightMiddleware(BaseHTTPMiddleware):
    """CORS preflight(OPTIONS)는 라우팅 전에 본문 없는 204로 응답합니다."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"})
        return await call_next(request)


class CacheControlMiddleware(BaseHTTPMiddleware):
    """
    공실 조회 결과는 실시간 데이터이므로 중간 캐시에 저장되지 않도록 합니다.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"
        return response
