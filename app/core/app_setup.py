from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import HTTP_TIMEOUT
from app.core.middleware import TraceIDMiddleware, PreflightMiddleware, CacheControlMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 외부 사이트 호출용 AsyncClient는 앱 수명 동안 하나만 사용
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, follow_redirects=True) as client:
        app.state.http = client
        yield


def add_common_middlewares(app: FastAPI) -> None:
    """두 앱(집계/위임) 공통 미들웨어. 마지막에 추가한 것이 가장 바깥에서 실행됩니다."""
    app.add_middleware(CacheControlMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Trace-ID"],
        expose_headers=["X-Trace-ID"],
    )
    app.add_middleware(PreflightMiddleware)
    app.add_middleware(TraceIDMiddleware)
