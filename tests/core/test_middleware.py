"""
미들웨어 통합 테스트 모듈

Rationale:
    httpx.AsyncClient + ASGITransport로 실제 FastAPI 앱에 요청을 보내
    Trace ID / Preflight / Cache-Control 미들웨어 체인을 E2E로 검증합니다.
"""

import uuid
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from app.main import app
from app.delegate_main import app as delegate_app


# =============================================================================
# Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client():
    """미들웨어 통합 테스트용 AsyncClient Fixture"""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


# =============================================================================
# TraceIDMiddleware 테스트
# =============================================================================

class TestTraceIDMiddleware:
    """
    TraceIDMiddleware 통합 테스트

    Rationale:
        집계 서버 -> 위임 서버 호출 시 같은 Trace ID가 이어져야 하므로
        생성/전파/거부 세 경우를 모두 확인합니다.
    """

    @pytest.mark.asyncio
    async def test_trace_id_auto_generated(self, client):
        """Trace ID 미전송 시 UUIDv4가 자동 생성되어 응답 헤더에 포함되는지 검증"""
        response = await client.get("/ping")

        trace_id = response.headers.get("X-Trace-ID")
        assert trace_id is not None
        assert str(uuid.UUID(trace_id, version=4)) == trace_id

    @pytest.mark.asyncio
    async def test_trace_id_passthrough(self, client):
        """클라이언트가 보낸 X-Trace-ID가 그대로 응답에 반환되는지 검증"""
        sent = str(uuid.uuid4())
        response = await client.get("/ping", headers={"X-Trace-ID": sent})
        assert response.headers["X-Trace-ID"] == sent

    @pytest.mark.asyncio
    async def test_invalid_trace_id_replaced(self, client):
        """UUID 형식이 아니면 새 ID로 교체되는지 검증"""
        response = await client.get("/ping", headers={"X-Trace-ID": "not-a-uuid"})

        trace_id = response.headers["X-Trace-ID"]
        assert trace_id != "not-a-uuid"
        uuid.UUID(trace_id)


# =============================================================================
# Preflight / Cache-Control
# =============================================================================

class TestPreflightAndCache:

    @pytest.mark.asyncio
    async def test_options_any_path_is_204(self, client):
        """라우트가 없는 경로라도 OPTIONS는 본문 없는 204"""
        response = await client.options("/no-such-path")

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"

    @pytest.mark.asyncio
    async def test_no_store_header(self, client):
        response = await client.get("/ping")
        assert "no-store" in response.headers["Cache-Control"]
        assert response.headers["Pragma"] == "no-cache"

    @pytest.mark.asyncio
    async def test_delegate_app_shares_middlewares(self):
        """위임 서버에도 같은 미들웨어 체인이 적용되는지 검증"""
        async with AsyncClient(transport=ASGITransport(app=delegate_app), base_url="http://test") as ac:
            preflight = await ac.options("/scrape/crea")
            health = await ac.get("/health")

        assert preflight.status_code == 204
        assert "X-Trace-ID" in health.headers
        assert "no-store" in health.headers["Cache-Control"]
