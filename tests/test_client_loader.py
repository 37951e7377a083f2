import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch
from app.utils.client_loader import load_client
from app.exception.api.client_loader_exception import FetchError


def _response(status: int) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"{status}", request=None, response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.mark.asyncio
async def test_retry_success_after_failure():
    """retries=1 이면 503 후 재시도해서 성공하는지 테스트"""
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request.side_effect = [_response(503), _response(200)]

    with patch("app.utils.client_loader.asyncio.sleep", new=AsyncMock()):
        response = await load_client(client, "get", "https://example.com/api", retries=1)

    assert response.status_code == 200
    assert client.request.call_count == 2
    assert client.request.call_args.args == ("GET", "https://example.com/api")


@pytest.mark.asyncio
async def test_no_retry_by_default():
    """기본값은 재시도 없음: 503 한 번으로 FetchError"""
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request.return_value = _response(503)

    with pytest.raises(FetchError) as exc_info:
        await load_client(client, "GET", "https://example.com/api")

    assert client.request.call_count == 1
    assert exc_info.value.upstream_status == 503


@pytest.mark.asyncio
async def test_no_retry_on_404():
    """404는 재시도 대상이 아니므로 즉시 실패"""
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request.return_value = _response(404)

    with pytest.raises(FetchError):
        await load_client(client, "GET", "https://example.com/api", retries=3)

    assert client.request.call_count == 1


@pytest.mark.asyncio
async def test_timeout_becomes_fetch_error():
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request.side_effect = httpx.ReadTimeout("timed out")

    with pytest.raises(FetchError) as exc_info:
        await load_client(client, "POST", "https://example.com/api", data={"a": "1"})

    assert "タイムアウト" in exc_info.value.message
    assert client.request.call_args.kwargs == {"data": {"a": "1"}}


@pytest.mark.asyncio
async def test_transport_error_retried_then_fails():
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request.side_effect = httpx.ConnectError("refused")

    with patch("app.utils.client_loader.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        with pytest.raises(FetchError):
            await load_client(client, "GET", "https://example.com/api", retries=2, backoff=0.1)

    assert client.request.call_count == 3
    assert mock_sleep.await_count == 2
