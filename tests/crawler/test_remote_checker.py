import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch

from app.crawler.remote_checker import RemoteCrawler, register_remote_crawlers
from app.crawler.registry import registry
from app.exception.api.client_loader_exception import FetchError
from app.exception.crawler.crawler_exception import DelegateTimeoutError
from app.models.dto import HallAvailability, PricedAvailability
from app.utils.resource_loader import get_resource, get_resources_by_kind


def _client_returning(status: int, body) -> AsyncMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status
    response.json.return_value = body
    client = AsyncMock(spec=httpx.AsyncClient)
    client.get.return_value = response
    return client


HALL_PAYLOAD = {
    "success": True,
    "studioId": "fukuokacivichall",
    "studioName": "福岡市民会館",
    "date": "2026-01-20",
    "dayOfWeek": "火",
    "rooms": [
        {"roomName": "リハーサル室", "slots": [
            {"status": "○", "state": "available", "date": "2026/01/20", "slotId": "0", "timeRange": "9:00-12:30"},
        ]},
        {"roomName": "練習室①", "slots": []},
    ],
}


@pytest.mark.asyncio
async def test_range_payload_split_per_room():
    """묶음 응답을 리소스별 HallAvailability로 나누는지 검증"""
    client = _client_returning(200, HALL_PAYLOAD)
    crawler = RemoteCrawler("range", base_url="https://delegate.example/", timeout=5)
    resources = [get_resource("civichall-practice1"), get_resource("civichall-rehearsal")]

    results = await crawler.check_availability(client, "2026-01-20", resources)

    url = client.get.call_args.args[0]
    assert url == "https://delegate.example/scrape/civic-hall"
    assert client.get.call_args.kwargs["params"] == {"date": "2026-01-20", "ids": "practice1,rehearsal"}
    assert client.get.call_args.kwargs["timeout"] == 5

    assert all(isinstance(r, HallAvailability) for r in results)
    assert [room.roomName for room in results[0].rooms] == ["練習室①"]
    assert results[1].rooms[0].slots[0].status == "○"


@pytest.mark.asyncio
async def test_priced_payload_missing_studio_is_error():
    payload = {
        "success": True, "date": "2026-01-20", "dayOfWeek": "火",
        "studios": [{
            "studioId": "crea-daimyo", "studioName": "CREA大名", "floor": "2F", "size": "77㎡",
            "date": "2026-01-20", "dayOfWeek": "火", "slots": [],
        }],
    }
    client = _client_returning(200, payload)
    crawler = RemoteCrawler("priced", base_url="https://delegate.example")

    results = await crawler.check_availability(
        client, "2026-01-20", [get_resource("crea-daimyo"), get_resource("crea-plus")]
    )

    assert client.get.call_args.kwargs["params"]["ids"] == "crea-daimyo,crea-plus"
    assert isinstance(results[0], PricedAvailability)
    assert results[0].error is None
    assert results[1].studios == []
    assert results[1].error


@pytest.mark.asyncio
async def test_non_2xx_uses_body_error():
    client = _client_returning(500, {"success": False, "error": "ブラウザの起動に失敗しました"})
    crawler = RemoteCrawler("range", base_url="https://delegate.example")

    results = await crawler.check_availability(client, "2026-01-20", get_resources_by_kind("range"))

    assert all(isinstance(r, FetchError) for r in results)
    assert results[0].message == "ブラウザの起動に失敗しました"
    assert results[0].upstream_status == 500


@pytest.mark.asyncio
async def test_success_false_is_fetch_error():
    client = _client_returning(200, {"success": False})
    crawler = RemoteCrawler("priced", base_url="https://delegate.example")

    results = await crawler.check_availability(client, "2026-01-20", [get_resource("crea-plus")])

    assert isinstance(results[0], FetchError)


@pytest.mark.asyncio
async def test_timeout_is_delegate_timeout():
    client = AsyncMock(spec=httpx.AsyncClient)
    client.get.side_effect = httpx.ReadTimeout("timed out")
    crawler = RemoteCrawler("priced", base_url="https://delegate.example")

    results = await crawler.check_availability(client, "2026-01-20", [get_resource("crea-plus")])

    assert isinstance(results[0], DelegateTimeoutError)


def test_register_remote_crawlers_only_when_configured():
    """DELEGATE_API_URL이 있을 때만 range/priced를 교체"""
    before = registry.get_all_map()
    try:
        with patch("app.core.config.DELEGATE_API_URL", ""):
            register_remote_crawlers()
            assert registry.get_all_map() == before

        with patch("app.core.config.DELEGATE_API_URL", "https://delegate.example"):
            register_remote_crawlers()
            assert isinstance(registry.get("range"), RemoteCrawler)
            assert isinstance(registry.get("priced"), RemoteCrawler)
            assert registry.get("table") is before["table"]
    finally:
        for kind, crawler in before.items():
            registry.register(kind, crawler)


def test_registry_map_is_a_copy():
    snapshot = registry.get_all_map()
    snapshot["table"] = None

    assert registry.get("table") is not None
