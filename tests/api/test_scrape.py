import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.delegate_main import app
from app.api.dependencies import get_http_client
from app.api.scrape import get_site_crawlers
from app.exception.crawler.crawler_exception import AuthUnavailableError
from app.models.dto import HallRoom, PricedStudio


def _rooms():
    return [HallRoom(roomName=name, slots=[]) for name in ["リハーサル室", "練習室①", "練習室③"]]


@pytest.fixture
def hall_crawler():
    crawler = MagicMock()
    crawler.fetch_rooms = AsyncMock(return_value=_rooms())
    return crawler


@pytest.fixture
def crea_crawler():
    async def fetch_studios(client, date, resources):
        return [
            PricedStudio(studioId=r.id, studioName=r.name, date=date, dayOfWeek="火")
            for r in resources
        ]

    crawler = MagicMock()
    crawler.fetch_studios = AsyncMock(side_effect=fetch_studios)
    return crawler


@pytest.fixture
def client(hall_crawler, crea_crawler, fake_http_client):
    app.dependency_overrides[get_site_crawlers] = lambda: {"civic-hall": hall_crawler, "crea": crea_crawler}
    app.dependency_overrides[get_http_client] = lambda: fake_http_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "studio-check-scraper"
    assert data["availableCreaStudios"] == ["crea-daimyo", "crea-plus", "crea-daimyo2", "crea-music"]


def test_unknown_site_is_404(client):
    response = client.get("/scrape/buzz", params={"date": "2026-01-20"})

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.parametrize("date", [None, "2026/01/20", "2026-13-01"])
def test_bad_date_is_400(client, date):
    params = {"date": date} if date else {}
    response = client.get("/scrape/civic-hall", params=params)

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["code"] == "COMMON-002"


def test_civic_hall_filters_requested_rooms(client, hall_crawler):
    """sub id / 리소스 id 둘 다 방 선택에 쓸 수 있음"""
    response = client.get("/api/scrape/civic-hall", params={
        "date": "2026-01-20", "rooms": "practice1,civichall-practice3",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["dayOfWeek"] == "火"
    assert [r["roomName"] for r in data["rooms"]] == ["練習室①", "練習室③"]
    assert hall_crawler.fetch_rooms.await_args.args[1] == "2026-01-20"


def test_civic_hall_all_rooms_without_ids(client):
    response = client.get("/scrape/civic-hall", params={"date": "2026-01-20"})
    assert len(response.json()["rooms"]) == 3


def test_crea_invalid_ids_fall_back_to_all(client, crea_crawler):
    response = client.get("/scrape/crea", params={"date": "2026-01-20", "studios": "nope"})

    assert response.status_code == 200
    assert [s["studioId"] for s in response.json()["studios"]] == [
        "crea-daimyo", "crea-plus", "crea-daimyo2", "crea-music",
    ]


def test_crea_selected_ids(client):
    response = client.get("/scrape/crea", params={"date": "2026-01-20", "ids": "crea-plus"})
    assert [s["studioId"] for s in response.json()["studios"]] == ["crea-plus"]


def test_scrape_failure_is_500(client, crea_crawler):
    """크롤러의 도메인 예외는 500 {success:false, error}로 감싸서 응답"""
    crea_crawler.fetch_studios.side_effect = AuthUnavailableError()

    response = client.get("/scrape/crea", params={"date": "2026-01-20"})

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "認証情報が見つかりません"
    assert data["code"] == "CRAWLER-001"
