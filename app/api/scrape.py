"""
위임 스크래핑 서버 라우터

브라우저가 필요한 사이트(시민회관, CREA)를 집계 서버 대신 처리합니다.
응답은 집계 서버의 RemoteCrawler가 읽는 `{success, ...}` 형태입니다.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_http_client
from app.crawler.base import BaseCrawler
from app.crawler.civic_hall_checker import CivicHallCrawler, select_rooms
from app.crawler.crea_checker import CreaCrawler
from app.exception.base_exception import BaseCustomException
from app.exception.common.request_exception import UnknownResourceError
from app.exception.crawler.crawler_exception import CrawlerException
from app.models.dto import CivicHallScrapeResponse, CreaScrapeResponse, HealthResponse
from app.utils.resource_loader import get_resources_by_kind
from app.validate.date_validator import validate_date, day_of_week

router = APIRouter()
logger = logging.getLogger("app")

SERVICE_NAME = "studio-check-scraper"


def get_site_crawlers() -> Dict[str, BaseCrawler]:
    """사이트 경로 -> 로컬 크롤러 (위임 서버는 항상 직접 크롤링)"""
    return {"civic-hall": CivicHallCrawler(), "crea": CreaCrawler()}


def _split_ids(*values: Optional[str]) -> List[str]:
    raw = next((v for v in values if v), "")
    return [s.strip() for s in raw.split(",") if s.strip()]


@router.get("/scrape/{site}")
@router.get("/api/scrape/{site}")
async def scrape_site(
    site: str,
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    ids: Optional[str] = Query(None),
    rooms: Optional[str] = Query(None, description="Alias of ids (civic-hall)"),
    studios: Optional[str] = Query(None, description="Alias of ids (crea)"),
    crawlers: Dict[str, BaseCrawler] = Depends(get_site_crawlers),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    crawler = crawlers.get(site)
    if crawler is None:
        raise UnknownResourceError(f"Not Found: {site}")

    target = validate_date(date).isoformat()
    requested = _split_ids(ids, rooms, studios)
    started = time.perf_counter()

    try:
        if site == "civic-hall":
            payload = await _scrape_civic_hall(crawler, client, target, requested)
        else:
            payload = await _scrape_crea(crawler, client, target, requested)
    except BaseCustomException as e:
        raise CrawlerException(e.message) from e

    logger.info({
        "message": "delegate scrape finished",
        "site": site,
        "date": target,
        "ids": requested or "all",
        "duration_ms": round((time.perf_counter() - started) * 1000),
    })
    return payload


async def _scrape_civic_hall(crawler, client, date: str, requested: List[str]) -> CivicHallScrapeResponse:
    halls = get_resources_by_kind("range")
    if requested:
        halls = [r for r in halls if r.id in requested or r.sub_resource_id in requested]

    rooms = await crawler.fetch_rooms(client, date)
    if requested:
        rooms = select_rooms(rooms, [r.room_name or r.name for r in halls])

    return CivicHallScrapeResponse(date=date, dayOfWeek=day_of_week(date), rooms=rooms)


async def _scrape_crea(crawler, client, date: str, requested: List[str]) -> CreaScrapeResponse:
    studios = get_resources_by_kind("priced")
    if requested:
        selected = [r for r in studios if r.id in requested]
        studios = selected or studios

    results = await crawler.fetch_studios(client, date, studios)
    return CreaScrapeResponse(date=date, dayOfWeek=day_of_week(date), studios=results)


@router.get("/health", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse)
def health():
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=SERVICE_NAME,
        availableCreaStudios=[r.id for r in get_resources_by_kind("priced")],
    )
