from __future__ import annotations
import httpx
from fastapi import Depends, Request
from app.crawler.base import BaseCrawler
from app.crawler.registry import registry
from app.services.availability_service import AvailabilityService


def get_crawlers_map() -> dict[str, BaseCrawler]:
    """등록된 크롤러 맵 반환 (키: 어댑터 종류)."""
    return registry.get_all_map()


def get_http_client(request: Request) -> httpx.AsyncClient:
    """lifespan에서 만든 앱 공용 AsyncClient"""
    return request.app.state.http


def get_availability_service(
    crawlers_map: dict[str, BaseCrawler] = Depends(get_crawlers_map),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> AvailabilityService:
    """AvailabilityService 인스턴스 반환 (DI용)."""
    return AvailabilityService(crawlers_map, client)
