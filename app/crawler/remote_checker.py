import logging
from typing import List

import httpx

from app.core import config
from app.core.context import get_trace_id
from app.core.middleware import TRACE_ID_HEADER
from app.models.dto import (
    ResourceDescriptor, HallAvailability, HallRoom, PricedAvailability, PricedStudio,
)
from app.validate.date_validator import day_of_week
from app.exception.api.client_loader_exception import FetchError
from app.exception.base_exception import BaseCustomException
from app.exception.crawler.crawler_exception import DelegateTimeoutError

from app.crawler.base import BaseCrawler
from app.crawler.registry import registry
from app.crawler.civic_hall_checker import select_rooms

logger = logging.getLogger("app")

# 어댑터 종류 -> 위임 서버의 사이트 경로
DELEGATE_SITES = {"range": "civic-hall", "priced": "crea"}


class RemoteCrawler(BaseCrawler):
    """
    브라우저가 필요한 사이트를 위임 스크래핑 서버(app.delegate_main)에 맡기는 크롤러.
    사이트당 한 번 호출하고, 돌아온 묶음 결과를 요청한 리소스별 레코드로 다시 나눕니다.
    """

    def __init__(self, kind: str, base_url: str | None = None, timeout: float | None = None):
        self.kind = kind
        self.site = DELEGATE_SITES[kind]
        self.base_url = (base_url or config.DELEGATE_API_URL).rstrip("/")
        self.timeout = timeout or config.DELEGATE_TIMEOUT

    async def check_availability(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ):
        try:
            payload = await self._call_delegate(client, date, resources)
        except BaseCustomException as e:
            return [e for _ in resources]
        except Exception as e:
            return [Exception(f"[{r.id}] Unexpected error: {str(e)}") for r in resources]

        if self.kind == "range":
            return self._split_rooms(payload, date, resources)
        return self._split_studios(payload, date, resources)

    async def _call_delegate(self, client: httpx.AsyncClient, date: str, resources: List[ResourceDescriptor]) -> dict:
        ids = [
            (r.sub_resource_id or r.id) if self.kind == "range" else r.id
            for r in resources
        ]
        url = f"{self.base_url}/scrape/{self.site}"
        try:
            response = await client.get(
                url,
                params={"date": date, "ids": ",".join(ids)},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.error({"errorCode": "CRAWLER-004", "message": "delegate timeout", "url": url, "timeout": self.timeout})
            raise DelegateTimeoutError()
        except httpx.TransportError as e:
            logger.error({"errorCode": "API-001", "message": "delegate unreachable", "url": url, "error": repr(e)})
            raise FetchError(f"スクレイピングサーバーに接続できません: {e}")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            raise FetchError(
                body.get("error") or f"HTTP error! status: {response.status_code}",
                upstream_status=response.status_code,
            )
        if not body.get("success"):
            raise FetchError(body.get("error") or "スクレイピングサーバーからエラーが返されました")
        return body

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        trace_id = get_trace_id()
        if trace_id:
            headers[TRACE_ID_HEADER] = trace_id
        return headers

    def _split_rooms(self, payload: dict, date: str, resources: List[ResourceDescriptor]):
        rooms = [HallRoom(**room) for room in payload.get("rooms") or []]
        return [
            HallAvailability(
                resourceId=r.id,
                resourceName=r.name,
                date=date,
                dayOfWeek=payload.get("dayOfWeek") or day_of_week(date),
                rooms=select_rooms(rooms, [r.room_name or r.name]),
            )
            for r in resources
        ]

    def _split_studios(self, payload: dict, date: str, resources: List[ResourceDescriptor]):
        studios = {s["studioId"]: PricedStudio(**s) for s in payload.get("studios") or []}
        results = []
        for r in resources:
            studio = studios.get(r.id)
            results.append(PricedAvailability(
                resourceId=r.id,
                resourceName=r.name,
                date=date,
                dayOfWeek=payload.get("dayOfWeek") or day_of_week(date),
                studios=[studio] if studio else [],
                error=studio.error if studio else "スタジオのデータが返されませんでした",
            ))
        return results


def register_remote_crawlers() -> None:
    """DELEGATE_API_URL이 설정되어 있으면 range/priced를 위임 크롤러로 교체"""
    if not config.DELEGATE_API_URL:
        return
    for kind in DELEGATE_SITES:
        registry.register(kind, RemoteCrawler(kind))
