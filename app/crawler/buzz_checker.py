import re
import asyncio
import logging
from typing import List

import httpx
from bs4 import BeautifulSoup

from app.core.config import BROWSER_USER_AGENT, HTTP_TIMEOUT
from app.models.dto import (
    ResourceDescriptor, TableAvailability, TimeSlot, StudioAvailability,
)
from app.utils.client_loader import load_client
from app.utils.time_utils import is_time_label
from app.validate.date_validator import day_of_week
from app.exception.base_exception import BaseCustomException
from app.exception.crawler.crawler_exception import CrawlerParseError

from app.crawler.base import BaseCrawler
from app.crawler.registry import registry

logger = logging.getLogger("app")


class BuzzCrawler(BaseCrawler):
    """BUZZ 체인 스튜디오: 날짜별 정적 HTML 타임테이블을 스크래핑"""

    HEADERS = {"User-Agent": BROWSER_USER_AGENT}
    TIME_CELL = re.compile(r"^\d{2}:\d{2}$")
    AVAILABLE_MARKER = "reserve_modal_trigger"

    async def check_availability(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ):
        async def safe_fetch(resource: ResourceDescriptor):
            try:
                return await self._fetch_table(client, date, resource)
            except BaseCustomException as e:
                return e
            except Exception as e:
                # 예상치 못한 에러는 리소스 정보를 포함하여 새로운 예외로 반환
                return Exception(f"[{resource.id}] Unexpected error: {str(e)}")

        return await asyncio.gather(*[safe_fetch(r) for r in resources])

    async def _fetch_table(
        self,
        client: httpx.AsyncClient,
        date: str,
        resource: ResourceDescriptor,
    ) -> TableAvailability:
        url = f"{resource.url}/{date}"
        response = await load_client(client, "GET", url, headers=self.HEADERS, timeout=HTTP_TIMEOUT)

        return TableAvailability(
            resourceId=resource.id,
            resourceName=resource.name,
            date=date,
            dayOfWeek=day_of_week(date),
            timeSlots=self.parse_timetable(response.text),
        )

    def parse_timetable(self, html: str) -> List[TimeSlot]:
        """
        `table tbody tr` 행마다 첫 셀이 HH:MM 이면 시간 행으로 봅니다 (심야 24:30 등 포함, 12:75 같은 값은 건너뜀).
        나머지 셀은 1번부터 번호를 매긴 스튜디오이며,
        버튼에 reserve_modal_trigger 클래스가 있으면 예약 가능.
        """
        soup = BeautifulSoup(html, "lxml")
        if soup.select_one("table") is None:
            raise CrawlerParseError("タイムテーブルが見つかりません")

        time_slots: List[TimeSlot] = []
        for row in soup.select("table tbody tr"):
            cells = row.find_all("td")
            if not cells:
                continue
            time_text = cells[0].get_text(strip=True)
            if not self.TIME_CELL.match(time_text) or not is_time_label(time_text):
                continue

            studios = []
            for index, cell in enumerate(cells[1:], start=1):
                button = cell.find("button")
                classes = button.get("class", []) if button else []
                studios.append(StudioAvailability(
                    studioNumber=index,
                    isAvailable=self.AVAILABLE_MARKER in classes,
                ))
            time_slots.append(TimeSlot(time=time_text, studios=studios))

        return time_slots


# Register the crawler
registry.register("table", BuzzCrawler())
