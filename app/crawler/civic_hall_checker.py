import re
import logging
from datetime import date as date_cls, datetime
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from app.core import config
from app.models.dto import (
    ResourceDescriptor, HallAvailability, HallRoom, HallSlot, SlotState,
)
from app.utils.client_loader import load_client
from app.utils.browser import open_browser_context
from app.validate.date_validator import day_of_week
from app.exception.base_exception import BaseCustomException
from app.exception.crawler.crawler_exception import CrawlerParseError, NavigationTimeoutError

from app.crawler.base import BaseCrawler
from app.crawler.registry import registry

logger = logging.getLogger("app")

# 고정 4구간 (오전 / 오후 / 저녁 / 야간)
TIME_RANGES = ("9:00-12:30", "13:00-15:30", "16:00-18:30", "19:00-22:00")
# koma-table 한 줄에서 상태 글리프가 들어 있는 셀 위치
SLOT_CELL_INDICES = (1, 3, 5, 7)
TARGET_ROOMS = ("リハーサル室", "練習室①", "練習室③")

GLYPH_STATES = {
    "○": SlotState.AVAILABLE,
    "●": SlotState.AVAILABLE,
    "×": SlotState.RESERVED,
    "-": SlotState.OUT_OF_WINDOW,
    # 빈 셀은 접수 기간 밖
    "": SlotState.OUT_OF_WINDOW,
}

CELL_ID_PATTERN = re.compile(r"#(\d{4}/\d{2}/\d{2})#(\d+)$")
HEADING_DATE_PATTERN = re.compile(r"(\d{4}).*?年\s*(\d{1,2})月\s*(\d{1,2})日")
BRACKET_NOTES = re.compile(r"（[^）]*）|\([^)]*\)")

MAX_NAVIGATION_STEPS = 60


def normalize_glyph(glyph: str) -> SlotState:
    return GLYPH_STATES.get(glyph.strip(), SlotState.UNKNOWN)


def parse_koma_tables(html: str, target_date: str) -> List[HallRoom]:
    """
    시민회관 공실 페이지의 `table.koma-table`을 방 단위로 파싱합니다.
    폼 POST 응답과 브라우저 렌더링 결과 모두 이 함수 하나로 처리합니다.

    Args:
        html: 페이지 HTML
        target_date: YYYY/MM/DD (셀 id에 날짜가 없을 때 사용)

    Raises:
        CrawlerParseError: koma-table이 하나도 없을 때 (마크업 변경/에러 페이지)
    """
    soup = BeautifulSoup(html, "lxml")
    tables = soup.select("table.koma-table")
    if not tables:
        raise CrawlerParseError("空き状況テーブルが見つかりません")

    rooms: List[HallRoom] = []
    for table in tables:
        cells = table.find_all("td")
        if not cells:
            continue

        room_name = BRACKET_NOTES.sub("", cells[0].get_text(strip=True)).strip()
        if not any(target in room_name for target in TARGET_ROOMS):
            continue

        slots = []
        for slot_index, cell_index in enumerate(SLOT_CELL_INDICES):
            if cell_index >= len(cells):
                continue
            cell = cells[cell_index]
            status = cell.get_text(strip=True)

            slot_date, slot_id = target_date, str(slot_index)
            match = CELL_ID_PATTERN.search(cell.get("id") or "")
            if match:
                slot_date, slot_id = match.group(1), match.group(2)

            slots.append(HallSlot(
                status=status,
                state=normalize_glyph(status),
                date=slot_date,
                slotId=slot_id,
                timeRange=TIME_RANGES[slot_index],
            ))

        rooms.append(HallRoom(roomName=room_name, slots=slots))

    return rooms


def parse_heading_date(text: Optional[str]) -> date_cls:
    """'2026年 1月20日(火)' 형태의 h3 제목에서 현재 표시 날짜를 읽습니다."""
    match = HEADING_DATE_PATTERN.search(text or "")
    if not match:
        raise CrawlerParseError(f"表示中の日付を読み取れません: {text}")
    year, month, day = (int(g) for g in match.groups())
    return date_cls(year, month, day)


def choose_navigation_step(diff_days: int) -> str:
    """남은 일수를 넘지 않는 가장 큰 이동 버튼 라벨을 고릅니다."""
    distance = abs(diff_days)
    if distance >= 31:
        unit = "1ヶ月"
    elif distance >= 7:
        unit = "1週間"
    else:
        unit = "1日"
    return f"{unit}後" if diff_days > 0 else f"{unit}前"


async def navigate_to_date(page, target: date_cls, max_steps: int = MAX_NAVIGATION_STEPS) -> None:
    """
    표시 날짜가 target이 될 때까지 상대 이동 버튼을 누릅니다.
    max_steps 안에 도달하지 못하면 NavigationTimeoutError.
    """
    for step in range(max_steps):
        current = parse_heading_date(await page.text_content("h3:has-text('年')"))
        if current == target:
            return

        label = choose_navigation_step((target - current).days)
        logger.debug({"message": "civic hall navigation", "step": step, "current": current.isoformat(), "click": label})
        await page.click(f'text="{label}"')
        await page.wait_for_load_state("networkidle")

    raise NavigationTimeoutError(f"{target.isoformat()} まで移動できませんでした")


class CivicHallCrawler(BaseCrawler):
    """
    福岡市民会館 (레인지형)

    전략
    - form: 검색 폼을 직접 POST 해서 받은 HTML을 파싱 (기본)
    - browser: 헤드리스 브라우저로 달력을 목표 날짜까지 이동 후 렌더링된 HTML을 파싱
    두 전략은 같은 파서를 쓰므로 결과 형태가 동일합니다.
    요청 안의 모든 시민회관 리소스는 한 번의 페이지 조회를 공유합니다.
    """

    HEADERS = {
        "User-Agent": config.BROWSER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "ja,en-US;q=0.9,en;q=0.8",
    }

    def __init__(self, strategy: Optional[str] = None, url: Optional[str] = None):
        self.strategy = strategy or config.CIVIC_HALL_STRATEGY
        self.url = url or config.CIVIC_HALL_URL

    async def check_availability(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ):
        try:
            rooms = await self.fetch_rooms(client, date)
        except BaseCustomException as e:
            return [e for _ in resources]
        except Exception as e:
            return [Exception(f"[{r.id}] Unexpected error: {str(e)}") for r in resources]

        weekday = day_of_week(date)
        return [
            HallAvailability(
                resourceId=resource.id,
                resourceName=resource.name,
                date=date,
                dayOfWeek=weekday,
                rooms=select_rooms(rooms, [resource.room_name or resource.name]),
            )
            for resource in resources
        ]

    async def fetch_rooms(self, client: httpx.AsyncClient, date: str) -> List[HallRoom]:
        """화이트리스트에 있는 모든 방의 4구간 상태를 가져옵니다."""
        if self.strategy == "browser":
            return await self._fetch_by_browser(date)
        return await self._fetch_by_form(client, date)

    async def _fetch_by_form(self, client: httpx.AsyncClient, date: str) -> List[HallRoom]:
        target = datetime.strptime(date, "%Y-%m-%d").date()
        form = {
            "op": "srch_sst",
            "UseYM": target.strftime("%Y%m"),
            "UseDay": str(target.day),
            "UseDate": target.strftime("%Y%m%d"),
            "ShisetsuCode": config.CIVIC_HALL_FACILITY_CODE,
        }
        response = await load_client(
            client, "POST", self.url,
            headers=self.HEADERS, data=form, timeout=config.HTTP_TIMEOUT,
        )
        return parse_koma_tables(response.text, target.strftime("%Y/%m/%d"))

    async def _fetch_by_browser(self, date: str) -> List[HallRoom]:
        target = datetime.strptime(date, "%Y-%m-%d").date()
        async with open_browser_context() as context:
            page = await context.new_page()
            await page.goto(self.url, wait_until="networkidle")
            await page.locator('li a:has-text("施設毎の空き状況")').first.click()
            await page.wait_for_load_state("networkidle")

            await navigate_to_date(page, target)
            html = await page.content()

        return parse_koma_tables(html, target.strftime("%Y/%m/%d"))


def select_rooms(rooms: List[HallRoom], room_names: List[str]) -> List[HallRoom]:
    """방 이름(부분 일치)으로 필요한 방만 골라냅니다."""
    return [room for room in rooms if any(name in room.roomName for name in room_names)]


# Register the crawler
registry.register("range", CivicHallCrawler())
