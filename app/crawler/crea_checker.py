import re
import logging
from datetime import date as date_cls, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

import httpx

from app.core import config
from app.models.dto import (
    ResourceDescriptor, PricedAvailability, PricedStudio, PricedSlot, PricedTimeSlot,
    PricedSlotDefinition,
)
from app.utils.auth_state import load_auth_state
from app.utils.browser import open_browser_context
from app.utils.client_loader import load_client
from app.utils.resource_loader import get_crea_public_id_map, get_resource
from app.utils.time_utils import pad_time, is_time_label
from app.utils.worker_pool import run_bounded
from app.validate.date_validator import day_of_week
from app.exception.base_exception import BaseCustomException
from app.exception.crawler.crawler_exception import CrawlerParseError

from app.crawler.base import BaseCrawler
from app.crawler.registry import registry

logger = logging.getLogger("app")

JST = timezone(timedelta(hours=9))

# 제목 매칭 순서 (앞에서부터 처음 일치하는 이름 사용)
KNOWN_SLOT_NAMES = ("平日夜・土日", "平日 昼", "平日 夜", "平日昼", "朝活", "土日")
# 응답 정렬 순서
CANONICAL_SLOT_ORDER = ("朝活", "平日昼", "平日 昼", "平日 夜", "平日夜・土日", "土日")

PRICE_PATTERN = re.compile(r"[¥￥]\s*([\d,]+)")
SLOT_RANGE_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*-\s*\d{1,2}:\d{2}")
MONTH_LABEL_PATTERN = re.compile(r"(\d{4})年\s*(\d{1,2})月")

MAX_MONTH_STEPS = 6
EVENING_START_HOUR = 17
PAGE_WAIT_MS = 3000
MONTH_WAIT_MS = 1000
DAY_WAIT_MS = 1500


# --- 적용 요일 규칙 ---
def is_slot_applicable(days: str, target: date_cls, hour: Optional[int] = None) -> bool:
    """
    all: 매일 / weekday: 월~금 / weekend: 토·일
    weekdayNight_weekend: 주말은 항상, 평일은 hour가 주어지면 17시 이후만 (없으면 평일 전체)
    """
    weekend = target.weekday() >= 5
    if days == "weekday":
        return not weekend
    if days == "weekend":
        return weekend
    if days == "weekdayNight_weekend":
        if weekend or hour is None:
            return True
        return hour >= EVENING_START_HOUR
    return True


# --- 이벤트 제목 파싱 ---
def parse_event_title(title: str) -> Tuple[str, Optional[int]]:
    """
    "CREA大名 平日昼 ¥1,980" -> ("平日昼", 1980)
    알려진 이름이 없으면 금액 부분을 지운 나머지를 이름으로 사용합니다.
    """
    price_match = PRICE_PATTERN.search(title)
    price = int(price_match.group(1).replace(",", "")) if price_match else None

    for name in KNOWN_SLOT_NAMES:
        if name in title:
            return name, price
    return PRICE_PATTERN.sub("", title).strip(), price


def _slot_order(slot: PricedSlot) -> int:
    try:
        return CANONICAL_SLOT_ORDER.index(slot.slotName)
    except ValueError:
        return len(CANONICAL_SLOT_ORDER)


def _extract_events(payload) -> list:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "booking_events", "events"):
            if isinstance(payload.get(key), list):
                return payload[key]
    raise CrawlerParseError("予約イベント一覧が見つかりません")


def group_events(
    events: Iterable[dict],
    studio_ids: List[str],
    lookup: Dict[str, Tuple[str, str]],
) -> Dict[str, List[PricedSlot]]:
    """
    이벤트를 (스튜디오, public id) 단위로 묶어 PricedSlot으로 만듭니다.
    레지스트리에 없는 public id나 요청하지 않은 스튜디오의 이벤트는 무시합니다.
    """
    groups: Dict[str, Dict[str, PricedSlot]] = {studio_id: {} for studio_id in studio_ids}

    for event in events:
        public_id = str(event.get("public_id", ""))
        if public_id not in lookup:
            continue
        studio_id, slot_type = lookup[public_id]
        if studio_id not in groups:
            continue

        slot = groups[studio_id].get(public_id)
        if slot is None:
            definition = _find_definition(studio_id, slot_type)
            name, price = parse_event_title(event.get("title") or "")
            slot = PricedSlot(
                slotType=slot_type,
                slotName=name or (definition.name if definition else slot_type),
                price=price if price is not None else (definition.price if definition else 0),
                hours=definition.hours if definition else "",
            )
            groups[studio_id][public_id] = slot

        start = datetime.fromtimestamp(int(event["start"]), tz=JST)
        slot.timeSlots.append(PricedTimeSlot(
            time=pad_time(start.hour, start.minute),
            available=bool(event.get("reservable")) and not bool(event.get("full")),
        ))

    result = {}
    for studio_id, slots in groups.items():
        ordered = sorted(slots.values(), key=_slot_order)
        for slot in ordered:
            slot.timeSlots.sort(key=lambda ts: ts.time)
        result[studio_id] = ordered
    return result


def _find_definition(studio_id: str, slot_type: str) -> Optional[PricedSlotDefinition]:
    resource = get_resource(studio_id)
    if resource is None:
        return None
    return next((s for s in resource.priced_slots if s.slotType == slot_type), None)


# --- 브라우저 전략 헬퍼 ---
def extract_start_times(item_texts: Iterable[str], page_text: str = "") -> List[PricedTimeSlot]:
    """
    목록 항목의 'H:MM - H:MM'에서 시작 시각을 뽑습니다.
    목록에서 하나도 못 찾으면 페이지 전체 텍스트에서 6~23시만 골라 씁니다.
    """
    times = set()
    for text in item_texts:
        match = SLOT_RANGE_PATTERN.search(text or "")
        if match:
            start = pad_time(match.group(1), match.group(2))
            if is_time_label(start):
                times.add(start)

    if not times:
        for match in SLOT_RANGE_PATTERN.finditer(page_text or ""):
            start = pad_time(match.group(1), match.group(2))
            if 6 <= int(match.group(1)) <= 23 and is_time_label(start):
                times.add(start)

    return [PricedTimeSlot(time=t, available=True) for t in sorted(times)]


async def advance_month(page, target: date_cls, max_steps: int = MAX_MONTH_STEPS) -> bool:
    """
    월 페이지네이터를 target 연/월까지 이동. 도달하면 True.
    라벨을 못 읽거나 다음 버튼이 비활성이거나 횟수를 다 쓰면 False.
    """
    for attempt in range(max_steps + 1):
        label_locator = page.locator('button[disabled]:has-text("年")').first
        if await label_locator.count() == 0:
            return False
        match = MONTH_LABEL_PATTERN.search(await label_locator.text_content() or "")
        if not match:
            return False

        months_diff = (target.year - int(match.group(1))) * 12 + (target.month - int(match.group(2)))
        if months_diff == 0:
            return True
        if attempt == max_steps:
            return False

        arrows = page.locator("button").filter(has=page.locator("img"))
        if months_diff > 0:
            next_button = arrows.last
            if await next_button.is_disabled():
                return False
            await next_button.click()
        else:
            await arrows.first.click()
        await page.wait_for_timeout(MONTH_WAIT_MS)

    return False


async def scrape_slot_page(context, slot_url: str, target: date_cls) -> List[PricedTimeSlot]:
    """슬롯 예약 페이지 하나를 열어 target 날짜의 빈 시간을 읽습니다. 페이지는 이 작업이 닫습니다."""
    page = await context.new_page()
    try:
        await page.goto(f"{slot_url}/book/event_type", wait_until="domcontentloaded", timeout=30000)
        await page.wait_for_timeout(PAGE_WAIT_MS)

        if not await advance_month(page, target):
            return []

        day_button = page.locator(f'button >> text="{target.day}"').first
        if await day_button.count() == 0 or await day_button.is_disabled():
            return []

        await day_button.click()
        await page.wait_for_timeout(DAY_WAIT_MS)

        item_texts = await page.locator('li, [role="listitem"]').all_text_contents()
        page_text = await page.inner_text("body")
        return extract_start_times(item_texts, page_text)
    finally:
        await page.close()


class CreaCrawler(BaseCrawler):
    """
    レンタルスタジオCREA (Coubic 예약 플랫폼, 요금제별 슬롯)

    전략
    - api: 가맹점 booking_events JSON을 하루 범위로 한 번 조회 (기본)
    - browser: 요금제별 예약 페이지를 저장된 세션으로 열어 읽기 (동시 페이지 수 제한)
    """

    HEADERS = {
        "User-Agent": config.BROWSER_USER_AGENT,
        "Accept": "application/json",
    }

    def __init__(self, strategy: Optional[str] = None, api_url: Optional[str] = None):
        self.strategy = strategy or config.CREA_STRATEGY
        self.api_url = api_url or config.CREA_API_URL

    async def check_availability(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ):
        try:
            studios = await self.fetch_studios(client, date, resources)
        except BaseCustomException as e:
            return [e for _ in resources]
        except Exception as e:
            return [Exception(f"[{r.id}] Unexpected error: {str(e)}") for r in resources]

        weekday = day_of_week(date)
        return [
            PricedAvailability(
                resourceId=resource.id,
                resourceName=resource.name,
                date=date,
                dayOfWeek=weekday,
                studios=[studio],
                error=studio.error,
            )
            for resource, studio in zip(resources, studios)
        ]

    async def fetch_studios(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ) -> List[PricedStudio]:
        """resources와 같은 순서의 PricedStudio 리스트"""
        if self.strategy == "browser":
            slots_by_studio, errors = await self._fetch_by_browser(date, resources)
        else:
            slots_by_studio, errors = await self._fetch_by_api(client, date, resources), {}

        weekday = day_of_week(date)
        return [
            PricedStudio(
                studioId=resource.id,
                studioName=resource.name,
                floor=resource.floor,
                size=resource.size,
                date=date,
                dayOfWeek=weekday,
                slots=slots_by_studio.get(resource.id, []),
                error=errors.get(resource.id),
            )
            for resource in resources
        ]

    async def _fetch_by_api(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ) -> Dict[str, List[PricedSlot]]:
        params = {
            "start": f"{date}T00:00:00+09:00",
            "end": f"{date}T23:59:59+09:00",
        }
        response = await load_client(
            client, "GET", self.api_url,
            headers=self.HEADERS, params=params, timeout=config.HTTP_TIMEOUT,
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise CrawlerParseError(f"予約APIの応答を解析できません: {e}")

        events = _extract_events(payload)
        try:
            return group_events(events, [r.id for r in resources], get_crea_public_id_map())
        except (KeyError, TypeError, ValueError) as e:
            raise CrawlerParseError(f"予約イベントの形式が不正です: {e}")

    async def _fetch_by_browser(
        self,
        date: str,
        resources: List[ResourceDescriptor],
    ) -> Tuple[Dict[str, List[PricedSlot]], Dict[str, str]]:
        storage_state = load_auth_state()
        target = datetime.strptime(date, "%Y-%m-%d").date()

        jobs = [
            (resource, slot)
            for resource in resources
            for slot in resource.priced_slots
            if is_slot_applicable(slot.days, target)
        ]

        async with open_browser_context(storage_state) as context:
            tasks = [
                (lambda url=slot.url: scrape_slot_page(context, url, target))
                for _, slot in jobs
            ]
            outcomes = await run_bounded(tasks, config.BROWSER_CONCURRENCY)

        slots_by_studio: Dict[str, List[PricedSlot]] = {r.id: [] for r in resources}
        errors: Dict[str, str] = {}
        for (resource, slot), outcome in zip(jobs, outcomes):
            if isinstance(outcome, Exception):
                errors.setdefault(resource.id, f"{slot.name}: {outcome}")
                outcome = []
            slots_by_studio[resource.id].append(PricedSlot(
                slotType=slot.slotType,
                slotName=slot.name,
                price=slot.price,
                hours=slot.hours,
                timeSlots=outcome,
            ))
        return slots_by_studio, errors


# Register the crawler
registry.register("priced", CreaCrawler())
