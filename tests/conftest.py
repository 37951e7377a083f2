import pytest
from unittest.mock import MagicMock

from app.crawler.base import BaseCrawler
from app.models.dto import (
    TableAvailability, TimeSlot, StudioAvailability, HallAvailability, HallRoom, HallSlot, SlotState,
)
from app.validate.date_validator import day_of_week


class StubTableCrawler(BaseCrawler):
    """네트워크 없이 리소스마다 10:00 / 19:00 두 행을 돌려주는 테이블형 크롤러"""

    async def check_availability(self, client, date, resources):
        return [
            TableAvailability(
                resourceId=r.id, resourceName=r.name, date=date, dayOfWeek=day_of_week(date),
                timeSlots=[
                    TimeSlot(time=t, studios=[
                        StudioAvailability(studioNumber=n, isAvailable=n == 1)
                        for n in range(1, r.studioCount + 1)
                    ])
                    for t in ["10:00", "19:00"]
                ],
            )
            for r in resources
        ]


class StubHallCrawler(BaseCrawler):
    async def check_availability(self, client, date, resources):
        return [
            HallAvailability(
                resourceId=r.id, resourceName=r.name, date=date, dayOfWeek=day_of_week(date),
                rooms=[HallRoom(roomName=r.room_name or r.name, slots=[
                    HallSlot(status="○", state=SlotState.AVAILABLE, date=date.replace("-", "/"),
                             slotId="0", timeRange="9:00-12:30"),
                ])],
            )
            for r in resources
        ]


@pytest.fixture
def stub_crawlers():
    """range/table만 등록된 크롤러 맵 (priced는 일부러 비워 둠)"""
    return {"table": StubTableCrawler(), "range": StubHallCrawler()}


@pytest.fixture
def fake_http_client():
    return MagicMock()


@pytest.fixture(autouse=True)
def reset_limiter():
    """각 테스트 전에 limiter storage를 리셋"""
    from app.core.limiter import limiter
    limiter.reset()
    yield
