"""
헤드리스 브라우저 헬퍼

시민회관(달력 이동)과 CREA(예약 페이지) 브라우저 전략이 공통으로 사용합니다.
브라우저는 요청 단위로 띄우고 끝나면 반드시 닫습니다.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import async_playwright, BrowserContext

from app.core.config import BROWSER_USER_AGENT, BROWSER_PAGE_TIMEOUT_MS

logger = logging.getLogger("app")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


@asynccontextmanager
async def open_browser_context(storage_state: Optional[dict] = None) -> AsyncIterator[BrowserContext]:
    """
    Chromium을 띄우고 공유 컨텍스트 하나를 돌려줍니다.

    Args:
        storage_state: 저장해 둔 세션 상태 (cookies + origins). 없으면 비로그인 컨텍스트
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=LAUNCH_ARGS)
        try:
            context = await browser.new_context(
                storage_state=storage_state,
                user_agent=BROWSER_USER_AGENT,
                viewport={"width": 1280, "height": 720},
                locale="ja-JP",
                timezone_id="Asia/Tokyo",
            )
            context.set_default_timeout(BROWSER_PAGE_TIMEOUT_MS)
            try:
                yield context
            finally:
                await context.close()
        finally:
            await browser.close()
