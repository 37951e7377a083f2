import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.utils.browser import open_browser_context, LAUNCH_ARGS


def _playwright(browser) -> MagicMock:
    p = MagicMock()
    p.chromium.launch = AsyncMock(return_value=browser)
    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=p)
    manager.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=manager), p


def _browser():
    context = MagicMock()
    context.close = AsyncMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    return browser, context


@pytest.mark.asyncio
async def test_context_uses_configured_timeout():
    """설정의 페이지 타임아웃이 컨텍스트 기본값으로 들어가고 끝나면 모두 닫히는지 테스트"""
    browser, context = _browser()
    factory, p = _playwright(browser)

    with patch("app.utils.browser.async_playwright", factory), \
         patch("app.utils.browser.BROWSER_PAGE_TIMEOUT_MS", 1234):
        async with open_browser_context({"cookies": [], "origins": []}) as ctx:
            assert ctx is context

    context.set_default_timeout.assert_called_once_with(1234)
    assert p.chromium.launch.await_args.kwargs == {"headless": True, "args": LAUNCH_ARGS}
    assert browser.new_context.await_args.kwargs["storage_state"] == {"cookies": [], "origins": []}
    context.close.assert_awaited_once()
    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_browser_closed_when_body_fails():
    browser, context = _browser()
    factory, _ = _playwright(browser)

    with patch("app.utils.browser.async_playwright", factory):
        with pytest.raises(RuntimeError):
            async with open_browser_context():
                raise RuntimeError("page crashed")

    context.close.assert_awaited_once()
    browser.close.assert_awaited_once()
