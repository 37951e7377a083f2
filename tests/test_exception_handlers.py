import json
import pytest
from unittest.mock import patch, MagicMock
from fastapi import Request
from app.exception.exception_handler import (
    custom_exception_handler, global_exception_handler, rate_limit_exception_handler,
    delegate_exception_handler, delegate_global_exception_handler,
)
from app.exception.base_exception import BaseCustomException, ErrorCode
from app.exception.crawler.crawler_exception import NavigationTimeoutError


# Test Custom Exception
class SampleCustomException(BaseCustomException):
    def __init__(self):
        super().__init__(
            message="Test Error",
            error_code=ErrorCode.COMMON_BAD_REQUEST,
            status_code=400
        )


def _request() -> MagicMock:
    request = MagicMock(spec=Request)
    request.url.path = "/test"
    return request


@pytest.mark.asyncio
async def test_custom_exception_handler_structure():
    """
    BaseCustomException 발생 시 에러 포맷(JSON)으로 응답하는지 검증
    """
    response = await custom_exception_handler(_request(), SampleCustomException())

    assert response.status_code == 400

    body = json.loads(response.body)
    assert body["isSuccess"] is False
    assert body["code"] == "COMMON-002"
    assert body["message"] == "Test Error"
    assert body["error"] == "Test Error"
    assert body["result"] is None


@pytest.mark.asyncio
async def test_rate_limit_handler_is_429():
    response = await rate_limit_exception_handler(_request(), MagicMock())

    assert response.status_code == 429
    assert json.loads(response.body)["code"] == "RATE-001"


@pytest.mark.asyncio
async def test_global_exception_handler_structure_prod():
    """
    운영 환경(IS_DEBUG=False)에서 500 에러 발생 시 스택 트레이스가 숨겨지는지 검증
    """
    exc = Exception("Unexpected Server Error")

    with patch("app.exception.exception_handler.IS_DEBUG", False):
        response = await global_exception_handler(_request(), exc)

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["isSuccess"] is False
    assert body["code"] == "COMMON-001"
    assert body["result"] is None
    assert "Unexpected Server Error" not in body["message"]


@pytest.mark.asyncio
async def test_global_exception_handler_structure_dev():
    """
    개발 환경(IS_DEBUG=True)에서 500 에러 발생 시 스택 트레이스가 포함되는지 검증
    """
    exc = Exception("Unexpected Server Error")

    with patch("app.exception.exception_handler.IS_DEBUG", True):
        response = await global_exception_handler(_request(), exc)

    body = json.loads(response.body)
    assert "stack_trace" in body["result"]
    assert body["result"]["error_detail"] == "Unexpected Server Error"


@pytest.mark.asyncio
async def test_delegate_handlers_use_success_false():
    """위임 서버 핸들러는 {success: false, error} 형태"""
    response = await delegate_exception_handler(_request(), NavigationTimeoutError())

    assert response.status_code == 504
    body = json.loads(response.body)
    assert body == {"success": False, "error": "指定日付まで移動できませんでした", "code": "CRAWLER-005"}

    response = await delegate_global_exception_handler(_request(), RuntimeError("browser crashed"))
    assert response.status_code == 500
    assert json.loads(response.body) == {"success": False, "error": "browser crashed"}
