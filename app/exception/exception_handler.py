from fastapi.responses import JSONResponse
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from datetime import datetime
import logging
import traceback

from app.core.config import IS_DEBUG
from app.core.response import error_response
from app.exception.base_exception import BaseCustomException, ErrorCode
from app.exception.common.rate_limit_exception import OverRateLimitError
from app.exception.common.request_exception import InvalidRequestError

logger = logging.getLogger("app")

INTERNAL_ERROR_MESSAGE = "サーバー内部エラーが発生しました"


async def custom_exception_handler(request: Request, exc: BaseCustomException):
    """
    커스텀 예외 처리 핸들러 (4xx, 도메인 에러)
    """
    # 경고 수준 로깅 (스택 트레이스 불필요)
    logger.warning({
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "status": exc.status_code,
        "errorCode": exc.error_code_value,
        "message": exc.message,
        "path": request.url.path
    })

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            code=exc.error_code_value,
            message=exc.message
        ).model_dump()
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    쿼리 파라미터 타입 검증 실패를 400 InvalidRequest로 통일합니다.
    """
    fields = [".".join(str(loc) for loc in err["loc"]) for err in exc.errors()]
    return await custom_exception_handler(
        request, InvalidRequestError(f"パラメータが不正です: {', '.join(fields)}")
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    """
    slowapi의 RateLimitExceeded 예외를 비즈니스 예외(OverRateLimitError)로 변환하여
    일관된 에러 응답 포맷을 유지합니다.
    """
    return await custom_exception_handler(request, OverRateLimitError())


async def global_exception_handler(request: Request, exc: Exception):
    """
    전역 예외 처리 핸들러 (5xx, 미처리 예외)
    """
    error_msg = str(exc)
    stack_trace = traceback.format_exc()

    # 에러 수준 로깅 (항상 스택 트레이스 포함하여 서버 로그에 남김)
    logger.exception({
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "status": 500,
        "errorCode": ErrorCode.COMMON_INTERNAL_ERROR.value,
        "message": INTERNAL_ERROR_MESSAGE,
        "detail": error_msg,
        "path": request.url.path
    })

    response_content = error_response(
        code=ErrorCode.COMMON_INTERNAL_ERROR.value,
        message=INTERNAL_ERROR_MESSAGE
    ).model_dump()

    # 개발 환경(IS_DEBUG=True)인 경우에만 스택 트레이스 포함
    if IS_DEBUG:
        response_content["result"] = {
            "error_detail": error_msg,
            "stack_trace": stack_trace
        }

    return JSONResponse(
        status_code=500,
        content=response_content
    )


async def delegate_exception_handler(request: Request, exc: BaseCustomException):
    """
    위임 스크래핑 서버용 핸들러. 집계 서버의 원격 크롤러가 읽는
    `{success: false, error}` 형태로 응답합니다.
    """
    logger.warning({
        "status": exc.status_code,
        "errorCode": exc.error_code_value,
        "message": exc.message,
        "path": request.url.path
    })
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.error_code_value},
    )


async def delegate_global_exception_handler(request: Request, exc: Exception):
    logger.exception({
        "status": 500,
        "errorCode": ErrorCode.COMMON_INTERNAL_ERROR.value,
        "message": str(exc),
        "path": request.url.path
    })
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc) or INTERNAL_ERROR_MESSAGE},
    )
