from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded

from app.api.availability import router as availability_router
from app.core.app_setup import lifespan, add_common_middlewares
from app.core.config import LOG_DIR
from app.core.limiter import limiter
from app.core.logging_config import setup_logging
from app.exception.base_exception import BaseCustomException
from app.exception.exception_handler import (
    custom_exception_handler, global_exception_handler,
    rate_limit_exception_handler, validation_exception_handler,
)

# 로깅 설정(콘솔 + 일자별 파일 로테이션, JSON 포맷)
setup_logging(LOG_DIR)

app = FastAPI(title="studio-check", lifespan=lifespan)
app.state.limiter = limiter

add_common_middlewares(app)


@app.get("/ping")
def ping():
    return {"ok": True}


# API 라우터 포함
app.include_router(availability_router)

# 커스텀 예외 핸들러는 라우터 포함 이후에 추가
app.add_exception_handler(BaseCustomException, custom_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)
