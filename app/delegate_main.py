"""
위임 스크래핑 서버 엔트리포인트

브라우저(playwright)가 필요한 크롤링만 담당하는 별도 FastAPI 앱입니다.
집계 서버는 DELEGATE_API_URL이 설정되어 있으면 이 서버의 /scrape/{site}를 호출합니다.

    uvicorn app.delegate_main:app --port 3001
"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from app.api.scrape import router as scrape_router
from app.core.config import LOG_DIR, PORT
from app.core.logging_config import setup_logging
from app.exception.base_exception import BaseCustomException
from app.exception.common.request_exception import InvalidRequestError
from app.exception.exception_handler import (
    delegate_exception_handler, delegate_global_exception_handler,
)
from app.core.app_setup import lifespan, add_common_middlewares

setup_logging(LOG_DIR)

app = FastAPI(title="studio-check-scraper", lifespan=lifespan)

add_common_middlewares(app)

app.include_router(scrape_router)


async def delegate_validation_handler(request, exc: RequestValidationError):
    return await delegate_exception_handler(request, InvalidRequestError())


app.add_exception_handler(BaseCustomException, delegate_exception_handler)
app.add_exception_handler(RequestValidationError, delegate_validation_handler)
app.add_exception_handler(Exception, delegate_global_exception_handler)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.delegate_main:app", host="0.0.0.0", port=PORT)
