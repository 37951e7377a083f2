import httpx
import asyncio
import logging
from typing import Iterable
from app.core.config import HTTP_RETRIES
from app.exception.api.client_loader_exception import FetchError


logger = logging.getLogger("app")


def _log_failure(url: str, status: int | None, reason: str) -> None:
    logger.error({
        "status": status if status else 503,
        "errorCode": "API-001",
        "message": "外部サイトへのリクエストに失敗しました",
        "url": url,
        "reason": reason,
    })


async def load_client(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    retries: int = HTTP_RETRIES,
    backoff: float = 0.5,
    retry_on_status: Iterable[int] = (500, 502, 503, 504, 429),
    **kwargs,
) -> httpx.Response:
    """
    재사용 AsyncClient로 외부 사이트에 요청.

    대상 사이트가 느리고 요청 빈도에 민감하므로 기본값은 재시도 없음(HTTP_RETRIES=0).
    재시도를 켜면 일시 장애 상태코드/네트워크 오류에 한해 선형 backoff로 재시도합니다.
    실패는 모두 FetchError로 변환합니다.
    """
    for attempt in range(retries + 1):
        try:
            response = await client.request(method.upper(), url, **kwargs)
            if response.status_code in retry_on_status and attempt < retries:
                await asyncio.sleep(backoff * (attempt + 1))
                continue
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code if e.response is not None else None
            if status in retry_on_status and attempt < retries:
                await asyncio.sleep(backoff * (attempt + 1))
                continue
            _log_failure(url, status, "status")
            raise FetchError(f"HTTP error! status: {status}", upstream_status=status)
        except httpx.TimeoutException as e:
            if attempt < retries:
                await asyncio.sleep(backoff * (attempt + 1))
                continue
            _log_failure(url, 504, repr(e))
            raise FetchError(f"タイムアウトしました: {url}")
        except httpx.TransportError as e:
            # 네트워크 오류는 단기 재시도
            if attempt < retries:
                await asyncio.sleep(backoff * (attempt + 1))
                continue
            _log_failure(url, None, repr(e))
            raise FetchError(f"接続に失敗しました: {url}")
    raise FetchError()
