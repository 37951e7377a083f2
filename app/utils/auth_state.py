import json
import logging
from pathlib import Path
from typing import Optional

from app.core import config
from app.exception.crawler.crawler_exception import AuthUnavailableError

logger = logging.getLogger("app")


def load_auth_state(inline_json: Optional[str] = None, auth_path: Optional[str] = None) -> dict:
    """
    CREA 예약 페이지용 세션 상태(cookies + storage)를 읽습니다.

    우선순위: 인라인 JSON(CREA_AUTH_JSON) > 로컬 파일(CREA_AUTH_PATH)
    둘 다 없거나 깨져 있으면 AuthUnavailableError (CREA 어댑터만 실패)
    """
    inline_json = inline_json if inline_json is not None else config.CREA_AUTH_JSON
    auth_path = auth_path if auth_path is not None else config.CREA_AUTH_PATH

    if inline_json:
        try:
            return _validate(json.loads(inline_json))
        except (json.JSONDecodeError, TypeError) as e:
            logger.error({
                "errorCode": "CRAWLER-003",
                "message": "CREA_AUTH_JSON decode error",
                "error": repr(e),
            })
            raise AuthUnavailableError("認証情報(CREA_AUTH_JSON)の解析に失敗しました")

    path = Path(auth_path)
    if not path.is_file():
        raise AuthUnavailableError()

    try:
        with path.open(encoding="utf-8") as f:
            return _validate(json.load(f))
    except (OSError, json.JSONDecodeError, TypeError) as e:
        logger.error({
            "errorCode": "CRAWLER-003",
            "message": "auth file read error",
            "path": str(path),
            "error": repr(e),
        })
        raise AuthUnavailableError(f"{path.name} の読み込みに失敗しました")


def _validate(state) -> dict:
    if not isinstance(state, dict) or "cookies" not in state:
        raise TypeError("storage state must be an object with cookies")
    return state
