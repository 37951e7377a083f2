from typing import TypeVar, Generic, Optional, Any
from pydantic import BaseModel, ConfigDict

T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    """
    에러 응답 공통 포맷 (Envelope Pattern)

    집계 API의 성공 응답은 프론트엔드와 맞춘 평탄한 구조를 그대로 쓰고,
    요청 단위 실패(400/429/500)만 이 구조로 감싸서 반환합니다.

    Attributes:
        isSuccess (bool): 성공 여부
        code (str): 에러 코드 (예: "COMMON-002")
        message (str): 사용자 노출 가능한 메시지
        result (T | None): 에러 상세 정보 또는 null
        error (str | None): message와 같은 값. 위임 서버 클라이언트 및
            기존 프론트엔드가 읽는 `error` 키 호환용
    """
    isSuccess: bool
    code: str
    message: str
    result: Optional[T] = None
    error: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "isSuccess": False,
                    "code": "COMMON-002",
                    "message": "resources と date パラメータが必要です",
                    "result": None,
                    "error": "resources と date パラメータが必要です",
                }
            ]
        }
    )


def error_response(message: str, code: str = "ERROR", result: Optional[Any] = None) -> ApiResponse[Any]:
    """실패 응답 생성 팩토리 함수"""
    return ApiResponse(isSuccess=False, code=code, message=message, result=result, error=message)
