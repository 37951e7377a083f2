from typing import List, Optional
from pydantic import ValidationError
from app.models.dto import AvailabilityRequest, TimeWindow
from app.validate.date_validator import validate_date
from app.exception.common.request_exception import InvalidRequestError
from app.utils.time_utils import to_minutes


def parse_window(window: Optional[str]) -> TimeWindow:
    """
    `window=<start,end>` 파라미터를 TimeWindow로 변환합니다.
    각 값은 "HH:MM" 또는 정수(분)를 허용합니다. 생략 시 하루 전체.
    """
    if window is None or not window.strip():
        return TimeWindow()

    parts = [p.strip() for p in window.split(",")]
    if len(parts) != 2 or not all(parts):
        raise InvalidRequestError(f"window の形式が不正です (start,end): {window}")

    try:
        start, end = (int(p) if p.isdigit() else to_minutes(p) for p in parts)
        return TimeWindow(start=start, end=end)
    except (ValueError, ValidationError):
        raise InvalidRequestError(f"window の範囲が不正です: {window}")


def validate_availability_request(
        resources: Optional[str],
        date: Optional[str],
        window: Optional[str] = None,
) -> AvailabilityRequest:
    """
    집계 요청 파라미터를 한 곳에서 검증합니다.
    • resources: 콤마 구분, 공백 제거 후 최소 1개
    • date: YYYY-MM-DD 실제 달력 날짜
    • window: 선택, start < end
    어느 하나라도 실패하면 크롤링을 시작하지 않고 400으로 응답합니다.
    """
    if not resources or not date:
        raise InvalidRequestError("resources と date パラメータが必要です")

    resource_ids: List[str] = [r.strip() for r in resources.split(",") if r.strip()]
    if not resource_ids:
        raise InvalidRequestError("少なくとも1つのスタジオを指定してください")

    target = validate_date(date)
    return AvailabilityRequest(
        resourceIds=resource_ids,
        date=target.isoformat(),
        window=parse_window(window),
    )
