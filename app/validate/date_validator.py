from datetime import date, datetime
from app.exception.common.request_exception import InvalidRequestError
from app.models.dto import DAY_OF_WEEK_LABELS


def validate_date(date_str: str | None) -> date:
    """YYYY-MM-DD 문자열을 검증하고 date 객체로 반환"""
    if not date_str or not date_str.strip():
        raise InvalidRequestError("date パラメータが必要です")
    try:
        return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidRequestError(f"date の形式が不正です (YYYY-MM-DD): {date_str}")


def day_of_week(target: date | str) -> str:
    """일본어 요일 한 글자 (日月火水木金土)"""
    if isinstance(target, str):
        target = datetime.strptime(target, "%Y-%m-%d").date()
    return DAY_OF_WEEK_LABELS[target.weekday()]
