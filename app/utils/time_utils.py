import re
from typing import Tuple

TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

# 심야 표기(24:30, 25:00 ...)는 다음 날 새벽. 하루 기준 분으로 1440 이상이 됨
OVERNIGHT_HOUR_LIMIT = 48


def to_minutes(time_str: str, allow_overnight: bool = False) -> int:
    """
    '9:00' / '09:00' / '24:00' -> 하루 기준 분 단위

    allow_overnight=True 이면 '24:30', '25:00' 같은 심야 표기도 허용 (1440 이상 반환)
    """
    match = TIME_PATTERN.match(time_str or "")
    if not match:
        raise ValueError(f"invalid time: {time_str!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60:
        raise ValueError(f"invalid time: {time_str!r}")
    if allow_overnight:
        if hours >= OVERNIGHT_HOUR_LIMIT:
            raise ValueError(f"invalid time: {time_str!r}")
    elif hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"invalid time: {time_str!r}")
    return hours * 60 + minutes


def is_time_label(time_str: str) -> bool:
    """슬롯 시작 시각으로 쓸 수 있는 표기인지 (심야 표기 포함)"""
    try:
        to_minutes(time_str, allow_overnight=True)
    except ValueError:
        return False
    return True


def split_range(time_range: str) -> Tuple[int, int]:
    """'9:00-12:30' -> (540, 750)"""
    start, _, end = time_range.partition("-")
    if not end:
        raise ValueError(f"invalid time range: {time_range!r}")
    return to_minutes(start), to_minutes(end)


def pad_time(hour: str | int, minute: str | int) -> str:
    return f"{int(hour):02d}:{int(minute):02d}"
