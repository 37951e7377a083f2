"""
시간대 필터

이미 가져온 레코드를 사용자가 지정한 [start, end) 구간(하루 기준 분)으로 잘라낸 사본을 만듭니다.
시간대만 바뀐 경우 다시 크롤링하지 않고 이 필터만 다시 적용하면 됩니다.

- 시점 슬롯 (BUZZ의 time, CREA의 time): start <= t < end (심야 표기 24:30 등은 1440 이상)
- 구간 슬롯 (시민회관 timeRange): rangeEnd > start and rangeStart < end (겹치면 유지)
"""
import logging
from app.models.dto import (
    TimeWindow, TableAvailability, HallAvailability, PricedAvailability,
)
from app.utils.time_utils import to_minutes, split_range

logger = logging.getLogger("app")


def point_in_window(time_str: str, window: TimeWindow) -> bool:
    t = to_minutes(time_str, allow_overnight=True)
    return window.start <= t < window.end


def range_overlaps_window(time_range: str, window: TimeWindow) -> bool:
    range_start, range_end = split_range(time_range)
    return range_end > window.start and range_start < window.end


def filter_by_window(record, window: TimeWindow):
    """레코드 종류(kind)에 맞는 방식으로 필터링한 사본을 반환. 원본은 수정하지 않음"""
    if window.is_full_day:
        return record

    if isinstance(record, TableAvailability):
        return record.model_copy(update={
            "timeSlots": [s for s in record.timeSlots if point_in_window(s.time, window)]
        })

    if isinstance(record, HallAvailability):
        rooms = [
            room.model_copy(update={
                "slots": [s for s in room.slots if range_overlaps_window(s.timeRange, window)]
            })
            for room in record.rooms
        ]
        return record.model_copy(update={"rooms": rooms})

    if isinstance(record, PricedAvailability):
        studios = []
        for studio in record.studios:
            slots = [
                slot.model_copy(update={
                    "timeSlots": [ts for ts in slot.timeSlots if point_in_window(ts.time, window)]
                })
                for slot in studio.slots
            ]
            studios.append(studio.model_copy(update={"slots": slots}))
        return record.model_copy(update={"studios": studios})

    # UnknownAvailability 등 슬롯이 없는 레코드
    return record
