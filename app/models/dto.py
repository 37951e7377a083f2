from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import List, Dict, Union, Any, Optional, Literal, Annotated
from enum import Enum

AdapterKind = Literal["table", "range", "priced"]
SlotDays = Literal["all", "weekday", "weekend", "weekdayNight_weekend"]

DAY_OF_WEEK_LABELS = ["月", "火", "水", "木", "金", "土", "日"]  # date.weekday() 순서
MINUTES_PER_DAY = 24 * 60


# --- Registry DTO (resources.json) ---
class PricedSlotDefinition(BaseModel):
    """CREA 요금제(슬롯 타입) 정의"""
    model_config = ConfigDict(frozen=True)

    slotType: str = Field(description="Slot type key (e.g. morning, weekdayDay)")
    name: str = Field(description="Slot display name (e.g. 朝活)")
    price: int = Field(description="Price per hour (JPY)")
    hours: str = Field(description="Human readable bookable hours")
    publicId: str = Field(description="Booking platform public id of this slot product")
    url: str = Field(description="Booking page URL of this slot product")
    days: SlotDays = Field("all", description="Applicability rule")


class ResourceDescriptor(BaseModel):
    """Static registry entry (read-only, loaded once at startup)"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: AdapterKind
    studioCount: int = 1
    url: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @property
    def sub_resource_id(self) -> Optional[str]:
        return self.params.get("subResourceId")

    @property
    def room_name(self) -> Optional[str]:
        return self.params.get("roomName")

    @property
    def floor(self) -> str:
        return self.params.get("floor", "")

    @property
    def size(self) -> str:
        return self.params.get("size", "")

    @property
    def priced_slots(self) -> List[PricedSlotDefinition]:
        return [PricedSlotDefinition(**s) for s in self.params.get("slots", [])]


class CatalogEntry(BaseModel):
    id: str
    name: str
    kind: AdapterKind
    studioCount: int


# --- Request DTO ---
class TimeWindow(BaseModel):
    """Half-open interval [start, end) in minutes of day"""
    start: int = Field(0, ge=0, le=MINUTES_PER_DAY)
    end: int = Field(MINUTES_PER_DAY, ge=0, le=MINUTES_PER_DAY)

    @model_validator(mode="after")
    def check_order(self) -> "TimeWindow":
        if self.start >= self.end:
            raise ValueError("start must be earlier than end")
        return self

    @property
    def is_full_day(self) -> bool:
        return self.start == 0 and self.end == MINUTES_PER_DAY


class AvailabilityRequest(BaseModel):
    """Request for checking availability"""
    resourceIds: List[str] = Field(..., min_length=1, description="Resource ids in requested order")
    date: str = Field(..., description="Target date (YYYY-MM-DD)")
    window: TimeWindow = Field(default_factory=TimeWindow)

    @field_validator("resourceIds", mode="before")
    @classmethod
    def split_ids(cls, v: Any) -> List[str]:
        """콤마 구분 문자열도 허용. 앞뒤 공백 제거 후 빈 값은 버림"""
        if isinstance(v, str):
            v = v.split(",")
        return [s.strip() for s in v if s and s.strip()]


# --- Table-style (BUZZ) ---
class StudioAvailability(BaseModel):
    studioNumber: int = Field(description="Sub-unit (studio) number, 1-based column index")
    isAvailable: bool


class TimeSlot(BaseModel):
    time: str = Field(description="Start time (HH:MM)")
    studios: List[StudioAvailability] = Field(default_factory=list)


# --- Range-style (福岡市民会館) ---
class SlotState(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    OUT_OF_WINDOW = "outOfWindow"
    UNKNOWN = "unknown"


class HallSlot(BaseModel):
    status: str = Field(description="Raw status glyph (○ ● × -)")
    state: SlotState = Field(description="Normalized status")
    date: str = Field(description="YYYY/MM/DD")
    slotId: str = Field(description="Fixed slot index 0..3")
    timeRange: str = Field(description="H:MM-H:MM")


class HallRoom(BaseModel):
    roomName: str
    slots: List[HallSlot] = Field(default_factory=list)


# --- Priced-slot style (CREA) ---
class PricedTimeSlot(BaseModel):
    time: str = Field(description="Start time (HH:MM)")
    available: bool


class PricedSlot(BaseModel):
    slotType: str
    slotName: str
    price: int
    hours: str = ""
    timeSlots: List[PricedTimeSlot] = Field(default_factory=list)


class PricedStudio(BaseModel):
    studioId: str
    studioName: str
    floor: str = ""
    size: str = ""
    date: str
    dayOfWeek: str
    slots: List[PricedSlot] = Field(default_factory=list)
    error: Optional[str] = None


# --- Normalized per-resource record (tagged union) ---
class _AvailabilityBase(BaseModel):
    resourceId: str
    resourceName: str
    date: str
    dayOfWeek: str
    error: Optional[str] = None


class TableAvailability(_AvailabilityBase):
    kind: Literal["table"] = "table"
    timeSlots: List[TimeSlot] = Field(default_factory=list)


class HallAvailability(_AvailabilityBase):
    kind: Literal["range"] = "range"
    rooms: List[HallRoom] = Field(default_factory=list)


class PricedAvailability(_AvailabilityBase):
    kind: Literal["priced"] = "priced"
    studios: List[PricedStudio] = Field(default_factory=list)


class UnknownAvailability(_AvailabilityBase):
    kind: Literal["unknown"] = "unknown"


NormalizedAvailability = Annotated[
    Union[TableAvailability, HallAvailability, PricedAvailability, UnknownAvailability],
    Field(discriminator="kind"),
]

# 크롤러 결과: 성공 시 레코드, 실패 시 Exception (로깅 후 error 레코드로 변환)
ResourceResult = Union[TableAvailability, HallAvailability, PricedAvailability, Exception]


# --- Full Response DTO ---
class AggregatedResponse(BaseModel):
    """Response for availability check"""
    date: str = Field(..., description="Checked date")
    dayOfWeek: str = Field(..., description="Japanese weekday label")
    window: TimeWindow = Field(default_factory=TimeWindow, description="Applied time window")
    results: List[NormalizedAvailability] = Field(..., description="Per-resource records in request order")
    resourceCatalog: List[CatalogEntry] = Field(default_factory=list, description="Full static registry")


# --- Delegate scraping service payloads ---
class CivicHallScrapeResponse(BaseModel):
    success: bool = True
    studioId: str = "fukuokacivichall"
    studioName: str = "福岡市民会館"
    date: str
    dayOfWeek: str
    rooms: List[HallRoom] = Field(default_factory=list)


class CreaScrapeResponse(BaseModel):
    success: bool = True
    studioId: str = "crea"
    studioName: str = "レンタルスタジオCREA"
    date: str
    dayOfWeek: str
    studios: List[PricedStudio] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    service: str
    availableCreaStudios: List[str] = Field(default_factory=list)
