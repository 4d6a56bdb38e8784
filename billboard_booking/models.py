from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict


class CampaignType(str, Enum):
    SINGLE_DAY = "single-day"
    MULTI_DAY = "multi-day"


class Stage(str, Enum):
    CAMPAIGN_TYPE = "campaign-type"
    CALENDAR = "calendar"
    DETAILS = "details"
    CONFIRMATION = "confirmation"


class Resource(BaseModel):
    id: str
    hourly_rate: float
    impressions: int = 0  # per day
    name: str | None = None


class Booking(BaseModel):
    id: str | None = None
    resource_id: str
    date: str  # ISO format YYYY-MM-DD, local wall clock
    start_hour: int  # inclusive
    end_hour: int  # exclusive
    status: str = "confirmed"
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    total_amount: float | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def covers(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


class BookingDraft(BaseModel):
    resource_id: str
    date: str
    start_hour: int
    end_hour: int
    customer_name: str
    customer_email: str
    customer_phone: str
    status: str = "confirmed"
    total_amount: float
    notes: str = ""


class Customer(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""


class Interval(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int
    end: int  # exclusive

    @property
    def duration(self) -> int:
        return self.end - self.start

    def hours(self) -> List[int]:
        return list(range(self.start, self.end))


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int
    is_booked: bool = False
    booking: Booking | None = None


class DateSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    hours: FrozenSet[int] = frozenset()
    slots: List[TimeSlot] | None = None  # None until availability is resolved
    availability_confirmed: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.slots is not None

    def sorted_hours(self) -> List[int]:
        return sorted(self.hours)

    def booked_hours(self) -> FrozenSet[int]:
        return frozenset(s.hour for s in self.slots or [] if s.is_booked)

    def free_hours(self) -> FrozenSet[int]:
        return frozenset(s.hour for s in self.slots or [] if not s.is_booked)


SelectionMap = Dict[str, DateSelection]


class SelectionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: Stage = Stage.CAMPAIGN_TYPE
    campaign_type: CampaignType | None = None
    selections: SelectionMap = {}
    error: str | None = None


class StoreResult(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    conflict: bool = False  # the store rejected an overlapping booking


class DateSummary(BaseModel):
    date: str
    intervals: List[Interval]
    hours: int
    amount: float


class CampaignSummary(BaseModel):
    days: List[DateSummary]
    total_hours: int
    total_amount: float
    projected_impressions: int
