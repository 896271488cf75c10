"""
Availability Models
Weekly templates, week-specific overrides, occupancy and derived time ranges
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from practice_availability.models.common import BaseDocument, CamelModel, generate_id

MINUTES_PER_DAY = 24 * 60


class DayOfWeek(str, Enum):
    """Weekday label used to bucket recurring slots"""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def index(self) -> int:
        """0=Monday .. 6=Sunday, same as date.weekday()"""
        return WEEK_ORDER.index(self)

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        return WEEK_ORDER[value.weekday()]


WEEK_ORDER = list(DayOfWeek)


class OccupancySourceType(str, Enum):
    """Origin of a busy interval"""
    APPOINTMENT = "APPOINTMENT"
    BLOCK = "BLOCK"
    LEAVE = "LEAVE"
    OTHER = "OTHER"


class CurrentStatus(str, Enum):
    """Status of a staff member at one instant"""
    AVAILABLE = "AVAILABLE"  # inside a free range
    BUSY = "BUSY"  # inside an open slot, but occupied
    OFF = "OFF"  # outside every open slot


def parse_clock(value: str) -> int:
    """HH:MM -> minutes since midnight ("24:00" is 1440)"""
    hours, minutes = value.split(":")
    hours, minutes = int(hours), int(minutes)
    if minutes > 59:
        raise ValueError(f"Invalid minutes in '{value}'")
    return hours * 60 + minutes


class TimeSlot(CamelModel):
    """Open interval within one local day, HH:MM on the wire"""
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$")  # HH:MM
    end_time: str = Field(pattern=r"^\d{2}:\d{2}$")

    @property
    def start_minute(self) -> int:
        return parse_clock(self.start_time)

    @property
    def end_minute(self) -> int:
        return parse_clock(self.end_time)


class DayTemplate(CamelModel):
    """Slots for one weekday"""
    day_of_week: DayOfWeek
    slots: list[TimeSlot] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True)


class BaseAvailability(BaseDocument):
    """
    Recurring weekly template for one (organisation, user)

    Stored as a single document so a replace is all-or-nothing.
    A day missing from `days` is closed.
    """
    organisation_id: str
    user_id: str
    days: list[DayTemplate] = Field(default_factory=list)

    def slots_for(self, day: DayOfWeek) -> list[TimeSlot]:
        for template in self.days:
            if template.day_of_week == day:
                return list(template.slots)
        return []

    def all_days(self) -> list[DayTemplate]:
        """Seven templates in week order, closed days as empty lists"""
        return [
            DayTemplate(day_of_week=day, slots=self.slots_for(day))
            for day in WEEK_ORDER
        ]


class WeeklyOverride(BaseDocument):
    """
    Sparse, week-specific replacement of template days

    `days` holds only the overridden weekdays. A present day with no slots
    means closed; an absent day falls back to the base template.
    """
    organisation_id: str
    user_id: str
    week_start_date: str  # ISO date of the organisation week start, the lookup key
    week_start: datetime  # UTC instant of local midnight on week_start_date
    days: list[DayTemplate] = Field(default_factory=list)

    def slots_for(self, day: DayOfWeek) -> Optional[list[TimeSlot]]:
        """Override slots for a weekday, None when the day is not overridden"""
        for template in self.days:
            if template.day_of_week == day:
                return list(template.slots)
        return None

    def as_map(self) -> dict[str, list[TimeSlot]]:
        return {template.day_of_week: list(template.slots) for template in self.days}


class Occupancy(BaseDocument):
    """Concrete busy interval in absolute time"""
    occupancy_id: str = Field(default_factory=lambda: generate_id("occ"))
    organisation_id: str
    user_id: str

    start_time: datetime
    end_time: datetime

    source_type: OccupancySourceType = OccupancySourceType.OTHER
    reference_id: Optional[str] = None  # appointment id, block id, ...
    batch_id: Optional[str] = None  # set on bulk inserts

    model_config = ConfigDict(use_enum_values=True)


class OccupancyBatchStatus(str, Enum):
    """Lifecycle of a bulk occupancy insert"""
    PENDING = "PENDING"
    COMMITTED = "COMMITTED"
    FAILED = "FAILED"


class OccupancyBatch(BaseDocument):
    """
    Ledger entry for a bulk insert

    Occupancies stamped with a batch id are only read back once their
    batch is COMMITTED.
    """
    batch_id: str
    organisation_id: str
    user_id: str
    count: int
    status: OccupancyBatchStatus = OccupancyBatchStatus.PENDING

    model_config = ConfigDict(use_enum_values=True)


class OccupancyCreate(BaseModel):
    """Validated occupancy input (absolute timestamps already parsed)"""
    start_time: datetime
    end_time: datetime
    source_type: OccupancySourceType = OccupancySourceType.OTHER
    reference_id: Optional[str] = None


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open absolute interval [start, end)"""
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True)
class DayAvailability:
    """Free ranges of one calendar date"""
    date: date
    day_of_week: DayOfWeek
    ranges: list[TimeRange]


# ============== API schemas ==============

class BaseAvailabilityRequest(CamelModel):
    """PUT body: full replacement of the weekly template"""
    availabilities: list[DayTemplate]


class BaseAvailabilityResponse(CamelModel):
    """Weekly template, all seven days"""
    organisation_id: str
    user_id: str
    days: list[DayTemplate]
    updated_at: Optional[datetime] = None


class WeeklyOverrideRequest(CamelModel):
    """POST body: replaces the whole override document for the week"""
    week_start_date: str = Field(description="Any ISO date or timestamp inside the week")
    overrides: dict[DayOfWeek, list[TimeSlot]]


class WeeklyOverrideResponse(CamelModel):
    """Override document for one organisation week"""
    organisation_id: str
    user_id: str
    week_start_date: str
    week_start: datetime
    overrides: dict[DayOfWeek, list[TimeSlot]]
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, override: WeeklyOverride) -> "WeeklyOverrideResponse":
        return cls(
            organisation_id=override.organisation_id,
            user_id=override.user_id,
            week_start_date=override.week_start_date,
            week_start=override.week_start,
            overrides=override.as_map(),
            updated_at=override.updated_at
        )


class OccupancyRequest(CamelModel):
    """Occupancy as received over HTTP (timestamps parsed by the router)"""
    start_time: str
    end_time: str
    source_type: OccupancySourceType
    reference_id: Optional[str] = None


class OccupancyBulkRequest(CamelModel):
    """All-or-nothing batch of occupancies for one user"""
    organisation_id: str
    user_id: str
    occupancies: list[OccupancyRequest]


class OccupancyResponse(CamelModel):
    """Public occupancy response"""
    occupancy_id: str
    organisation_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    source_type: OccupancySourceType
    reference_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TimeRangeResponse(CamelModel):
    """Absolute free range"""
    start: datetime
    end: datetime


class DayAvailabilityResponse(CamelModel):
    """Free ranges for one date of a week view"""
    date: date
    day_of_week: DayOfWeek
    ranges: list[TimeRangeResponse]


class CurrentStatusResponse(CamelModel):
    """Status at the moment of the request"""
    success: bool = True
    status: CurrentStatus
    at: datetime


class WorkingHoursResponse(CamelModel):
    """Free hours across the organisation week"""
    success: bool = True
    week_start_date: date
    hours: float
