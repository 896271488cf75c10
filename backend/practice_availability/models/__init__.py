"""
Data models for availability resolution
"""

from practice_availability.models.common import (
    BaseDocument, CamelModel, generate_id, utc_now
)
from practice_availability.models.availability import (
    DayOfWeek, TimeSlot, DayTemplate, BaseAvailability,
    WeeklyOverride, Occupancy, OccupancyBatch, OccupancyBatchStatus,
    OccupancySourceType,
    TimeRange, CurrentStatus
)
from practice_availability.models.organisation import SchedulingSettings

__all__ = [
    "BaseDocument",
    "CamelModel",
    "generate_id",
    "utc_now",
    "DayOfWeek",
    "TimeSlot",
    "DayTemplate",
    "BaseAvailability",
    "WeeklyOverride",
    "Occupancy",
    "OccupancyBatch",
    "OccupancyBatchStatus",
    "OccupancySourceType",
    "TimeRange",
    "CurrentStatus",
    "SchedulingSettings",
]
