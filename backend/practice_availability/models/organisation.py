"""
Organisation Scheduling Settings
Week-start convention and timezone used to anchor availability
"""

from datetime import datetime
from typing import Optional
from pydantic import ConfigDict

from practice_availability.models.common import BaseDocument, CamelModel
from practice_availability.models.availability import DayOfWeek


class SchedulingSettings(BaseDocument):
    """Per-organisation calendar conventions"""
    organisation_id: str
    timezone: str = "UTC"  # IANA name
    week_start_day: DayOfWeek = DayOfWeek.MONDAY

    model_config = ConfigDict(use_enum_values=True)

    @property
    def week_start(self) -> DayOfWeek:
        return DayOfWeek(self.week_start_day)


class SchedulingSettingsUpdate(CamelModel):
    """Schema for replacing scheduling settings"""
    timezone: str
    week_start_day: DayOfWeek = DayOfWeek.MONDAY


class SchedulingSettingsResponse(CamelModel):
    """Public scheduling settings"""
    organisation_id: str
    timezone: str
    week_start_day: DayOfWeek
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
