"""
Availability Resolver

Derives bookable time for a staff member from three stores:
- Base availability (weekly template)
- Weekly overrides (sparse per-week replacement of template days)
- Occupancy (busy intervals in absolute time)

Nothing here is persisted. Every call reads the stores once and computes
the answer in memory.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union
import logging

import pytz
from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.models.availability import (
    BaseAvailability, CurrentStatus, DayAvailability, DayOfWeek,
    Occupancy, TimeRange, TimeSlot, WeeklyOverride
)
from practice_availability.models.common import utc_now
from practice_availability.services.base_availability_service import BaseAvailabilityService
from practice_availability.services.occupancy_service import OccupancyService
from practice_availability.services.organisation_service import OrganisationSettingsService
from practice_availability.services.weekly_override_service import WeeklyOverrideService
from practice_availability.utils.calendar import (
    day_bounds, day_of_week, ensure_utc, get_timezone, local_date_of, slot_to_range,
    to_local_date, week_start_for
)
from practice_availability.utils.exceptions import InvalidWindowError
from practice_availability.utils.time_ranges import (
    clip, merge, split_into_windows, subtract, total_duration
)

logger = logging.getLogger(__name__)

MIN_WINDOW_MINUTES = 5
MAX_WINDOW_MINUTES = 720


def effective_slots(
    day: DayOfWeek,
    base: BaseAvailability,
    override: Optional[WeeklyOverride]
) -> list[TimeSlot]:
    """
    Slots that apply on a weekday.

    An override entry for the day wins outright, even when empty (closed);
    otherwise the base template applies. The two are never merged.
    """
    if override is not None:
        overridden = override.slots_for(day)
        if overridden is not None:
            return overridden
    return base.slots_for(day)


def absolute_ranges(target: date, slots: Iterable[TimeSlot], tz: pytz.tzinfo.BaseTzInfo) -> list[TimeRange]:
    """Local minute-of-day slots anchored to target as UTC ranges"""
    return sorted(slot_to_range(target, slot, tz) for slot in slots)


def resolve_free_ranges(
    target: date,
    open_ranges: list[TimeRange],
    occupancies: Iterable[Occupancy],
    tz: pytz.tzinfo.BaseTzInfo
) -> list[TimeRange]:
    """Open ranges minus the union of occupancy, clipped to the target date"""
    busy = merge(TimeRange(o.start_time, o.end_time) for o in occupancies)
    free = subtract(merge(open_ranges), busy)
    return clip(free, day_bounds(target, tz))


def status_at(
    instant: datetime,
    open_ranges: list[TimeRange],
    free_ranges: list[TimeRange]
) -> CurrentStatus:
    """AVAILABLE inside a free range, BUSY inside an occupied open slot, OFF otherwise"""
    if any(rng.contains(instant) for rng in free_ranges):
        return CurrentStatus.AVAILABLE
    if any(rng.contains(instant) for rng in open_ranges):
        return CurrentStatus.BUSY
    return CurrentStatus.OFF


class AvailabilityResolver:
    """Read-side composition of base, override and occupancy stores"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.settings_service = OrganisationSettingsService(db)
        self.base_service = BaseAvailabilityService(db)
        self.override_service = WeeklyOverrideService(db, self.settings_service)
        self.occupancy_service = OccupancyService(db)

    async def _load_week(
        self,
        organisation_id: str,
        user_id: str,
        target: date,
        week_start_day: DayOfWeek
    ) -> tuple[BaseAvailability, Optional[WeeklyOverride]]:
        base = await self.base_service.get_base_availability(organisation_id, user_id)
        override = await self.override_service.find_by_week_start(
            organisation_id, user_id, week_start_for(target, week_start_day)
        )
        return base, override

    async def _resolve_day(
        self,
        organisation_id: str,
        user_id: str,
        target: date,
        tz: pytz.tzinfo.BaseTzInfo,
        week_start_day: DayOfWeek
    ) -> tuple[list[TimeRange], list[TimeRange]]:
        """(open ranges, free ranges) for one local date"""
        base, override = await self._load_week(organisation_id, user_id, target, week_start_day)
        open_ranges = absolute_ranges(target, effective_slots(day_of_week(target), base, override), tz)

        window = day_bounds(target, tz)
        occupancies = await self.occupancy_service.get_occupancy(
            organisation_id, user_id, window.start, window.end
        )
        return open_ranges, resolve_free_ranges(target, open_ranges, occupancies, tz)

    async def get_final_availability_for_date(
        self,
        organisation_id: str,
        user_id: str,
        reference_date: Union[date, datetime]
    ) -> list[TimeRange]:
        """
        Open, unoccupied time on the date reference_date denotes.

        An empty list is a valid answer: nothing is open that day.
        """
        settings = await self.settings_service.get_scheduling_settings(organisation_id)
        tz = get_timezone(settings.timezone)
        target = to_local_date(reference_date, tz)

        _, free = await self._resolve_day(
            organisation_id, user_id, target, tz, settings.week_start
        )
        return free

    async def get_current_status(
        self,
        organisation_id: str,
        user_id: str,
        now: Optional[datetime] = None
    ) -> CurrentStatus:
        """Status at `now` (defaults to the current instant; naive means UTC)"""
        now = ensure_utc(now) if now else utc_now()
        settings = await self.settings_service.get_scheduling_settings(organisation_id)
        tz = get_timezone(settings.timezone)
        today = local_date_of(now, tz)

        open_ranges, free = await self._resolve_day(
            organisation_id, user_id, today, tz, settings.week_start
        )
        status = status_at(now, open_ranges, free)
        logger.debug(f"Status of user {user_id} in {organisation_id} at {now.isoformat()}: {status.value}")
        return status

    async def get_weekly_final_availability(
        self,
        organisation_id: str,
        user_id: str,
        reference_date: Union[date, datetime]
    ) -> list[DayAvailability]:
        """
        Free ranges for each date of the organisation week containing reference_date.

        Base, override and the week's occupancy are read once and shared by
        all seven days.
        """
        settings = await self.settings_service.get_scheduling_settings(organisation_id)
        tz = get_timezone(settings.timezone)
        week_start = week_start_for(to_local_date(reference_date, tz), settings.week_start)

        base, override = await self._load_week(organisation_id, user_id, week_start, settings.week_start)
        occupancies = await self.occupancy_service.get_occupancy(
            organisation_id,
            user_id,
            day_bounds(week_start, tz).start,
            day_bounds(week_start + timedelta(days=6), tz).end
        )

        week = []
        for offset in range(7):
            target = week_start + timedelta(days=offset)
            day = day_of_week(target)
            open_ranges = absolute_ranges(target, effective_slots(day, base, override), tz)
            week.append(DayAvailability(
                date=target,
                day_of_week=day,
                ranges=resolve_free_ranges(target, open_ranges, occupancies, tz)
            ))
        return week

    async def get_bookable_slots_for_date(
        self,
        organisation_id: str,
        user_id: str,
        reference_date: Union[date, datetime],
        window_minutes: int
    ) -> list[TimeRange]:
        """Consecutive windows of window_minutes cut from each free range"""
        if not MIN_WINDOW_MINUTES <= window_minutes <= MAX_WINDOW_MINUTES:
            raise InvalidWindowError(window_minutes, MIN_WINDOW_MINUTES, MAX_WINDOW_MINUTES)

        free = await self.get_final_availability_for_date(organisation_id, user_id, reference_date)
        return split_into_windows(free, timedelta(minutes=window_minutes))

    async def get_weekly_working_hours(
        self,
        organisation_id: str,
        user_id: str,
        reference_date: Union[date, datetime]
    ) -> tuple[date, float]:
        """(week start date, free hours across the organisation week)"""
        week = await self.get_weekly_final_availability(organisation_id, user_id, reference_date)
        total = total_duration(rng for day in week for rng in day.ranges)
        return week[0].date, total.total_seconds() / 3600
