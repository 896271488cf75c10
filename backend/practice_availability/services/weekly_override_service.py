"""
Weekly Override Service
Sparse, week-specific exceptions to the base template
"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.models.availability import (
    DayOfWeek, DayTemplate, TimeSlot, WeeklyOverride, WEEK_ORDER
)
from practice_availability.models.common import utc_now
from practice_availability.models.organisation import SchedulingSettings
from practice_availability.services.organisation_service import OrganisationSettingsService
from practice_availability.utils.calendar import (
    day_bounds, get_timezone, to_local_date, week_start_for
)
from practice_availability.utils.exceptions import InvalidSlotError, translate_store_errors
from practice_availability.utils.time_ranges import normalize

logger = logging.getLogger(__name__)


def normalize_week_start(
    value: Union[date, datetime],
    settings: SchedulingSettings
) -> tuple[date, datetime]:
    """
    Canonical week key for any date or instant inside the week.

    Returns:
        (ISO week-start date, UTC instant of its local midnight)
    """
    tz = get_timezone(settings.timezone)
    local_date = to_local_date(value, tz)
    start = week_start_for(local_date, settings.week_start)
    return start, day_bounds(start, tz).start


class WeeklyOverrideService:
    """Store for per-week overrides keyed by (organisation, user, week start)"""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        settings_service: Optional[OrganisationSettingsService] = None
    ):
        self.db = db
        self.collection = db.weekly_overrides
        self.settings_service = settings_service or OrganisationSettingsService(db)

    @staticmethod
    def _key(organisation_id: str, user_id: str, week_start: date) -> dict:
        return {
            "organisation_id": organisation_id,
            "user_id": user_id,
            "week_start_date": week_start.isoformat()
        }

    async def _week_key(
        self,
        organisation_id: str,
        week_date: Union[date, datetime]
    ) -> tuple[date, datetime]:
        settings = await self.settings_service.get_scheduling_settings(organisation_id)
        return normalize_week_start(week_date, settings)

    @staticmethod
    def validate_overrides(overrides: dict[DayOfWeek, list[TimeSlot]]) -> list[DayTemplate]:
        """Normalize each overridden day; an empty list is valid and means closed"""
        days = {}
        for day, slots in overrides.items():
            day = DayOfWeek(day)
            try:
                days[day] = DayTemplate(day_of_week=day, slots=normalize(slots))
            except InvalidSlotError as e:
                e.message = f"{day.value}: {e.message}"
                raise
        return [days[day] for day in WEEK_ORDER if day in days]

    @translate_store_errors("add weekly override")
    async def add_weekly_availability_override(
        self,
        organisation_id: str,
        user_id: str,
        week_date: Union[date, datetime],
        overrides: dict[DayOfWeek, list[TimeSlot]]
    ) -> WeeklyOverride:
        """
        Replace the override document for the week containing week_date.

        Days left out of `overrides` fall back to the base template; the
        previous override for the week is discarded, not merged.
        """
        days = self.validate_overrides(overrides)
        week_start, week_start_at = await self._week_key(organisation_id, week_date)
        key = self._key(organisation_id, user_id, week_start)

        override = WeeklyOverride(
            organisation_id=organisation_id,
            user_id=user_id,
            week_start_date=week_start.isoformat(),
            week_start=week_start_at,
            days=days
        )
        existing = await self.collection.find_one(key)
        if existing:
            override.created_at = existing.get("created_at", override.created_at)
        override.updated_at = utc_now()

        await self.collection.replace_one(key, override.to_mongo(), upsert=True)
        logger.info(
            f"Weekly override stored for user {user_id} in {organisation_id}, "
            f"week {week_start.isoformat()} ({len(days)} day(s))"
        )
        return override

    @translate_store_errors("get weekly override")
    async def find_by_week_start(
        self,
        organisation_id: str,
        user_id: str,
        week_start: date
    ) -> Optional[WeeklyOverride]:
        """Exact-key lookup on an already normalized week start"""
        doc = await self.collection.find_one(self._key(organisation_id, user_id, week_start))
        if not doc:
            return None
        return WeeklyOverride(**doc)

    async def get_weekly_availability_override(
        self,
        organisation_id: str,
        user_id: str,
        week_date: Union[date, datetime]
    ) -> Optional[WeeklyOverride]:
        """Override for the week containing week_date, None when the week uses base"""
        week_start, _ = await self._week_key(organisation_id, week_date)
        return await self.find_by_week_start(organisation_id, user_id, week_start)

    @translate_store_errors("delete weekly override")
    async def delete_weekly_availability_override(
        self,
        organisation_id: str,
        user_id: str,
        week_date: Union[date, datetime]
    ) -> bool:
        """Revert the whole week to base. Returns whether an override existed."""
        week_start, _ = await self._week_key(organisation_id, week_date)
        result = await self.collection.delete_one(
            self._key(organisation_id, user_id, week_start)
        )
        deleted = result.deleted_count > 0
        if deleted:
            logger.info(
                f"Weekly override deleted for user {user_id} in {organisation_id}, "
                f"week {week_start.isoformat()}"
            )
        return deleted
