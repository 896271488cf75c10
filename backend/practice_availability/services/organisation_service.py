"""
Organisation Settings Service
Timezone and week-start convention per organisation
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.config import get_settings
from practice_availability.models.availability import DayOfWeek
from practice_availability.models.common import utc_now
from practice_availability.models.organisation import SchedulingSettings
from practice_availability.utils.calendar import get_timezone
from practice_availability.utils.exceptions import translate_store_errors

logger = logging.getLogger(__name__)


class OrganisationSettingsService:
    """Keyed CRUD over the organisation_settings collection"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.organisation_settings

    def defaults(self, organisation_id: str) -> SchedulingSettings:
        """Settings used when an organisation has none stored"""
        settings = get_settings()
        week_start = settings.DEFAULT_WEEK_START_DAY.upper()
        if week_start not in DayOfWeek.__members__:
            week_start = DayOfWeek.MONDAY.value
        return SchedulingSettings(
            organisation_id=organisation_id,
            timezone=settings.DEFAULT_TIMEZONE,
            week_start_day=week_start
        )

    @translate_store_errors("get scheduling settings")
    async def get_scheduling_settings(self, organisation_id: str) -> SchedulingSettings:
        """Stored settings, or the configured defaults"""
        doc = await self.collection.find_one({"organisation_id": organisation_id})
        if not doc:
            return self.defaults(organisation_id)
        return SchedulingSettings(**doc)

    @translate_store_errors("set scheduling settings")
    async def set_scheduling_settings(
        self,
        organisation_id: str,
        timezone: str,
        week_start_day: DayOfWeek
    ) -> SchedulingSettings:
        """Validate the zone and replace the settings document"""
        get_timezone(timezone)

        existing = await self.collection.find_one({"organisation_id": organisation_id})
        settings = SchedulingSettings(
            organisation_id=organisation_id,
            timezone=timezone,
            week_start_day=week_start_day
        )
        if existing:
            settings.created_at = existing.get("created_at", settings.created_at)
        settings.updated_at = utc_now()

        await self.collection.replace_one(
            {"organisation_id": organisation_id},
            settings.to_mongo(),
            upsert=True
        )
        logger.info(
            f"Scheduling settings for {organisation_id}: "
            f"timezone={timezone}, week_start_day={settings.week_start_day}"
        )
        return settings
