"""
Base Availability Service
Recurring weekly template per (organisation, user)
"""

import logging
from typing import Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.models.availability import (
    BaseAvailability, DayTemplate, WEEK_ORDER
)
from practice_availability.models.common import utc_now
from practice_availability.utils.exceptions import InvalidSlotError, translate_store_errors
from practice_availability.utils.time_ranges import normalize

logger = logging.getLogger(__name__)


class BaseAvailabilityService:
    """
    Store for weekly templates.

    The whole template lives in one document keyed by (organisation, user),
    so a replace either lands completely or not at all.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.base_availability

    @staticmethod
    def _key(organisation_id: str, user_id: str) -> dict:
        return {"organisation_id": organisation_id, "user_id": user_id}

    @staticmethod
    def validate_entries(entries: Iterable[DayTemplate]) -> list[DayTemplate]:
        """Normalize every day's slots; one bad day rejects the whole set"""
        by_day = {}
        for entry in entries:
            if entry.day_of_week in by_day:
                raise InvalidSlotError(
                    f"{entry.day_of_week} appears more than once",
                    details={"day_of_week": entry.day_of_week}
                )
            try:
                slots = normalize(entry.slots)
            except InvalidSlotError as e:
                e.message = f"{entry.day_of_week}: {e.message}"
                raise
            by_day[entry.day_of_week] = DayTemplate(day_of_week=entry.day_of_week, slots=slots)

        return [by_day[day] for day in WEEK_ORDER if day in by_day]

    @translate_store_errors("set base availability")
    async def set_all_base_availability(
        self,
        organisation_id: str,
        user_id: str,
        entries: Iterable[DayTemplate]
    ) -> BaseAvailability:
        """
        Replace the entire weekly template.

        Validation runs before any write, so a rejected day leaves the
        stored template untouched. Repeating the call with the same entries
        stores the same days.
        """
        days = self.validate_entries(entries)

        template = BaseAvailability(
            organisation_id=organisation_id,
            user_id=user_id,
            days=days
        )
        existing = await self.collection.find_one(self._key(organisation_id, user_id))
        if existing:
            template.created_at = existing.get("created_at", template.created_at)
        template.updated_at = utc_now()

        await self.collection.replace_one(
            self._key(organisation_id, user_id),
            template.to_mongo(),
            upsert=True
        )
        logger.info(
            f"Base availability replaced for user {user_id} in {organisation_id} "
            f"({len(days)} open day(s))"
        )
        return template

    @translate_store_errors("get base availability")
    async def get_base_availability(self, organisation_id: str, user_id: str) -> BaseAvailability:
        """Stored template; a user with none gets an all-closed template"""
        doc = await self.collection.find_one(self._key(organisation_id, user_id))
        if not doc:
            return BaseAvailability(organisation_id=organisation_id, user_id=user_id)
        return BaseAvailability(**doc)

    @translate_store_errors("delete base availability")
    async def delete_base_availability(self, organisation_id: str, user_id: str) -> bool:
        """Remove the template (offboarding). Returns whether one existed."""
        result = await self.collection.delete_one(self._key(organisation_id, user_id))
        deleted = result.deleted_count > 0
        if deleted:
            logger.info(f"Base availability deleted for user {user_id} in {organisation_id}")
        return deleted
