"""
Occupancy Service
Concrete busy intervals (appointments, blocks, leave) per (organisation, user)
"""

import logging
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from practice_availability.config import get_settings
from practice_availability.models.availability import (
    Occupancy, OccupancyBatch, OccupancyBatchStatus, OccupancyCreate, OccupancySourceType
)
from practice_availability.models.common import generate_id, utc_now
from practice_availability.utils.calendar import ensure_utc
from practice_availability.utils.exceptions import (
    InvalidOccupancyError, StoreError, translate_store_errors
)

logger = logging.getLogger(__name__)

ROLLBACK_ATTEMPTS = 3


class OccupancyService:
    """
    Create/read store for occupancy records.

    Overlapping records are legal; the resolver unions them. Cancelling the
    originating booking is the booking workflow's job, not this store's.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.occupancies
        self.batches = db.occupancy_batches

    @staticmethod
    def build(
        organisation_id: str,
        user_id: str,
        start_time: datetime,
        end_time: datetime,
        source_type: OccupancySourceType,
        reference_id: Optional[str] = None,
        batch_id: Optional[str] = None
    ) -> Occupancy:
        """Validated, UTC-normalized occupancy document"""
        start_time = ensure_utc(start_time)
        end_time = ensure_utc(end_time)
        if start_time >= end_time:
            raise InvalidOccupancyError(
                f"startTime {start_time.isoformat()} must be before endTime {end_time.isoformat()}"
            )
        return Occupancy(
            organisation_id=organisation_id,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            source_type=source_type,
            reference_id=reference_id,
            batch_id=batch_id
        )

    @translate_store_errors("add occupancy")
    async def add_occupancy(
        self,
        organisation_id: str,
        user_id: str,
        start_time: datetime,
        end_time: datetime,
        source_type: OccupancySourceType,
        reference_id: Optional[str] = None
    ) -> Occupancy:
        """Insert one record; overlap with existing records is not checked"""
        occupancy = self.build(
            organisation_id, user_id, start_time, end_time, source_type, reference_id
        )
        await self.collection.insert_one(occupancy.to_mongo())
        logger.info(
            f"Occupancy {occupancy.occupancy_id} ({occupancy.source_type}) added for "
            f"user {user_id} in {organisation_id}"
        )
        return occupancy

    async def add_all_occupancies(
        self,
        organisation_id: str,
        user_id: str,
        items: list[OccupancyCreate]
    ) -> list[Occupancy]:
        """
        Insert a batch all-or-nothing.

        Every entry is validated before anything is written. The batch is
        registered as PENDING in occupancy_batches first, and its records
        stay invisible to get_occupancy until it is marked COMMITTED. If the
        write fails part way, the inserted records are removed and the batch
        is marked FAILED before StoreError is raised.
        """
        limit = get_settings().MAX_OCCUPANCY_BATCH
        if len(items) > limit:
            raise InvalidOccupancyError(
                f"Batch of {len(items)} occupancies exceeds the limit of {limit}",
                details={"count": len(items), "limit": limit}
            )

        batch_id = generate_id("batch")
        occupancies = []
        for index, item in enumerate(items):
            try:
                occupancies.append(self.build(
                    organisation_id,
                    user_id,
                    item.start_time,
                    item.end_time,
                    item.source_type,
                    item.reference_id,
                    batch_id
                ))
            except InvalidOccupancyError as e:
                e.message = f"Occupancy {index}: {e.message}"
                e.details = {"index": index}
                raise

        if not occupancies:
            return []

        batch = OccupancyBatch(
            batch_id=batch_id,
            organisation_id=organisation_id,
            user_id=user_id,
            count=len(occupancies)
        )
        try:
            await self.batches.insert_one(batch.to_mongo())
        except PyMongoError as e:
            logger.error(f"Could not register occupancy batch {batch_id}: {e}")
            raise StoreError("add occupancies") from e

        try:
            await self.collection.insert_many(
                [occupancy.to_mongo() for occupancy in occupancies],
                ordered=True
            )
            await self._set_batch_status(batch_id, OccupancyBatchStatus.COMMITTED)
        except PyMongoError as e:
            logger.error(f"Bulk occupancy insert failed for batch {batch_id}: {e}")
            await self._rollback_batch(batch_id)
            raise StoreError("add occupancies") from e

        logger.info(
            f"{len(occupancies)} occupancies added for user {user_id} in "
            f"{organisation_id} (batch {batch_id})"
        )
        return occupancies

    async def _set_batch_status(self, batch_id: str, status: OccupancyBatchStatus) -> None:
        await self.batches.update_one(
            {"batch_id": batch_id},
            {"$set": {"status": status.value, "updated_at": utc_now()}}
        )

    async def _rollback_batch(self, batch_id: str) -> None:
        """
        Remove what was written under batch_id and mark the batch FAILED.

        A batch that is not COMMITTED is never read back, so records left
        behind by a failed delete stay hidden until cleaned up.
        """
        for attempt in range(1, ROLLBACK_ATTEMPTS + 1):
            try:
                result = await self.collection.delete_many({"batch_id": batch_id})
                logger.warning(f"Rolled back {result.deleted_count} occupancies of batch {batch_id}")
                break
            except PyMongoError as e:
                logger.error(
                    f"Rollback of batch {batch_id} failed "
                    f"(attempt {attempt}/{ROLLBACK_ATTEMPTS}): {e}"
                )
        else:
            logger.error(f"Occupancies of batch {batch_id} left in store, hidden as uncommitted")

        try:
            await self._set_batch_status(batch_id, OccupancyBatchStatus.FAILED)
        except PyMongoError as e:
            logger.error(f"Could not mark batch {batch_id} as failed, it stays pending: {e}")

    async def _committed_batches(self, batch_ids: set[str]) -> set[str]:
        cursor = self.batches.find({
            "batch_id": {"$in": sorted(batch_ids)},
            "status": OccupancyBatchStatus.COMMITTED.value
        })
        docs = await cursor.to_list(length=None)
        return {doc["batch_id"] for doc in docs}

    @translate_store_errors("get occupancy")
    async def get_occupancy(
        self,
        organisation_id: str,
        user_id: str,
        start: datetime,
        end: datetime
    ) -> list[Occupancy]:
        """
        Every record whose interval intersects [start, end), ordered by start.

        Records from a bulk insert are skipped unless their batch committed.
        """
        start = ensure_utc(start)
        end = ensure_utc(end)
        if start >= end:
            return []

        cursor = self.collection.find({
            "organisation_id": organisation_id,
            "user_id": user_id,
            "start_time": {"$lt": end},
            "end_time": {"$gt": start}
        }).sort("start_time", 1)
        docs = await cursor.to_list(length=None)

        batch_ids = {doc["batch_id"] for doc in docs if doc.get("batch_id")}
        if batch_ids:
            committed = await self._committed_batches(batch_ids)
            docs = [doc for doc in docs if not doc.get("batch_id") or doc["batch_id"] in committed]

        return [Occupancy(**doc) for doc in docs]
