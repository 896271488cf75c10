"""
MongoDB Database Connection Management
Uses Motor for async MongoDB operations
"""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure
import logging

from practice_availability.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls) -> None:
        """Establish connection to MongoDB"""
        settings = get_settings()
        try:
            cls.client = AsyncIOMotorClient(
                settings.MONGO_URL,
                maxPoolSize=50,
                minPoolSize=10,
                serverSelectionTimeoutMS=5000,
                tz_aware=True
            )
            # Verify connection
            await cls.client.admin.command("ping")
            cls.db = cls.client[settings.DB_NAME]
            logger.info(f"Connected to MongoDB: {settings.DB_NAME}")

            await create_indexes(cls.db)

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    @classmethod
    async def disconnect(cls) -> None:
        """Close MongoDB connection"""
        if cls.client:
            cls.client.close()
            logger.info("Disconnected from MongoDB")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Get database instance"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the keyed indexes every store relies on"""
    # One template document per (organisation, user)
    await db.base_availability.create_index(
        [("organisation_id", 1), ("user_id", 1)], unique=True
    )

    # One override document per (organisation, user, week)
    await db.weekly_overrides.create_index(
        [("organisation_id", 1), ("user_id", 1), ("week_start_date", 1)],
        unique=True
    )

    # Occupancy range queries and batch rollback
    await db.occupancies.create_index("occupancy_id", unique=True)
    await db.occupancies.create_index([
        ("organisation_id", 1),
        ("user_id", 1),
        ("start_time", 1),
        ("end_time", 1)
    ])
    await db.occupancies.create_index("batch_id", sparse=True)
    await db.occupancies.create_index("reference_id", sparse=True)
    await db.occupancy_batches.create_index("batch_id", unique=True)

    await db.organisation_settings.create_index("organisation_id", unique=True)

    logger.info("Database indexes created successfully")


def get_database() -> AsyncIOMotorDatabase:
    """Dependency injection for database access"""
    return Database.get_db()
