"""
RideTrust Database Module

MongoDB connection management.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from ridetrust.config import settings


# =============================================================================
# MongoDB Connection
# =============================================================================

class MongoDB:
    """MongoDB connection manager."""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None


mongo = MongoDB()


async def init_mongodb():
    """Initialize MongoDB connection and create indexes."""
    mongo.client = AsyncIOMotorClient(settings.mongodb_uri, tz_aware=True)
    mongo.db = mongo.client[settings.mongodb_database]

    await mongo.db.users.create_index("uid", unique=True)

    await mongo.db.rides.create_index("rideId", unique=True)
    await mongo.db.rides.create_index("riderUid")
    await mongo.db.rides.create_index("passengerUid")

    # One rating per rater per ride; the key is never reused
    await mongo.db.ratings.create_index(
        [("rideId", ASCENDING), ("raterUid", ASCENDING)], unique=True
    )
    await mongo.db.ratings.create_index("ratedUid")
    await mongo.db.ratings.create_index("createdAt")

    await mongo.db.trust_scores.create_index("userUid", unique=True)
    await mongo.db.trust_scores.create_index([("total", DESCENDING)])

    await mongo.db.admin_audit_log.create_index("id", unique=True)
    await mongo.db.admin_audit_log.create_index([("createdAt", DESCENDING)])
    await mongo.db.admin_audit_log.create_index("adminUid")
    await mongo.db.admin_audit_log.create_index([
        ("entityType", ASCENDING),
        ("entityId", ASCENDING),
    ])

    await mongo.db.notifications.create_index("notificationId", unique=True)
    await mongo.db.notifications.create_index("userId")


async def close_mongodb():
    """Close MongoDB connection."""
    if mongo.client:
        mongo.client.close()


def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    if mongo.db is None:
        raise RuntimeError("Database not initialized")
    return mongo.db
