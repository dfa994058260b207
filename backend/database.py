"""
Database connection and utilities
"""
import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from config import MONGO_URL, DB_NAME

logger = logging.getLogger(__name__)

# MongoDB connection
client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

async def close_database():
    """Close database connection"""
    client.close()

async def create_indexes():
    """Create database indexes for the hierarchy and report lookups"""
    try:
        # Users collection indexes
        await db.users.create_index("id", unique=True)
        await db.users.create_index("manager_id")
        await db.users.create_index("company_id")
        await db.users.create_index([("company_id", 1), ("is_active", 1)])
        await db.users.create_index([("manager_id", 1), ("is_active", 1)])

        # Wellness reports collection indexes
        await db.mental_health_reports.create_index("employee_id")
        await db.mental_health_reports.create_index("company_id")
        await db.mental_health_reports.create_index([("created_at", -1)])
        await db.mental_health_reports.create_index([("employee_id", 1), ("company_id", 1)])

        logger.info("Database indexes created successfully")
    except PyMongoError as e:
        logger.error(f"Error creating indexes: {e}")
