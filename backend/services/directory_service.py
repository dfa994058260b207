"""
Directory Service
Read access to the users collection (the directory store).

The manager_id pointer on each user is the source of truth for the hierarchy.
direct_reports and reporting_chain are denormalized caches and may be stale.
"""
import logging
from typing import List, Optional

from pymongo.errors import PyMongoError

from database import db
from services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

USER_PROJECTION = {"_id": 0, "password": 0}


async def get_user(user_id: str) -> Optional[dict]:
    """Get a user by id, active or not. Returns None when absent."""
    if not user_id:
        return None
    try:
        return await db.users.find_one({"id": user_id}, USER_PROJECTION)
    except PyMongoError as e:
        logger.error(f"Error fetching user {user_id}: {e}")
        raise StoreUnavailableError("get_user", e)


async def get_active_user(user_id: str) -> Optional[dict]:
    """Get a user by id only if the record is active"""
    user = await get_user(user_id)
    if user and user.get("is_active", True):
        return user
    return None


async def get_direct_reports(manager_id: str, include_inactive: bool = False) -> List[dict]:
    """Get all active users whose manager_id points at this manager"""
    query = {"manager_id": manager_id}
    if not include_inactive:
        query["is_active"] = True
    try:
        return await db.users.find(query, USER_PROJECTION).to_list(None)
    except PyMongoError as e:
        logger.error(f"Error fetching direct reports for {manager_id}: {e}")
        raise StoreUnavailableError("get_direct_reports", e)


async def get_company_users(company_id: str, include_inactive: bool = False) -> List[dict]:
    """Get every (active) user in a company"""
    query = {"company_id": company_id}
    if not include_inactive:
        query["is_active"] = True
    try:
        return await db.users.find(query, USER_PROJECTION).to_list(None)
    except PyMongoError as e:
        logger.error(f"Error fetching users for company {company_id}: {e}")
        raise StoreUnavailableError("get_company_users", e)


def display_name(user: dict) -> str:
    """First and last name of a user, falling back to the id"""
    name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    return name or user.get("id", "Unknown")
