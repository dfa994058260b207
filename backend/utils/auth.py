"""
Request identity utilities

Authentication happens upstream; the gateway forwards the authenticated user
id in the X-User-Id header. These dependencies resolve it to an active user
and enforce capability checks on top of the permission service.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from services.directory_service import get_active_user
from services.permission_service import (
    can_access_employee_data,
    get_manager_permissions,
    has_company_wide_access,
)

USER_ID_HEADER = "X-User-Id"


async def get_current_user(x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)) -> dict:
    """Get the calling user from the forwarded identity header"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing user identity")

    user = await get_active_user(x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_capability(capability: str, action_name: Optional[str] = None):
    """
    Create a FastAPI dependency that checks one ManagerPermissions flag.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(
            current_user: dict = Depends(require_capability("can_access_analytics", "view analytics"))
        ):
            pass
    """
    if action_name is None:
        action_name = capability.replace("can_", "").replace("_", " ")

    async def capability_checker(current_user: dict = Depends(get_current_user)):
        permissions = get_manager_permissions(current_user)
        if not getattr(permissions, capability):
            raise HTTPException(
                status_code=403,
                detail=f"Permission denied. You do not have permission to {action_name}."
            )
        return current_user

    return capability_checker


def require_company_wide_access(action_name: str = "perform this action"):
    """Dependency allowing only HR, admin and employer accounts"""
    async def role_checker(current_user: dict = Depends(get_current_user)):
        if not has_company_wide_access(current_user):
            raise HTTPException(
                status_code=403,
                detail=f"Permission denied. Only HR, admin or employer accounts can {action_name}."
            )
        return current_user
    return role_checker


def check_same_company(user: dict, company_id: str):
    """Reject requests for another company's data"""
    if user.get("company_id") != company_id:
        raise HTTPException(status_code=403, detail="Permission denied. Company mismatch.")


async def check_employee_access(viewer: dict, target_id: str):
    """Raise 403 unless the viewer may see the target's wellness data"""
    if not await can_access_employee_data(viewer["id"], target_id):
        raise HTTPException(
            status_code=403,
            detail="Permission denied. You cannot view this employee's data."
        )
