"""
Hierarchy routes
Org tree, team membership, access checks and reporting-line changes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from config import MAX_HIERARCHY_DEPTH
from models import (
    AccessDecision,
    HierarchyNode,
    ManagerAssignment,
    ManagerPermissions,
    TeamStats,
    User,
)
from services.analytics_service import get_team_stats
from services.directory_service import get_active_user, get_user
from services.errors import UserNotFoundError
from services.hierarchy_service import (
    build_hierarchy,
    get_all_subordinates,
    get_manager_chain,
    update_reporting_chain,
)
from services.permission_service import (
    can_access_employee_data,
    get_manager_permissions,
    has_company_wide_access,
)
from utils.auth import get_current_user, check_employee_access, check_same_company

router = APIRouter(prefix="/hierarchy", tags=["Hierarchy"])


async def _load_manager(viewer: dict, manager_id: str) -> dict:
    """Resolve a manager the viewer is allowed to look below"""
    manager = await get_active_user(manager_id)
    if not manager:
        raise UserNotFoundError(manager_id, f"Manager not found: {manager_id}")
    check_same_company(viewer, manager.get("company_id"))
    await check_employee_access(viewer, manager_id)
    return manager


@router.get("/tree/{manager_id}", response_model=List[HierarchyNode])
async def get_team_tree(
    manager_id: str,
    max_depth: Optional[int] = Query(None, ge=0, le=MAX_HIERARCHY_DEPTH),
    current_user: dict = Depends(get_current_user)
):
    """Get the reporting tree below a manager"""
    await _load_manager(current_user, manager_id)
    return await build_hierarchy(manager_id, max_depth)


@router.get("/subordinates/{manager_id}", response_model=List[User])
async def get_subordinates(manager_id: str, current_user: dict = Depends(get_current_user)):
    """Get every direct and indirect subordinate of a manager"""
    await _load_manager(current_user, manager_id)
    return await get_all_subordinates(manager_id)


@router.get("/team-stats/{manager_id}", response_model=TeamStats)
async def get_manager_team_stats(manager_id: str, current_user: dict = Depends(get_current_user)):
    """Get 30-day wellness statistics for a manager's team"""
    await _load_manager(current_user, manager_id)
    return await get_team_stats(manager_id)


@router.get("/access/{target_id}", response_model=AccessDecision)
async def check_access(target_id: str, current_user: dict = Depends(get_current_user)):
    """Check whether the caller may view an employee's wellness data"""
    allowed = await can_access_employee_data(current_user["id"], target_id)
    return AccessDecision(viewer_id=current_user["id"], target_id=target_id, can_access=allowed)


@router.get("/permissions", response_model=ManagerPermissions)
async def get_my_permissions(current_user: dict = Depends(get_current_user)):
    """Get the caller's capability profile"""
    return get_manager_permissions(current_user)


@router.get("/chain/{user_id}", response_model=List[User])
async def get_chain(user_id: str, current_user: dict = Depends(get_current_user)):
    """Get the managers above a user, from the immediate manager to the top"""
    user = await get_user(user_id)
    if not user:
        raise UserNotFoundError(user_id)
    check_same_company(current_user, user.get("company_id"))
    await check_employee_access(current_user, user_id)
    return await get_manager_chain(user_id)


@router.put("/{employee_id}/manager")
async def assign_manager(
    employee_id: str,
    assignment: ManagerAssignment,
    current_user: dict = Depends(get_current_user)
):
    """Move an employee under a new manager, or detach them with manager_id = null"""
    permissions = get_manager_permissions(current_user)
    if not (has_company_wide_access(current_user) or permissions.can_manage_team_members):
        raise HTTPException(status_code=403, detail="Permission denied. You cannot manage team members.")

    employee = await get_user(employee_id)
    if not employee:
        raise UserNotFoundError(employee_id)
    if employee.get("company_id") != current_user.get("company_id"):
        raise HTTPException(status_code=403, detail="Permission denied. Company mismatch.")
    if not has_company_wide_access(current_user):
        await check_employee_access(current_user, employee_id)
        if assignment.manager_id:
            await check_employee_access(current_user, assignment.manager_id)

    result = await update_reporting_chain(employee_id, assignment.manager_id)
    return {"message": "Reporting line updated successfully", **result}
