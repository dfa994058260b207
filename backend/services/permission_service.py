"""
Permission Service
Row-level visibility of wellness data and per-user capability profiles.

get_manager_permissions() is a pure function of the user document.
can_access_employee_data() reads the directory store; a denial is a normal
False result, while store failures raise StoreUnavailableError.
"""

import logging

from config import (
    ANALYTICS_MAX_HIERARCHY_LEVEL,
    UNRANKED_HIERARCHY_LEVEL,
    is_company_wide_role,
    is_managerial_role,
)
from models import ManagerPermissions
from services.directory_service import get_active_user
from services.hierarchy_service import get_reporting_chain

logger = logging.getLogger(__name__)


def has_company_wide_access(user: dict) -> bool:
    """HR, admin and employer accounts see every employee of their company"""
    return is_company_wide_role(user.get("role"))


def get_manager_permissions(user: dict) -> ManagerPermissions:
    """
    Derive the capability profile of a user from role and hierarchy flags.

    Args:
        user: User dict containing at least 'role'

    Returns:
        ManagerPermissions
    """
    role = user.get("role")
    hierarchy_level = user.get("hierarchy_level")
    if hierarchy_level is None:
        hierarchy_level = UNRANKED_HIERARCHY_LEVEL
    skip_level = bool(user.get("skip_level_access"))

    return ManagerPermissions(
        can_view_direct_reports=is_managerial_role(role),
        can_view_team_reports=bool(user.get("can_view_team_reports")),
        can_view_subordinate_teams=skip_level,
        can_approve_leaves=bool(user.get("can_approve_leaves")),
        can_manage_team_members=bool(user.get("can_manage_employees")),
        # Directors and above, or HR at any level
        can_access_analytics=hierarchy_level <= ANALYTICS_MAX_HIERARCHY_LEVEL or role == "hr",
        hierarchy_access_level=2 if skip_level else 1
    )


async def can_access_employee_data(viewer_id: str, target_id: str) -> bool:
    """
    Check if viewer can see target's wellness data.

    Rules are evaluated in order and the first match wins:
    - a user can always see their own data
    - HR, admin and employer can see everyone in their own company
    - the direct manager (target.manager_id) can see the target
    - a skip-level manager anywhere above the target can see the target
    - a department head can see everyone in the same department
    Missing or inactive users are denied.
    """
    if viewer_id == target_id:
        return True

    viewer = await get_active_user(viewer_id)
    if not viewer:
        return False

    target = await get_active_user(target_id)
    if not target:
        return False

    if has_company_wide_access(viewer) and viewer.get("company_id") == target.get("company_id"):
        return True

    if target.get("manager_id") == viewer_id:
        return True

    if viewer.get("skip_level_access"):
        chain = await get_reporting_chain(target_id)
        cached_chain = target.get("reporting_chain") or []
        if chain != cached_chain:
            logger.warning(f"Stale reporting_chain cache for {target_id}: {cached_chain} != {chain}")
        if viewer_id in chain:
            return True

    department = viewer.get("department")
    if viewer.get("is_department_head") and department and department == target.get("department"):
        return True

    return False
