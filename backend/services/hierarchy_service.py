"""
Hierarchy Service
Manages the organizational hierarchy built from each user's manager_id pointer
(Executive -> Senior Management -> Middle Management -> Team Leads -> Individual Contributors).

manager_id is authoritative. direct_reports and reporting_chain are caches kept
in sync by update_reporting_chain() and rebuilt by audit_hierarchy_caches().
Every walk carries a visited guard because acyclicity is never enforced on write.
"""
import logging
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pymongo.errors import PyMongoError

from config import (
    DEFAULT_HIERARCHY_DEPTH,
    MAX_HIERARCHY_DEPTH,
    MAX_CHAIN_LENGTH,
    PRUNE_SUBORDINATE_WALK_BY_CACHE,
)
from database import db
from models import CacheAuditResult, HierarchyNode, User
from services.directory_service import (
    get_user,
    get_active_user,
    get_direct_reports,
    get_company_users,
)
from services.errors import (
    UserNotFoundError,
    StoreUnavailableError,
    HierarchyValidationError,
)

logger = logging.getLogger(__name__)


def is_manager(user: dict) -> bool:
    """A user acts as a manager if their role says so or they have direct reports cached"""
    return user.get("role") == "manager" or bool(user.get("direct_reports"))


def clamp_depth(max_depth: Optional[int]) -> int:
    """Bound a requested tree depth to [0, MAX_HIERARCHY_DEPTH]"""
    if max_depth is None:
        max_depth = DEFAULT_HIERARCHY_DEPTH
    return max(0, min(int(max_depth), MAX_HIERARCHY_DEPTH))


async def build_hierarchy(manager_id: str, max_depth: Optional[int] = None) -> List[HierarchyNode]:
    """
    Build the reporting tree below a manager.

    Nodes at depth 0 are the manager's direct reports. The first two levels are
    flagged as expanded. Unknown managers and managers without reports give an
    empty list; only store failures raise.
    """
    depth_limit = clamp_depth(max_depth)

    async def build(user_id: str, depth: int, path: frozenset) -> List[HierarchyNode]:
        if depth >= depth_limit:
            return []

        nodes = []
        for report in await get_direct_reports(user_id):
            if report["id"] in path:
                logger.warning(f"Cycle in manager graph: {report['id']} already above {user_id}")
                continue
            children = await build(report["id"], depth + 1, path | {report["id"]})
            nodes.append(HierarchyNode(
                user=User.model_validate(report),
                children=children,
                level=depth,
                is_expanded=depth < 2
            ))
        return nodes

    return await build(manager_id, 0, frozenset([manager_id]))


async def get_all_subordinates(manager_id: str, prune_by_cache: Optional[bool] = None) -> List[dict]:
    """
    Get all subordinates (direct and indirect) under a manager.

    Each manager id is expanded at most once, so a malformed graph cannot loop.
    The manager is never part of the result and each subordinate appears once.
    A store failure aborts the walk; no partial team is returned.

    Args:
        manager_id: Root of the walk
        prune_by_cache: Only descend into subordinates for which is_manager() holds.
            Defaults to PRUNE_SUBORDINATE_WALK_BY_CACHE.

    Returns:
        List of user documents in breadth-first discovery order
    """
    if prune_by_cache is None:
        prune_by_cache = PRUNE_SUBORDINATE_WALK_BY_CACHE

    subordinates = []
    seen = {manager_id}
    visited = set()
    queue = deque([manager_id])

    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        for employee in await get_direct_reports(current_id):
            employee_id = employee["id"]
            if employee_id not in seen:
                seen.add(employee_id)
                subordinates.append(employee)
            elif employee_id in visited:
                logger.warning(f"Cycle in manager graph: {employee_id} reached again from {current_id}")
                continue

            if prune_by_cache and not is_manager(employee):
                continue
            queue.append(employee_id)

    return subordinates


async def get_team_user_ids(manager_id: str, include_self: bool = True) -> List[str]:
    """Get the ids of a manager's whole team (optionally including the manager)"""
    subordinates = await get_all_subordinates(manager_id)
    ids = [s["id"] for s in subordinates]
    return [manager_id] + ids if include_self else ids


async def get_manager_chain(user_id: str) -> List[dict]:
    """
    Get the chain of managers above a user by following manager_id pointers.
    Returns list from immediate manager to top.
    """
    chain = []
    visited = {user_id}
    user = await get_user(user_id)

    while user and user.get("manager_id") and len(chain) < MAX_CHAIN_LENGTH:
        manager_id = user["manager_id"]
        if manager_id in visited:
            logger.warning(f"Cycle in manager graph above {user_id} at {manager_id}")
            break
        visited.add(manager_id)

        manager = await get_user(manager_id)
        if not manager:
            break
        chain.append(manager)
        user = manager

    return chain


async def get_reporting_chain(user_id: str) -> List[str]:
    """Authoritative reporting chain: ancestor ids from the top down to the direct manager"""
    chain = await get_manager_chain(user_id)
    return [m["id"] for m in reversed(chain)]


async def _set_fields(user_id: str, update: dict, operation: str):
    try:
        await db.users.update_one({"id": user_id}, update)
    except PyMongoError as e:
        logger.error(f"Error during {operation} for {user_id}: {e}")
        raise StoreUnavailableError(operation, e)


async def _refresh_descendant_chains(root_id: str, root_chain: List[str]) -> int:
    """Rewrite reporting_chain for everyone below root_id. Returns number of users rewritten."""
    updated = 0
    visited = {root_id}
    queue = deque([(root_id, root_chain)])

    while queue:
        parent_id, parent_chain = queue.popleft()
        child_chain = parent_chain + [parent_id]
        for child in await get_direct_reports(parent_id, include_inactive=True):
            if child["id"] in visited:
                continue
            visited.add(child["id"])
            if child.get("reporting_chain") != child_chain:
                await _set_fields(child["id"], {"$set": {"reporting_chain": child_chain}}, "refresh_reporting_chain")
                updated += 1
            queue.append((child["id"], child_chain))

    return updated


async def update_reporting_chain(employee_id: str, new_manager_id: Optional[str] = None) -> dict:
    """
    Move an employee under a new manager (or detach them when new_manager_id is None).

    Steps run in order and are not atomic:
    1. set the employee's manager_id and reporting_chain
    2. remove the employee from the old manager's direct_reports
    3. add the employee to the new manager's direct_reports
    4. recompute reporting_chain for the employee's subordinates

    Raises:
        UserNotFoundError: employee does not exist
        HierarchyValidationError: manager missing, inactive, in another company,
            the employee themselves, or one of the employee's subordinates
        StoreUnavailableError: any store failure, at any step
    """
    employee = await get_user(employee_id)
    if not employee:
        raise UserNotFoundError(employee_id)

    old_manager_id = employee.get("manager_id")
    new_chain: List[str] = []

    if new_manager_id:
        if new_manager_id == employee_id:
            raise HierarchyValidationError("A user cannot report to themselves")

        manager = await get_active_user(new_manager_id)
        if not manager:
            raise HierarchyValidationError(f"Manager {new_manager_id} not found or inactive")
        if manager.get("company_id") != employee.get("company_id"):
            raise HierarchyValidationError("Manager must belong to the same company")

        manager_chain = await get_reporting_chain(new_manager_id)
        if employee_id in manager_chain:
            raise HierarchyValidationError(
                f"Circular reference: {new_manager_id} already reports to {employee_id}"
            )
        new_chain = manager_chain + [new_manager_id]

    await _set_fields(employee_id, {"$set": {
        "manager_id": new_manager_id or None,
        "reporting_chain": new_chain,
        "updated_at": datetime.now(timezone.utc).isoformat()
    }}, "update_reporting_chain")

    if old_manager_id and old_manager_id != new_manager_id:
        await _set_fields(old_manager_id, {"$pull": {"direct_reports": employee_id}}, "detach_direct_report")

    if new_manager_id:
        await _set_fields(new_manager_id, {"$addToSet": {"direct_reports": employee_id}}, "attach_direct_report")

    descendants_updated = await _refresh_descendant_chains(employee_id, new_chain)

    logger.info(
        f"Reporting line changed for {employee_id}: {old_manager_id} -> {new_manager_id} "
        f"({descendants_updated} descendant chains refreshed)"
    )

    return {
        "employee_id": employee_id,
        "manager_id": new_manager_id or None,
        "previous_manager_id": old_manager_id,
        "reporting_chain": new_chain,
        "descendants_updated": descendants_updated
    }


def _walk_up(user_id: str, users_by_id: Dict[str, dict]):
    """Follow manager_id pointers in memory. Returns (ancestors top-down, cycle or None)."""
    path = [user_id]
    current = users_by_id.get(user_id)

    while current and current.get("manager_id"):
        manager_id = current["manager_id"]
        if manager_id in path:
            return list(reversed(path[1:])), path[path.index(manager_id):]
        if manager_id not in users_by_id:
            break
        path.append(manager_id)
        current = users_by_id[manager_id]

    return list(reversed(path[1:])), None


async def audit_hierarchy_caches(company_id: str, apply: bool = False) -> CacheAuditResult:
    """
    Compare the direct_reports and reporting_chain caches of a company against
    the manager_id pointers, and optionally rewrite the stale ones.

    Cycles and dangling manager references are reported, never repaired; users
    in or below a cycle keep their current reporting_chain.
    """
    users = await get_company_users(company_id, include_inactive=True)
    users_by_id = {u["id"]: u for u in users}

    result = CacheAuditResult(company_id=company_id, applied=apply, users_checked=len(users))

    expected_reports: Dict[str, List[str]] = defaultdict(list)
    for user in users:
        manager_id = user.get("manager_id")
        if not manager_id:
            continue
        manager = users_by_id.get(manager_id)
        if not manager or not manager.get("is_active", True):
            result.dangling_managers.append({"user_id": user["id"], "manager_id": manager_id})
            continue
        if user.get("is_active", True):
            expected_reports[manager_id].append(user["id"])

    seen_cycles = set()
    updates: Dict[str, dict] = defaultdict(dict)

    for user in users:
        user_id = user["id"]

        cached_reports = set(user.get("direct_reports") or [])
        actual_reports = expected_reports.get(user_id, [])
        if cached_reports != set(actual_reports):
            result.stale_direct_reports.append({
                "user_id": user_id,
                "cached": sorted(cached_reports),
                "actual": sorted(actual_reports)
            })
            updates[user_id]["direct_reports"] = actual_reports

        chain, cycle = _walk_up(user_id, users_by_id)
        if cycle:
            key = frozenset(cycle)
            if key not in seen_cycles:
                seen_cycles.add(key)
                result.cycles.append(cycle)
                logger.warning(f"Cycle in manager graph of company {company_id}: {' -> '.join(cycle)}")
            continue

        if (user.get("reporting_chain") or []) != chain:
            result.stale_reporting_chains.append({
                "user_id": user_id,
                "cached": user.get("reporting_chain") or [],
                "actual": chain
            })
            updates[user_id]["reporting_chain"] = chain

    if apply:
        for user_id, fields in updates.items():
            await _set_fields(user_id, {"$set": fields}, "audit_hierarchy_caches")
        result.users_updated = len(updates)

    logger.info(
        f"Hierarchy cache audit for {company_id}: {len(result.stale_direct_reports)} stale direct_reports, "
        f"{len(result.stale_reporting_chains)} stale chains, {len(result.cycles)} cycles"
    )
    return result
