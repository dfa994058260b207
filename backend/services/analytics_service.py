"""
Analytics service for manager and company wellness dashboards
"""
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from config import (
    TEAM_STATS_WINDOW_DAYS,
    ANALYTICS_WINDOW_DAYS,
    TREND_DAYS,
    UNASSIGNED_DEPARTMENT,
    UNRANKED_HIERARCHY_LEVEL,
    HierarchyTier,
)
from models import (
    DailyTrend,
    DepartmentBreakdown,
    DepartmentPerformance,
    HierarchyAnalytics,
    HierarchyHealth,
    ReportsAnalytics,
    TeamStats,
    TeamWellnessComparison,
)
from services.directory_service import display_name, get_company_users, get_direct_reports
from services.hierarchy_service import get_all_subordinates, is_manager
from services.reports_service import fetch_company_reports, fetch_reports_for_employees
from utils.stats import filter_recent, parse_timestamp, round_average, utc_now

logger = logging.getLogger(__name__)


def _unique_departments(users: List[dict]) -> List[str]:
    departments = []
    for user in users:
        department = user.get("department")
        if department and department not in departments:
            departments.append(department)
    return departments


def _level_of(user: Optional[dict]) -> int:
    if not user or user.get("hierarchy_level") is None:
        return UNRANKED_HIERARCHY_LEVEL
    return user["hierarchy_level"]


async def get_team_stats(manager_id: str) -> TeamStats:
    """
    Wellness statistics over a manager's whole team for the last 30 days.

    A manager without subordinates gets all-zero stats.
    """
    direct_reports = await get_direct_reports(manager_id)
    subordinates = await get_all_subordinates(manager_id)

    if not subordinates:
        return TeamStats()

    reports = await fetch_reports_for_employees([s["id"] for s in subordinates])
    recent_reports = filter_recent(reports, TEAM_STATS_WINDOW_DAYS)

    return TeamStats(
        team_size=len(subordinates),
        direct_reports=len(direct_reports),
        total_subordinates=len(subordinates),
        avg_team_wellness=round_average(r.get("overall_wellness", 0) for r in recent_reports),
        high_risk_team_members=sum(1 for r in recent_reports if r.get("risk_level") == "high"),
        team_departments=_unique_departments(subordinates),
        recent_reports_count=len(recent_reports)
    )


async def get_hierarchy_analytics(company_id: str) -> HierarchyAnalytics:
    """Team, department and seniority-tier wellness comparison for company leadership"""
    users = await get_company_users(company_id)
    recent_reports = filter_recent(await fetch_company_reports(company_id), ANALYTICS_WINDOW_DAYS)

    # Team wellness comparison
    team_comparison = []
    for manager in (u for u in users if is_manager(u)):
        stats = await get_team_stats(manager["id"])
        name = display_name(manager)
        team_comparison.append(TeamWellnessComparison(
            manager_id=manager["id"],
            team_name=f"{name}'s Team",
            manager_name=name,
            avg_wellness=stats.avg_team_wellness,
            team_size=stats.team_size,
            high_risk_count=stats.high_risk_team_members
        ))

    # Group recent reports by owner once
    reports_by_owner: Dict[str, List[dict]] = {}
    for report in recent_reports:
        reports_by_owner.setdefault(report.get("employee_id"), []).append(report)

    def wellness_of(members: List[dict]) -> float:
        values = [
            r.get("overall_wellness", 0)
            for m in members
            for r in reports_by_owner.get(m["id"], [])
        ]
        return round_average(values)

    # Department performance
    department_performance = []
    for department in _unique_departments(users):
        members = [u for u in users if u.get("department") == department]
        department_performance.append(DepartmentPerformance(
            department=department,
            avg_wellness=wellness_of(members),
            employee_count=len(members),
            manager_count=sum(1 for m in members if is_manager(m))
        ))

    # Hierarchy health by level
    hierarchy_health = []
    for tier in HierarchyTier:
        members = [u for u in users if _level_of(u) == tier.value]
        if not members:
            continue
        hierarchy_health.append(HierarchyHealth(
            level=tier.value,
            level_name=tier.label,
            avg_wellness=wellness_of(members),
            employee_count=len(members)
        ))

    logger.info(
        f"Hierarchy analytics for {company_id}: {len(team_comparison)} teams, "
        f"{len(recent_reports)} recent reports"
    )
    return HierarchyAnalytics(
        team_wellness_comparison=team_comparison,
        department_performance=department_performance,
        hierarchy_health=hierarchy_health
    )


def generate_reports_analytics(
    reports: List[dict],
    employees_by_id: Optional[Dict[str, dict]] = None,
    now=None,
    trend_days: int = TREND_DAYS
) -> ReportsAnalytics:
    """
    Summarize a set of reports: averages, risk distribution, department
    breakdown and per-day trends for the last `trend_days` days.

    The department of a report comes from its attached "employee" summary,
    else from employees_by_id, else "Unassigned".
    """
    if not reports:
        return ReportsAnalytics()

    employees_by_id = employees_by_id or {}

    def department_of(report: dict) -> str:
        employee = report.get("employee") or employees_by_id.get(report.get("employee_id")) or {}
        return employee.get("department") or UNASSIGNED_DEPARTMENT

    # Department breakdown
    by_department: Dict[str, List[dict]] = {}
    for report in reports:
        by_department.setdefault(department_of(report), []).append(report)

    department_breakdown = {
        department: DepartmentBreakdown(
            count=len(items),
            avg_wellness=round_average(r.get("overall_wellness", 0) for r in items)
        )
        for department, items in by_department.items()
    }

    # Daily trends
    now = now or utc_now()
    by_day: Dict[str, List[dict]] = {}
    for report in reports:
        created = parse_timestamp(report.get("created_at"))
        if created is not None:
            by_day.setdefault(created.date().isoformat(), []).append(report)

    daily_trends = []
    for offset in range(trend_days - 1, -1, -1):
        day = (now - timedelta(days=offset)).date().isoformat()
        day_reports = by_day.get(day)
        if not day_reports:
            continue
        daily_trends.append(DailyTrend(
            date=day,
            wellness=round_average(r.get("overall_wellness", 0) for r in day_reports),
            stress=round_average(r.get("stress_level", 0) for r in day_reports),
            report_count=len(day_reports)
        ))

    return ReportsAnalytics(
        total_reports=len(reports),
        avg_wellness=round_average(r.get("overall_wellness", 0) for r in reports),
        avg_stress=round_average(r.get("stress_level", 0) for r in reports),
        avg_mood=round_average(r.get("mood_rating", 0) for r in reports),
        avg_energy=round_average(r.get("energy_level", 0) for r in reports),
        high_risk_count=sum(1 for r in reports if r.get("risk_level") == "high"),
        medium_risk_count=sum(1 for r in reports if r.get("risk_level") == "medium"),
        low_risk_count=sum(1 for r in reports if r.get("risk_level") == "low"),
        department_breakdown=department_breakdown,
        daily_trends=daily_trends
    )
