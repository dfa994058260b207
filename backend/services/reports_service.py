"""
Reports Service
Hierarchy-filtered access to the mental_health_reports collection.

The report store answers "employee_id in [...]" queries for at most
REPORT_QUERY_BATCH_SIZE ids, so id sets are split into batches and merged.
A failing batch aborts the whole read; partial report sets are never returned.
"""
import logging
from datetime import timedelta
from typing import List, Optional

from pymongo.errors import PyMongoError

from config import (
    REPORT_QUERY_BATCH_SIZE,
    DEFAULT_REPORT_WINDOW_DAYS,
    MAX_REPORT_WINDOW_DAYS,
    PERSONAL_HISTORY_WINDOW_DAYS,
)
from database import db
from models import (
    MentalHealthReport,
    MetricTrend,
    PersonalHistory,
    ProgressTrends,
    SessionSummary,
)
from services.directory_service import get_active_user, get_company_users
from services.errors import StoreUnavailableError, UserNotFoundError
from services.hierarchy_service import get_team_user_ids
from services.permission_service import get_manager_permissions, has_company_wide_access
from utils.stats import filter_recent, parse_timestamp, round_one, utc_now

logger = logging.getLogger(__name__)

REPORT_PROJECTION = {"_id": 0}


def clamp_window(days: Optional[int]) -> int:
    if days is None:
        return DEFAULT_REPORT_WINDOW_DAYS
    return max(0, min(int(days), MAX_REPORT_WINDOW_DAYS))


async def fetch_reports_for_employees(
    employee_ids: List[str],
    company_id: Optional[str] = None,
    batch_size: Optional[int] = None
) -> List[dict]:
    """
    Fetch all reports owned by the given employees, batching the id lookups.

    Args:
        employee_ids: Owners to fetch reports for (duplicates are ignored)
        company_id: Also require this company_id when given
        batch_size: Ids per query, defaults to REPORT_QUERY_BATCH_SIZE

    Returns:
        Merged list of report documents, in store order per batch
    """
    if batch_size is None:
        batch_size = REPORT_QUERY_BATCH_SIZE
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    ids = list(dict.fromkeys(employee_ids))
    reports = []

    for start in range(0, len(ids), batch_size):
        batch = ids[start:start + batch_size]
        query = {"employee_id": {"$in": batch}}
        if company_id:
            query["company_id"] = company_id
        try:
            reports.extend(
                await db.mental_health_reports.find(query, REPORT_PROJECTION).to_list(None)
            )
        except PyMongoError as e:
            logger.error(f"Report batch {start // batch_size + 1} failed ({len(batch)} ids): {e}")
            raise StoreUnavailableError("fetch_reports_for_employees", e)

    return reports


async def fetch_company_reports(company_id: str) -> List[dict]:
    """Fetch every report filed in a company"""
    try:
        return await db.mental_health_reports.find(
            {"company_id": company_id},
            REPORT_PROJECTION
        ).to_list(None)
    except PyMongoError as e:
        logger.error(f"Error fetching reports for company {company_id}: {e}")
        raise StoreUnavailableError("fetch_company_reports", e)


async def get_accessible_employee_ids(viewer: dict, company_id: str) -> List[str]:
    """
    Resolve whose reports a viewer may read.
    - HR / Admin / Employer: every active user in their own company
    - Users with can_view_team_reports: self + all subordinates
    - Everyone else: only themselves
    """
    if has_company_wide_access(viewer) and viewer.get("company_id") == company_id:
        users = await get_company_users(company_id)
        return [u["id"] for u in users]

    permissions = get_manager_permissions(viewer)
    if permissions.can_view_team_reports:
        return await get_team_user_ids(viewer["id"], include_self=True)

    return [viewer["id"]]


async def get_hierarchy_filtered_reports(
    viewer_id: str,
    company_id: str,
    days: Optional[int] = DEFAULT_REPORT_WINDOW_DAYS
) -> List[dict]:
    """
    Get the wellness reports a viewer is allowed to see, newest first.

    Raises:
        UserNotFoundError: viewer does not resolve to an active user
        StoreUnavailableError: any directory or report read failed
    """
    viewer = await get_active_user(viewer_id)
    if not viewer:
        raise UserNotFoundError(viewer_id)

    days = clamp_window(days)
    accessible_ids = await get_accessible_employee_ids(viewer, company_id)
    reports = await fetch_reports_for_employees(accessible_ids, company_id)
    recent = filter_recent(reports, days)

    logger.info(
        f"Filtered reports for {viewer_id}: {len(recent)} of {len(reports)} "
        f"from {len(accessible_ids)} employees in last {days} days"
    )
    return recent


def _masked_employee(employee: dict) -> dict:
    """Employee summary attached to company report feeds"""
    employee_id = employee.get("id", "")
    return {
        "id": employee_id,
        "first_name": employee.get("first_name") or "Employee",
        "last_name": employee.get("last_name") or f"#{employee_id[:4]}",
        "email": employee.get("email") or f"employee-{employee_id[:8]}@company.com",
        "department": employee.get("department"),
        "hierarchy_level": employee.get("hierarchy_level"),
    }


async def get_recent_reports(company_id: str, days: Optional[int] = DEFAULT_REPORT_WINDOW_DAYS) -> List[dict]:
    """Company-wide report feed for the last N days with the filing employee attached"""
    days = clamp_window(days)
    employees = await get_company_users(company_id, include_inactive=True)
    employees_by_id = {e["id"]: e for e in employees}

    reports = filter_recent(await fetch_company_reports(company_id), days)

    feed = []
    for report in reports:
        employee = employees_by_id.get(report.get("employee_id"))
        feed.append({
            **report,
            "employee": _masked_employee(employee) if employee else None
        })
    return feed


def extract_key_topics(report: dict) -> List[str]:
    """Key topics of a report from its scores, at most three"""
    topics = []

    if report.get("stress_level", 0) >= 7:
        topics.append("High Stress")
    if report.get("anxiety_level", 0) >= 7:
        topics.append("Anxiety")
    if report.get("work_satisfaction", 10) <= 4:
        topics.append("Work Dissatisfaction")
    if report.get("work_life_balance", 10) <= 4:
        topics.append("Work-Life Balance")
    if report.get("sleep_quality", 10) <= 4:
        topics.append("Sleep Issues")
    if report.get("energy_level", 10) <= 4:
        topics.append("Low Energy")
    if report.get("confidence_level", 10) <= 4:
        topics.append("Low Confidence")
    if report.get("mood_rating", 10) <= 4:
        topics.append("Low Mood")

    # Positive topics
    if report.get("overall_wellness", 0) >= 8:
        topics.append("Good Wellness")
    if report.get("mood_rating", 0) >= 8:
        topics.append("Positive Mood")
    if report.get("energy_level", 0) >= 8:
        topics.append("High Energy")

    return topics[:3]


def _trend(current: float, previous: float) -> str:
    diff = current - previous
    if abs(diff) < 0.5:
        return "stable"
    return "improving" if diff > 0 else "declining"


def calculate_progress_trends(reports: List[dict], now=None) -> ProgressTrends:
    """Compare the last 7 days against the 7 days before for wellness, stress and mood"""
    if len(reports) < 2:
        return ProgressTrends()

    now = now or utc_now()
    seven_days_ago = now - timedelta(days=7)
    fourteen_days_ago = now - timedelta(days=14)

    recent, previous = [], []
    for report in reports:
        created = parse_timestamp(report.get("created_at"))
        if created is None:
            continue
        if created >= seven_days_ago:
            recent.append(report)
        elif created >= fourteen_days_ago:
            previous.append(report)

    def average(items, field):
        if not items:
            return 0
        return sum(r.get(field, 0) for r in items) / len(items)

    current_wellness, previous_wellness = average(recent, "overall_wellness"), average(previous, "overall_wellness")
    current_stress, previous_stress = average(recent, "stress_level"), average(previous, "stress_level")
    current_mood, previous_mood = average(recent, "mood_rating"), average(previous, "mood_rating")

    return ProgressTrends(
        wellness=MetricTrend(
            current=round_one(current_wellness),
            previous=round_one(previous_wellness),
            trend=_trend(current_wellness, previous_wellness)
        ),
        # Lower stress is better
        stress=MetricTrend(
            current=round_one(current_stress),
            previous=round_one(previous_stress),
            trend=_trend(previous_stress, current_stress)
        ),
        mood=MetricTrend(
            current=round_one(current_mood),
            previous=round_one(previous_mood),
            trend=_trend(current_mood, previous_mood)
        )
    )


async def get_personal_history(
    user_id: str,
    company_id: str,
    days: Optional[int] = PERSONAL_HISTORY_WINDOW_DAYS
) -> PersonalHistory:
    """A user's own recent reports, per-session summaries and progress trends"""
    days = clamp_window(days)
    try:
        reports = await db.mental_health_reports.find(
            {"employee_id": user_id, "company_id": company_id},
            REPORT_PROJECTION
        ).to_list(None)
    except PyMongoError as e:
        logger.error(f"Error fetching personal history for {user_id}: {e}")
        raise StoreUnavailableError("get_personal_history", e)

    recent = filter_recent(reports, days)

    sessions = []
    for report in recent:
        created = parse_timestamp(report.get("created_at"))
        sessions.append(SessionSummary(
            date=f"{created:%b} {created.day}",
            session_type=report.get("session_type"),
            duration=report.get("session_duration"),
            key_topics=extract_key_topics(report),
            mood_trend=report.get("mood_rating", 0),
            stress_trend=report.get("stress_level", 0)
        ))

    return PersonalHistory(
        recent_reports=[MentalHealthReport.model_validate(r) for r in recent],
        previous_sessions=sessions,
        progress_trends=calculate_progress_trends(recent)
    )
