"""
Wellness report routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from config import (
    DEFAULT_REPORT_WINDOW_DAYS,
    MAX_REPORT_WINDOW_DAYS,
    PERSONAL_HISTORY_WINDOW_DAYS,
)
from models import PersonalHistory, RecentReportsResponse
from services.analytics_service import generate_reports_analytics
from services.reports_service import (
    get_hierarchy_filtered_reports,
    get_personal_history,
    get_recent_reports,
)
from utils.auth import get_current_user, require_company_wide_access, check_same_company

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/filtered", response_model=List[dict])
async def get_filtered_reports(
    company_id: Optional[str] = None,
    days: int = Query(DEFAULT_REPORT_WINDOW_DAYS, ge=0, le=MAX_REPORT_WINDOW_DAYS),
    current_user: dict = Depends(get_current_user)
):
    """Get every report the caller may see, newest first"""
    company_id = company_id or current_user.get("company_id")
    check_same_company(current_user, company_id)
    return await get_hierarchy_filtered_reports(current_user["id"], company_id, days)


@router.get("/recent", response_model=RecentReportsResponse)
async def get_company_recent_reports(
    company_id: Optional[str] = None,
    days: int = Query(DEFAULT_REPORT_WINDOW_DAYS, ge=0, le=MAX_REPORT_WINDOW_DAYS),
    current_user: dict = Depends(require_company_wide_access("view company reports"))
):
    """Company report feed with summary analytics (HR / admin / employer)"""
    company_id = company_id or current_user.get("company_id")
    check_same_company(current_user, company_id)

    reports = await get_recent_reports(company_id, days)
    return RecentReportsResponse(
        reports=reports,
        analytics=generate_reports_analytics(reports)
    )


@router.get("/history", response_model=PersonalHistory)
async def get_my_history(
    days: int = Query(PERSONAL_HISTORY_WINDOW_DAYS, ge=0, le=MAX_REPORT_WINDOW_DAYS),
    current_user: dict = Depends(get_current_user)
):
    """Get the caller's own report history and progress trends"""
    return await get_personal_history(current_user["id"], current_user.get("company_id"), days)
