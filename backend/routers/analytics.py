"""
Analytics Router
Company leadership dashboards over the reporting hierarchy
"""
from typing import Optional
from fastapi import APIRouter, Depends

from models import HierarchyAnalytics
from services.analytics_service import get_hierarchy_analytics
from utils.auth import require_capability, check_same_company

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/hierarchy", response_model=HierarchyAnalytics)
async def get_company_hierarchy_analytics(
    company_id: Optional[str] = None,
    current_user: dict = Depends(require_capability("can_access_analytics", "view company analytics"))
):
    """Team, department and seniority-tier wellness comparison"""
    company_id = company_id or current_user.get("company_id")
    check_same_company(current_user, company_id)
    return await get_hierarchy_analytics(company_id)
