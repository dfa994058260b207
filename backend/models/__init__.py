"""
Pydantic models for the application
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any, Union
from datetime import datetime


# ============== User Models ==============
class User(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = "employee"  # employee, manager, hr, admin, employer
    company_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool = True
    # Hierarchy fields
    manager_id: Optional[str] = None
    hierarchy_level: Optional[int] = None  # 0=Executive ... 4=Individual Contributor
    reporting_chain: List[str] = []  # Manager IDs from top down to the direct manager (cache)
    direct_reports: List[str] = []  # Direct subordinate IDs (cache)
    is_department_head: bool = False
    can_approve_leaves: bool = False
    can_view_team_reports: bool = False
    can_manage_employees: bool = False
    skip_level_access: bool = False

    @field_validator("reporting_chain", "direct_reports", mode="before")
    @classmethod
    def _none_as_empty_list(cls, value):
        return value or []

    @field_validator(
        "is_department_head", "can_approve_leaves", "can_view_team_reports",
        "can_manage_employees", "skip_level_access", mode="before"
    )
    @classmethod
    def _none_as_false(cls, value):
        return bool(value)


class ManagerAssignment(BaseModel):
    manager_id: Optional[str] = None  # None detaches the employee from any manager


# ============== Wellness Report Models ==============
class MentalHealthReport(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    employee_id: str
    company_id: str
    stress_level: int
    mood_rating: int
    energy_level: int
    work_satisfaction: int
    work_life_balance: int
    anxiety_level: int
    confidence_level: int
    sleep_quality: int
    overall_wellness: int
    risk_level: str  # low, medium, high
    comments: Optional[str] = None
    ai_analysis: Optional[str] = None
    sentiment_score: Optional[float] = None
    emotion_tags: Optional[List[str]] = None
    session_type: Optional[str] = None  # text, voice
    session_duration: Optional[int] = None
    created_at: Union[datetime, str]
    updated_at: Optional[Union[datetime, str]] = None


# ============== Hierarchy Models ==============
class HierarchyNode(BaseModel):
    user: User
    children: List[HierarchyNode] = []
    level: int
    is_expanded: bool = False


class TeamStats(BaseModel):
    team_size: int = 0
    direct_reports: int = 0
    total_subordinates: int = 0
    avg_team_wellness: float = 0
    high_risk_team_members: int = 0
    team_departments: List[str] = []
    recent_reports_count: int = 0


class ManagerPermissions(BaseModel):
    can_view_direct_reports: bool
    can_view_team_reports: bool
    can_view_subordinate_teams: bool
    can_approve_leaves: bool
    can_manage_team_members: bool
    can_access_analytics: bool
    hierarchy_access_level: int  # How many levels down the permission reaches


class AccessDecision(BaseModel):
    viewer_id: str
    target_id: str
    can_access: bool


class CacheAuditResult(BaseModel):
    company_id: str
    applied: bool
    users_checked: int = 0
    stale_direct_reports: List[Dict[str, Any]] = []
    stale_reporting_chains: List[Dict[str, Any]] = []
    dangling_managers: List[Dict[str, Any]] = []
    cycles: List[List[str]] = []
    users_updated: int = 0


# ============== Analytics Models ==============
class TeamWellnessComparison(BaseModel):
    manager_id: str
    team_name: str
    manager_name: str
    avg_wellness: float
    team_size: int
    high_risk_count: int


class DepartmentPerformance(BaseModel):
    department: str
    avg_wellness: float
    employee_count: int
    manager_count: int


class HierarchyHealth(BaseModel):
    level: int
    level_name: str
    avg_wellness: float
    employee_count: int


class HierarchyAnalytics(BaseModel):
    team_wellness_comparison: List[TeamWellnessComparison] = []
    department_performance: List[DepartmentPerformance] = []
    hierarchy_health: List[HierarchyHealth] = []


class DepartmentBreakdown(BaseModel):
    count: int = 0
    avg_wellness: float = 0


class DailyTrend(BaseModel):
    date: str  # YYYY-MM-DD
    wellness: float
    stress: float
    report_count: int


class ReportsAnalytics(BaseModel):
    total_reports: int = 0
    avg_wellness: float = 0
    avg_stress: float = 0
    avg_mood: float = 0
    avg_energy: float = 0
    high_risk_count: int = 0
    medium_risk_count: int = 0
    low_risk_count: int = 0
    department_breakdown: Dict[str, DepartmentBreakdown] = {}
    daily_trends: List[DailyTrend] = []


class RecentReportsResponse(BaseModel):
    reports: List[Dict[str, Any]] = []
    analytics: ReportsAnalytics = Field(default_factory=ReportsAnalytics)


# ============== Personal History Models ==============
class MetricTrend(BaseModel):
    current: float = 0
    previous: float = 0
    trend: str = "stable"  # improving, stable, declining


class ProgressTrends(BaseModel):
    wellness: MetricTrend = Field(default_factory=MetricTrend)
    stress: MetricTrend = Field(default_factory=MetricTrend)
    mood: MetricTrend = Field(default_factory=MetricTrend)


class SessionSummary(BaseModel):
    date: str
    session_type: Optional[str] = None
    duration: Optional[int] = None
    key_topics: List[str] = []
    mood_trend: int
    stress_trend: int


class PersonalHistory(BaseModel):
    recent_reports: List[MentalHealthReport] = []
    previous_sessions: List[SessionSummary] = []
    progress_trends: ProgressTrends = Field(default_factory=ProgressTrends)


HierarchyNode.model_rebuild()
