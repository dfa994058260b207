"""
Application configuration and constants
"""
import os
from enum import IntEnum
from pathlib import Path
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB configuration
MONGO_URL = os.environ['MONGO_URL']
DB_NAME = os.environ['DB_NAME']


def positive_int_env(name: str, default: int) -> int:
    """Read an integer setting that must be at least 1"""
    value = int(os.environ.get(name, str(default)))
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


# Store limits
# Maximum number of ids in a single "employee_id in [...]" report query
REPORT_QUERY_BATCH_SIZE = positive_int_env('REPORT_QUERY_BATCH_SIZE', 10)

# Hierarchy traversal
DEFAULT_HIERARCHY_DEPTH = int(os.environ.get('DEFAULT_HIERARCHY_DEPTH', '3'))
MAX_HIERARCHY_DEPTH = int(os.environ.get('MAX_HIERARCHY_DEPTH', '4'))
# Upper bound when walking manager_id pointers upwards
MAX_CHAIN_LENGTH = positive_int_env('MAX_CHAIN_LENGTH', 50)
# Only expand subordinates that look like managers (role or direct_reports cache)
PRUNE_SUBORDINATE_WALK_BY_CACHE = os.environ.get('PRUNE_SUBORDINATE_WALK_BY_CACHE', 'false').lower() == 'true'

# Reporting windows (days)
DEFAULT_REPORT_WINDOW_DAYS = int(os.environ.get('DEFAULT_REPORT_WINDOW_DAYS', '7'))
MAX_REPORT_WINDOW_DAYS = int(os.environ.get('MAX_REPORT_WINDOW_DAYS', '365'))
TEAM_STATS_WINDOW_DAYS = int(os.environ.get('TEAM_STATS_WINDOW_DAYS', '30'))
ANALYTICS_WINDOW_DAYS = int(os.environ.get('ANALYTICS_WINDOW_DAYS', '30'))
PERSONAL_HISTORY_WINDOW_DAYS = int(os.environ.get('PERSONAL_HISTORY_WINDOW_DAYS', '30'))
TREND_DAYS = int(os.environ.get('TREND_DAYS', '7'))

# CORS / logging
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# Roles that can see their direct reports
MANAGERIAL_ROLES = {"manager", "hr", "admin", "employer"}

# Roles that see every active employee in their company
COMPANY_WIDE_ROLES = {"hr", "admin", "employer"}

# Directors and above may open company analytics
ANALYTICS_MAX_HIERARCHY_LEVEL = 3

# hierarchy_level used when a user has none recorded
UNRANKED_HIERARCHY_LEVEL = 999

UNASSIGNED_DEPARTMENT = "Unassigned"


class HierarchyTier(IntEnum):
    """Seniority tiers used to bucket company analytics (0 = most senior)"""
    EXECUTIVE = 0
    SENIOR_MANAGEMENT = 1
    MIDDLE_MANAGEMENT = 2
    TEAM_LEADS = 3
    INDIVIDUAL_CONTRIBUTORS = 4

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS = {
    HierarchyTier.EXECUTIVE: "Executive",
    HierarchyTier.SENIOR_MANAGEMENT: "Senior Management",
    HierarchyTier.MIDDLE_MANAGEMENT: "Middle Management",
    HierarchyTier.TEAM_LEADS: "Team Leads",
    HierarchyTier.INDIVIDUAL_CONTRIBUTORS: "Individual Contributors",
}


def is_company_wide_role(role: str) -> bool:
    """Check if role sees all data in its company (HR, Admin, Employer)"""
    return role in COMPANY_WIDE_ROLES


def is_managerial_role(role: str) -> bool:
    """Check if role is a managerial role"""
    return role in MANAGERIAL_ROLES
