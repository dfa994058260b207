"""
Services package initialization
"""
from .errors import (
    HierarchyError,
    UserNotFoundError,
    StoreUnavailableError,
    HierarchyValidationError
)
from .hierarchy_service import (
    is_manager,
    build_hierarchy,
    get_all_subordinates,
    get_team_user_ids,
    get_manager_chain,
    get_reporting_chain,
    update_reporting_chain,
    audit_hierarchy_caches
)
from .permission_service import (
    get_manager_permissions,
    can_access_employee_data,
    has_company_wide_access
)
from .reports_service import (
    fetch_reports_for_employees,
    get_hierarchy_filtered_reports,
    get_recent_reports,
    get_personal_history
)
from .analytics_service import (
    get_team_stats,
    get_hierarchy_analytics,
    generate_reports_analytics
)

__all__ = [
    # Errors
    'HierarchyError',
    'UserNotFoundError',
    'StoreUnavailableError',
    'HierarchyValidationError',
    # Hierarchy
    'is_manager',
    'build_hierarchy',
    'get_all_subordinates',
    'get_team_user_ids',
    'get_manager_chain',
    'get_reporting_chain',
    'update_reporting_chain',
    'audit_hierarchy_caches',
    # Permissions
    'get_manager_permissions',
    'can_access_employee_data',
    'has_company_wide_access',
    # Reports
    'fetch_reports_for_employees',
    'get_hierarchy_filtered_reports',
    'get_recent_reports',
    'get_personal_history',
    # Analytics
    'get_team_stats',
    'get_hierarchy_analytics',
    'generate_reports_analytics',
]
