"""
Utils package initialization
"""
from .auth import (
    get_current_user,
    require_capability,
    require_company_wide_access,
    check_same_company,
    check_employee_access
)

__all__ = [
    'get_current_user',
    'require_capability',
    'require_company_wide_access',
    'check_same_company',
    'check_employee_access'
]
