"""
Routers package initialization
"""
from .hierarchy import router as hierarchy_router
from .reports import router as reports_router
from .analytics import router as analytics_router

__all__ = [
    'hierarchy_router',
    'reports_router',
    'analytics_router',
]
