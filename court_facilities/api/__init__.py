"""
HTTP routers, one per feature area.
"""

from .court import coverage_router, sessions_router
from .lighting import router as lighting_router
from .reports import router as reports_router
from .spaces import router as spaces_router

routers = [sessions_router, coverage_router, reports_router, lighting_router, spaces_router]

__all__ = [
    "coverage_router",
    "lighting_router",
    "reports_router",
    "routers",
    "sessions_router",
    "spaces_router",
]
