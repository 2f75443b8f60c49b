# hackmap/routes/__init__.py
"""Router registry.

Single source of truth for FastAPI route inclusion. Each router is mounted
exactly once, in the order below.
"""

from __future__ import annotations

from hackmap.routes.auth_routes import router as auth_router
from hackmap.routes.cron_routes import router as cron_router
from hackmap.routes.diag_routes import router as diag_router
from hackmap.routes.hackathon_routes import router as hackathon_router
from hackmap.routes.notification_routes import router as notification_router
from hackmap.routes.profile_routes import router as profile_router
from hackmap.routes.project_routes import router as project_router
from hackmap.routes.stats_routes import router as stats_router
from hackmap.routes.team_routes import router as team_router

# 1) Diagnostics  2) Accounts  3) Domain APIs  4) Jobs
routers = [
    diag_router,
    stats_router,
    auth_router,
    profile_router,
    hackathon_router,
    team_router,
    project_router,
    notification_router,
    cron_router,
]

__all__ = ["routers"]
