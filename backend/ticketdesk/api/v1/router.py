"""API v1 router aggregator.

All v1 endpoint routers are included here. The application mounts this
router both at /api/v1 and at the root.
"""

from fastapi import APIRouter

from ticketdesk.api.v1 import auth, dashboard, tickets, users

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(auth.session_router, tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])

# =============================================================================
# Core Resource Routers
# =============================================================================

router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
