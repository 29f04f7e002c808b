"""API routers for Billing Bridge."""

from billing_bridge.routers.health import router as health_router
from billing_bridge.routers.tools import router as tools_router

__all__ = [
    "health_router",
    "tools_router",
]
