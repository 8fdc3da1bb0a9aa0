"""
Router package for the IronLog Progression API.

Part of IRL-13: HTTP surface

This package contains all API routers organized by domain:
- health: Health check endpoint
- state: Load/save of the state envelope and sync status
- progression: Suggestions, history rollups and set registration
- analytics: Training frequency per muscle group
"""

from api.routers.analytics import router as analytics_router
from api.routers.health import router as health_router
from api.routers.progression import router as progression_router
from api.routers.state import router as state_router

__all__ = [
    "analytics_router",
    "health_router",
    "progression_router",
    "state_router",
]
