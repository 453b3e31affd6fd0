"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .discovery import router as discovery_router
from .resources import router as resources_router
from .rewards import router as rewards_router
from .votes import router as votes_router

__all__ = [
    "admin_router",
    "discovery_router",
    "resources_router",
    "rewards_router",
    "votes_router",
]
