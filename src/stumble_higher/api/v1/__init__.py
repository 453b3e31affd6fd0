"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    discovery_router,
    resources_router,
    rewards_router,
    votes_router,
)

__all__ = [
    "admin_router",
    "discovery_router",
    "resources_router",
    "rewards_router",
    "votes_router",
]
