# src/stumble_higher/models/__init__.py
"""SQLAlchemy models for the Stumble Higher application."""

from .audit import AdminAction, AnalyticsEvent
from .interaction import UserInteraction
from .resource import Resource
from .reward import RewardDistribution, WeeklyReward
from .system import JobLock, SystemConfig
from .user import User, UserPreferences
from .vote import Vote

__all__ = [
    "AdminAction", "AnalyticsEvent",
    "UserInteraction",
    "Resource",
    "RewardDistribution", "WeeklyReward",
    "JobLock", "SystemConfig",
    "User", "UserPreferences",
    "Vote",
]
