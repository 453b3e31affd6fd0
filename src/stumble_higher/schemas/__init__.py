"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import ConfigUpdate, JobResponse, ModerationRequest, RecomputeResponse
from .discovery import DiscoveryResponse, InteractionCreate, InteractionResponse
from .resource import ResourceCreate, ResourceResponse
from .reward import RewardDistributionResponse, WeeklyRewardResponse
from .vote import MyVoteResponse, VoteCreate, VoteResponse, VoteSummary

__all__ = [
    "ConfigUpdate", "JobResponse", "ModerationRequest", "RecomputeResponse",
    "DiscoveryResponse", "InteractionCreate", "InteractionResponse",
    "ResourceCreate", "ResourceResponse",
    "RewardDistributionResponse", "WeeklyRewardResponse",
    "MyVoteResponse", "VoteCreate", "VoteResponse", "VoteSummary",
]
