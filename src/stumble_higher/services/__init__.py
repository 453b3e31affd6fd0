"""Business logic services for the Stumble Higher application."""

from .recommendation import DiscoveryRequest, DiscoverySelection, select_resources
from .resource_state import reconcile_stale_scores, update_resource_scores
from .rewards import compute_weekly_rewards
from .scoring import QualityScore, calculate_quality_score
from .trending import recompute_trending_scores
from .voting import VoteResult, cast_vote, remove_vote
from .worker import ScoringWorker

__all__ = [
    "DiscoveryRequest",
    "DiscoverySelection",
    "QualityScore",
    "ScoringWorker",
    "VoteResult",
    "calculate_quality_score",
    "cast_vote",
    "compute_weekly_rewards",
    "reconcile_stale_scores",
    "recompute_trending_scores",
    "remove_vote",
    "select_resources",
    "update_resource_scores",
]
