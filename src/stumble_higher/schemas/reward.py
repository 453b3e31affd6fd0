"""Reward-related Pydantic schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class RewardDistributionResponse(BaseModel):
    """One ranked share of a weekly pool."""

    resource_id: str
    user_id: str | None
    rank: int
    amount: float
    quality_score: float
    tx_hash: str | None = None
    distributed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class WeeklyRewardResponse(BaseModel):
    """A weekly reward batch and its distributions."""

    id: str
    week_start: date
    week_end: date
    total_pool_amount: float
    total_submissions: int
    total_participants: int
    calculation_completed_at: datetime | None
    distribution_completed_at: datetime | None
    distributions: list[RewardDistributionResponse]

    model_config = ConfigDict(from_attributes=True)
