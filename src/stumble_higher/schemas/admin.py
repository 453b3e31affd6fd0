"""Admin-only Pydantic schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ModerationRequest(BaseModel):
    """Schema for an admin moderation decision."""

    action: Literal["approve", "hide", "reject", "restore"]
    reason: str | None = Field(None, max_length=1000)
    notes: str | None = Field(None, max_length=5000)


class ConfigUpdate(BaseModel):
    """New value for a ``system_config`` key."""

    value: Any


class RecomputeResponse(BaseModel):
    """Result of an on-demand resource rescore."""

    resource_id: str
    previous_status: str
    status: str
    quality_score: float
    voter_count: int


class JobResponse(BaseModel):
    """Result of an on-demand batch job."""

    job: str
    processed: int = 0
    weekly_reward_id: str | None = None
