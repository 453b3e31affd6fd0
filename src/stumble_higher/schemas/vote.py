"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class VoteCreate(BaseModel):
    """Schema for casting, switching or toggling off a vote."""

    resource_id: str
    vote_type: Literal["up", "down"] = Field(..., description="Direction of the vote")


class VoteResponse(BaseModel):
    """Outcome of a vote request."""

    resource_id: str
    action: Literal["created", "updated", "removed"]
    vote_type: Literal["up", "down"] | None = None
    weight: float | None = None


class MyVoteResponse(BaseModel):
    """The caller's current vote on a resource, if any."""

    resource_id: str
    vote_type: Literal["up", "down"] | None = None
    weight: float | None = None

    model_config = ConfigDict(from_attributes=True)


class VoteSummary(BaseModel):
    """Live scorer output for a resource."""

    resource_id: str
    upvotes: int
    downvotes: int
    weighted_score: float
    voter_count: int
    should_auto_approve: bool
    should_auto_hide: bool
