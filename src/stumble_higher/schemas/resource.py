"""Resource-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Category = Literal["books", "articles", "videos", "tools", "research", "philosophy"]
Difficulty = Literal["beginner", "intermediate", "advanced"]


class ResourceCreate(BaseModel):
    """Schema for submitting a new resource."""

    title: str = Field(..., min_length=1, max_length=500)
    url: str = Field(..., min_length=1, max_length=2048)
    category: Category
    author: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    tags: list[str] = Field(default_factory=list, max_length=10)
    difficulty_level: Difficulty | None = None
    estimated_time_minutes: int | None = Field(None, gt=0, le=10_000)
    submission_tx_hash: str | None = Field(
        None,
        description="Payment transaction hash (0x followed by 64 hex characters)",
    )

    @field_validator("url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return value


class ResourceResponse(BaseModel):
    """Schema for resource information returned by the API."""

    id: str
    title: str
    author: str | None
    url: str
    description: str | None
    category: str
    tags: list[str]
    difficulty_level: str | None
    estimated_time_minutes: int | None
    submitted_by: str | None
    status: str
    upvotes: int
    downvotes: int
    views: int
    unique_viewers: int
    quality_score: float
    trending_score: float
    is_genesis: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
