"""Discovery (stumble) Pydantic schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from .resource import ResourceResponse


class DiscoveryResponse(BaseModel):
    """Ordered selection plus the strategy that actually produced it."""

    resource_ids: list[str]
    resources: list[ResourceResponse]
    algorithm_used: str


class InteractionCreate(BaseModel):
    """Schema for logging an interaction with a resource."""

    resource_id: str
    interaction_type: Literal["view", "favorite", "share", "complete", "click_through"]
    session_id: str | None = Field(None, max_length=128)
    metadata: dict[str, Any] = Field(default_factory=dict)


class InteractionResponse(BaseModel):
    """Acknowledgement of a logged interaction."""

    id: str
    resource_id: str
    interaction_type: str
