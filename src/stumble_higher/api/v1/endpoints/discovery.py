"""Discovery ("stumble") endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Query, status

from stumble_higher.core.settings import settings
from stumble_higher.schemas.discovery import (
    DiscoveryResponse,
    InteractionCreate,
    InteractionResponse,
)
from stumble_higher.schemas.resource import ResourceResponse
from stumble_higher.services.errors import ResourceNotFoundError
from stumble_higher.services.recommendation import DiscoveryRequest, select_resources
from stumble_higher.services.resources import fetch_resources_in_order, record_interaction

from ..dependencies import OptionalUserDep, SessionDep

router = APIRouter(prefix="/discover", tags=["discover"])


@router.get("/", response_model=DiscoveryResponse)
async def discover(
    db: SessionDep,
    current_user: OptionalUserDep,
    algorithm: Literal["personalized", "popular", "recent", "random"] = "personalized",
    category: str | None = None,
    difficulty: str | None = None,
    max_time: Annotated[int | None, Query(gt=0)] = None,
    exclude_ids: Annotated[list[str] | None, Query()] = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
    exclude_viewed: bool = True,
) -> DiscoveryResponse:
    """Select the next resources to show."""
    request = DiscoveryRequest(
        algorithm=algorithm,
        user_id=current_user.id if current_user else None,
        exclude_ids=frozenset(exclude_ids or ()),
        category=category,
        difficulty=difficulty,
        max_time=max_time,
        limit=min(limit or settings.discovery_default_limit, settings.discovery_max_limit),
        exclude_viewed=exclude_viewed,
    )
    selection = select_resources(db, request)
    resources = fetch_resources_in_order(db, selection.resource_ids)
    return DiscoveryResponse(
        resource_ids=selection.resource_ids,
        resources=[ResourceResponse.model_validate(resource) for resource in resources],
        algorithm_used=selection.algorithm_used,
    )


@router.post(
    "/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_interaction(
    payload: InteractionCreate,
    db: SessionDep,
    current_user: OptionalUserDep,
) -> InteractionResponse:
    """Record a view, favorite, share, completion or click-through."""
    if current_user is None and payload.session_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Anonymous interactions require a session_id",
        )
    try:
        interaction = record_interaction(
            db,
            payload.resource_id,
            payload.interaction_type,
            user_id=current_user.id if current_user else None,
            session_id=payload.session_id,
            metadata=payload.metadata,
        )
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    return InteractionResponse(
        id=interaction.id,
        resource_id=interaction.resource_id,
        interaction_type=interaction.interaction_type,
    )
