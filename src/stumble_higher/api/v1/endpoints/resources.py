"""Resource submission and browsing endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Query, status

from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED
from stumble_higher.schemas.resource import ResourceCreate, ResourceResponse
from stumble_higher.services import resources as resource_service
from stumble_higher.services.errors import (
    DuplicateResourceError,
    ResourceNotFoundError,
    SubmissionPaymentError,
)

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/resources", tags=["resources"])


@router.post("/", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
async def submit_resource(
    resource_data: ResourceCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ResourceResponse:
    """Submit a new resource for community review."""
    submission = resource_service.ResourceSubmission(**resource_data.model_dump())
    try:
        resource = resource_service.submit_resource(db, current_user, submission)
    except DuplicateResourceError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    except SubmissionPaymentError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return ResourceResponse.model_validate(resource)


@router.get("/", response_model=list[ResourceResponse])
async def list_resources(
    db: SessionDep,
    status_filter: Annotated[
        Literal["pending", "approved", "rejected", "hidden"], Query(alias="status")
    ] = RESOURCE_STATUS_APPROVED,
    category: str | None = None,
    difficulty: str | None = None,
    order: Literal["newest", "quality", "trending"] = "newest",
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[ResourceResponse]:
    """List resources with optional filters."""
    resources = resource_service.list_resources(
        db,
        status=status_filter,
        category=category,
        difficulty=difficulty,
        order=order,
        limit=limit,
        offset=offset,
    )
    return [ResourceResponse.model_validate(resource) for resource in resources]


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource(resource_id: str, db: SessionDep) -> ResourceResponse:
    """Get a single resource by id."""
    try:
        resource = resource_service.get_resource(db, resource_id)
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    return ResourceResponse.model_validate(resource)
