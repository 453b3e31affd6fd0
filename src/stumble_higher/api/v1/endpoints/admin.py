"""Administrative endpoints: moderation, recomputation, rewards and config."""

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, status

from stumble_higher.schemas.admin import (
    ConfigUpdate,
    JobResponse,
    ModerationRequest,
    RecomputeResponse,
)
from stumble_higher.schemas.resource import ResourceResponse
from stumble_higher.services import resources as resource_service
from stumble_higher.services.analytics import collect_stats, record_admin_action
from stumble_higher.services.errors import (
    ConfigurationError,
    InvalidTransitionError,
    JobLockedError,
    ResourceNotFoundError,
)
from stumble_higher.services.jobs import TRENDING_JOB, WEEKLY_REWARDS_JOB
from stumble_higher.services.resource_state import update_resource_scores
from stumble_higher.services.rewards import compute_weekly_rewards
from stumble_higher.services.system_config import get_all_config, set_config_value
from stumble_higher.services.trending import recompute_trending_scores

from ..dependencies import AdminUserDep, SessionDep

router = APIRouter(prefix="/admin", tags=["admin"])


def _job_conflict(err: JobLockedError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err))


@router.post("/resources/{resource_id}/moderate", response_model=ResourceResponse)
async def moderate_resource(
    resource_id: str,
    payload: ModerationRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> ResourceResponse:
    """Approve, hide, reject or restore a resource."""
    try:
        resource = resource_service.moderate_resource(
            db,
            resource_id,
            admin=admin,
            action=payload.action,
            reason=payload.reason,
            notes=payload.notes,
        )
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except InvalidTransitionError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return ResourceResponse.model_validate(resource)


@router.post("/resources/{resource_id}/recompute", response_model=RecomputeResponse)
async def recompute_resource(
    resource_id: str,
    admin: AdminUserDep,
    db: SessionDep,
) -> RecomputeResponse:
    """Recompute a resource's scores from its votes."""
    try:
        update = update_resource_scores(db, resource_id)
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except ConfigurationError as err:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(err),
        ) from err
    record_admin_action(
        db,
        admin.id,
        "resource_recompute",
        target_type="resource",
        target_id=resource_id,
    )
    db.commit()
    return RecomputeResponse(
        resource_id=resource_id,
        previous_status=update.previous_status,
        status=update.status,
        quality_score=update.score.weighted_score,
        voter_count=update.score.voter_count,
    )


@router.post("/trending/recompute", response_model=JobResponse)
async def recompute_trending(admin: AdminUserDep, db: SessionDep) -> JobResponse:
    """Recompute trending scores for every approved resource now."""
    try:
        processed = recompute_trending_scores(db)
    except JobLockedError as err:
        raise _job_conflict(err) from err
    return JobResponse(job=TRENDING_JOB, processed=processed)


@router.post("/rewards/{week_start}", response_model=JobResponse)
async def compute_rewards(week_start: date, admin: AdminUserDep, db: SessionDep) -> JobResponse:
    """Compute (or return the existing) reward batch for a week."""
    try:
        weekly_reward_id = compute_weekly_rewards(db, week_start)
    except JobLockedError as err:
        raise _job_conflict(err) from err
    return JobResponse(job=WEEKLY_REWARDS_JOB, weekly_reward_id=weekly_reward_id)


@router.get("/config")
async def list_config(admin: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    """Return every system configuration entry."""
    return get_all_config(db)


@router.put("/config/{key}")
async def update_config(
    key: str,
    payload: ConfigUpdate,
    admin: AdminUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Set a system configuration value."""
    if payload.value is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Config value cannot be null",
        )
    try:
        set_config_value(db, key, payload.value, updated_by=admin.id)
    except ConfigurationError as err:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    record_admin_action(
        db,
        admin.id,
        "config_updated",
        target_type="system_config",
        metadata={"key": key, "value": payload.value},
    )
    db.commit()
    return {"key": key, "value": payload.value}


@router.get("/stats")
async def get_stats(admin: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    """Return headline counters for the admin dashboard."""
    return collect_stats(db)
