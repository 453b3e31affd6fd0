"""Audit event helpers and admin statistics."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from stumble_higher.db.time import utcnow
from stumble_higher.models import (
    AdminAction,
    AnalyticsEvent,
    Resource,
    RewardDistribution,
    User,
    UserInteraction,
    Vote,
)
from stumble_higher.models.interaction import INTERACTION_VIEW
from stumble_higher.models.resource import RESOURCE_STATUSES


def record_event(
    db: Session,
    event_type: str,
    *,
    user_id: str | None = None,
    resource_id: str | None = None,
    session_id: str | None = None,
    properties: dict[str, Any] | None = None,
) -> AnalyticsEvent:
    """Stage an analytics event in the caller's transaction."""
    event = AnalyticsEvent(
        event_type=event_type,
        user_id=user_id,
        resource_id=resource_id,
        session_id=session_id,
        properties=properties or {},
    )
    db.add(event)
    return event


def record_admin_action(
    db: Session,
    admin_id: str,
    action: str,
    *,
    target_type: str | None = None,
    target_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AdminAction:
    """Stage an admin audit record in the caller's transaction."""
    entry = AdminAction(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        metadata_=metadata or {},
    )
    db.add(entry)
    return entry


def collect_stats(db: Session) -> dict[str, Any]:
    """Return headline counters for the admin dashboard."""
    now = utcnow()
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = now - timedelta(days=7)

    by_status = dict(
        db.query(Resource.status, func.count(Resource.id)).group_by(Resource.status).all()
    )
    return {
        "users": {
            "total": db.query(func.count(User.id)).scalar() or 0,
            "new_today": db.query(func.count(User.id))
            .filter(User.created_at >= day_start)
            .scalar()
            or 0,
            "suspended": db.query(func.count(User.id))
            .filter(User.is_suspended.is_(True))
            .scalar()
            or 0,
        },
        "resources": {
            "total": sum(by_status.values()),
            **{status: by_status.get(status, 0) for status in RESOURCE_STATUSES},
            "new_today": db.query(func.count(Resource.id))
            .filter(Resource.created_at >= day_start)
            .scalar()
            or 0,
        },
        "votes": {
            "total": db.query(func.count(Vote.id)).scalar() or 0,
            "last_7_days": db.query(func.count(Vote.id))
            .filter(Vote.created_at >= week_ago)
            .scalar()
            or 0,
        },
        "views": {
            "total": db.query(func.coalesce(func.sum(Resource.views), 0)).scalar() or 0,
            "last_7_days": db.query(func.count(UserInteraction.id))
            .filter(
                UserInteraction.interaction_type == INTERACTION_VIEW,
                UserInteraction.created_at >= week_ago,
            )
            .scalar()
            or 0,
        },
        "rewards": {
            "paid_submissions": db.query(func.count(Resource.id))
            .filter(Resource.submission_tx_hash.is_not(None))
            .scalar()
            or 0,
            "total_allocated": float(
                db.query(func.coalesce(func.sum(RewardDistribution.amount), 0)).scalar() or 0
            ),
        },
    }
