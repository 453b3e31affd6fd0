"""Resource submission, listing, admin moderation and interaction logging."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stumble_higher.core.settings import settings
from stumble_higher.db.time import utcnow
from stumble_higher.models import Resource, User, UserInteraction
from stumble_higher.models.interaction import INTERACTION_VIEW
from stumble_higher.models.resource import (
    MAX_TAGS,
    RESOURCE_STATUS_APPROVED,
    RESOURCE_STATUS_HIDDEN,
    RESOURCE_STATUS_PENDING,
    RESOURCE_STATUS_REJECTED,
)
from stumble_higher.services.analytics import record_admin_action, record_event
from stumble_higher.services.errors import (
    DuplicateResourceError,
    InvalidTransitionError,
    ResourceNotFoundError,
    SubmissionPaymentError,
)
from stumble_higher.services.reputation import recompute_user_reputation

logger = logging.getLogger(__name__)

TX_HASH_PATTERN = re.compile(r"^0x[a-fA-F0-9]{64}$")

ORDER_NEWEST = "newest"
ORDER_QUALITY = "quality"
ORDER_TRENDING = "trending"
RESOURCE_ORDERS = (ORDER_NEWEST, ORDER_QUALITY, ORDER_TRENDING)

MODERATION_APPROVE = "approve"
MODERATION_HIDE = "hide"
MODERATION_REJECT = "reject"
MODERATION_RESTORE = "restore"

# action -> (allowed source statuses, target status)
MODERATION_TRANSITIONS: dict[str, tuple[tuple[str, ...], str]] = {
    MODERATION_APPROVE: ((RESOURCE_STATUS_PENDING,), RESOURCE_STATUS_APPROVED),
    MODERATION_HIDE: ((RESOURCE_STATUS_PENDING, RESOURCE_STATUS_APPROVED), RESOURCE_STATUS_HIDDEN),
    MODERATION_REJECT: ((RESOURCE_STATUS_PENDING,), RESOURCE_STATUS_REJECTED),
    MODERATION_RESTORE: ((RESOURCE_STATUS_HIDDEN,), RESOURCE_STATUS_APPROVED),
}


@dataclass(frozen=True)
class ResourceSubmission:
    """Validated fields of a new resource."""

    title: str
    url: str
    category: str
    author: str | None = None
    description: str | None = None
    tags: Sequence[str] = ()
    difficulty_level: str | None = None
    estimated_time_minutes: int | None = None
    submission_tx_hash: str | None = None
    submission_amount: float | None = None


def _normalize_tags(tags: Sequence[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen[:MAX_TAGS]


def get_resource(db: Session, resource_id: str) -> Resource:
    """Return the resource or raise ``ResourceNotFoundError``."""
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise ResourceNotFoundError("Resource not found")
    return resource


def submit_resource(db: Session, submitter: User, data: ResourceSubmission) -> Resource:
    """Create a pending resource on behalf of ``submitter``.

    The payment transaction is only checked for shape; on-chain verification
    happens outside this service.

    Raises:
        DuplicateResourceError: If the url was already submitted.
        SubmissionPaymentError: If the transaction hash is malformed.
    """
    if data.submission_tx_hash is not None and not TX_HASH_PATTERN.match(
        data.submission_tx_hash
    ):
        raise SubmissionPaymentError("Invalid transaction hash format")

    if db.query(Resource.id).filter(Resource.url == data.url).first() is not None:
        raise DuplicateResourceError("This URL has already been submitted")

    resource = Resource(
        title=data.title.strip(),
        url=data.url,
        author=data.author,
        description=data.description,
        category=data.category,
        tags=_normalize_tags(data.tags),
        difficulty_level=data.difficulty_level,
        estimated_time_minutes=data.estimated_time_minutes,
        submitted_by=submitter.id,
        submission_tx_hash=data.submission_tx_hash,
        submission_amount=(
            data.submission_amount
            if data.submission_amount is not None
            else settings.default_submission_amount
        ),
        status=RESOURCE_STATUS_PENDING,
    )
    try:
        with db.begin_nested():
            db.add(resource)
            db.flush()
    except IntegrityError as err:
        db.rollback()
        raise DuplicateResourceError("This URL has already been submitted") from err

    submitter.total_submissions = (submitter.total_submissions or 0) + 1
    record_event(
        db,
        "resource_submitted",
        user_id=submitter.id,
        resource_id=resource.id,
        properties={"category": resource.category, "paid": data.submission_tx_hash is not None},
    )
    db.commit()
    db.refresh(resource)
    logger.info("Resource %s submitted by %s", resource.id, submitter.id)
    return resource


def list_resources(
    db: Session,
    *,
    status: str | None = RESOURCE_STATUS_APPROVED,
    category: str | None = None,
    difficulty: str | None = None,
    order: str = ORDER_NEWEST,
    limit: int = 20,
    offset: int = 0,
) -> list[Resource]:
    query = db.query(Resource)
    if status:
        query = query.filter(Resource.status == status)
    if category:
        query = query.filter(Resource.category == category)
    if difficulty:
        query = query.filter(Resource.difficulty_level == difficulty)

    if order == ORDER_QUALITY:
        query = query.order_by(Resource.quality_score.desc(), Resource.created_at.desc())
    elif order == ORDER_TRENDING:
        query = query.order_by(Resource.trending_score.desc(), Resource.created_at.desc())
    else:
        query = query.order_by(Resource.created_at.desc())
    return query.order_by(Resource.id).offset(offset).limit(limit).all()


def fetch_resources_in_order(db: Session, resource_ids: Sequence[str]) -> list[Resource]:
    """Load resources preserving the order of ``resource_ids``."""
    if not resource_ids:
        return []
    by_id = {r.id: r for r in db.query(Resource).filter(Resource.id.in_(resource_ids))}
    return [by_id[resource_id] for resource_id in resource_ids if resource_id in by_id]


def moderate_resource(
    db: Session,
    resource_id: str,
    *,
    admin: User,
    action: str,
    reason: str | None = None,
    notes: str | None = None,
) -> Resource:
    """Apply an admin moderation action.

    Raises:
        ResourceNotFoundError: If the resource does not exist.
        InvalidTransitionError: If ``action`` is unknown or not allowed from
            the current status.
    """
    if action not in MODERATION_TRANSITIONS:
        raise InvalidTransitionError(f"Unknown moderation action: {action}")

    resource = get_resource(db, resource_id)
    sources, target = MODERATION_TRANSITIONS[action]
    if resource.status not in sources:
        raise InvalidTransitionError(f"Cannot {action} a resource that is {resource.status}")

    previous = resource.status
    resource.status = target
    if action == MODERATION_REJECT:
        resource.rejection_reason = reason
    if notes is not None:
        resource.admin_notes = notes

    record_admin_action(
        db,
        admin.id,
        f"resource_{action}",
        target_type="resource",
        target_id=resource.id,
        metadata={"from": previous, "to": target, "reason": reason},
    )
    db.flush()
    if resource.submitted_by:
        recompute_user_reputation(db, resource.submitted_by)
    db.commit()
    db.refresh(resource)
    logger.info("Admin %s moved resource %s %s -> %s", admin.id, resource.id, previous, target)
    return resource


def record_interaction(
    db: Session,
    resource_id: str,
    interaction_type: str,
    *,
    user_id: str | None = None,
    session_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> UserInteraction:
    """Append an interaction; views also bump the resource's view counters.

    Raises:
        ResourceNotFoundError: If the resource does not exist.
    """
    resource = get_resource(db, resource_id)

    if interaction_type == INTERACTION_VIEW:
        first_view = True
        if user_id is not None or session_id is not None:
            previous = db.query(UserInteraction.id).filter(
                UserInteraction.resource_id == resource_id,
                UserInteraction.interaction_type == INTERACTION_VIEW,
            )
            if user_id is not None:
                previous = previous.filter(UserInteraction.user_id == user_id)
            else:
                previous = previous.filter(UserInteraction.session_id == session_id)
            first_view = previous.first() is None

        resource.views = (resource.views or 0) + 1
        if first_view:
            resource.unique_viewers = (resource.unique_viewers or 0) + 1
        resource.last_viewed_at = utcnow()

    interaction = UserInteraction(
        user_id=user_id,
        session_id=session_id,
        resource_id=resource_id,
        interaction_type=interaction_type,
        metadata_=metadata or {},
    )
    db.add(interaction)
    db.commit()
    db.refresh(interaction)
    return interaction
