"""Post-commit events emitted by the voting pipeline.

A committed vote mutation publishes ``VoteChanged``; the scoring handler
consumes it to rescore the resource and the voter's reputation. Handlers run
after the vote is durable, so a scoring failure never undoes a vote.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stumble_higher.services.errors import ConfigurationError, StumbleError
from stumble_higher.services.reputation import recompute_user_reputation
from stumble_higher.services.resource_state import (
    ScoreUpdate,
    mark_scores_stale,
    update_resource_scores,
)

logger = logging.getLogger(__name__)

VOTE_CREATED = "created"
VOTE_UPDATED = "updated"
VOTE_REMOVED = "removed"


@dataclass(frozen=True)
class VoteChanged:
    """A vote row was inserted, updated or deleted."""

    resource_id: str
    user_id: str
    action: str
    vote_type: str | None


VoteChangedHandler = Callable[[Session, VoteChanged], object]


def handle_vote_changed(db: Session, event: VoteChanged) -> ScoreUpdate | None:
    """Rescore the voted resource and the voter's reputation.

    Best effort: on failure the work is rolled back, logged, and the resource
    is flagged for reconciliation.
    """
    try:
        update = update_resource_scores(db, event.resource_id)
        recompute_user_reputation(db, event.user_id)
        db.commit()
        return update
    except ConfigurationError as err:
        db.rollback()
        logger.error("Scoring disabled by configuration error: %s", err)
    except (StumbleError, SQLAlchemyError) as err:
        db.rollback()
        logger.warning(
            "Rescoring after vote %s on %s failed: %s",
            event.action,
            event.resource_id,
            err,
        )
    mark_scores_stale(db, event.resource_id)
    return None


_handlers: list[VoteChangedHandler] = [handle_vote_changed]


def subscribe(handler: VoteChangedHandler) -> None:
    """Register an additional consumer of ``VoteChanged``."""
    if handler not in _handlers:
        _handlers.append(handler)


def unsubscribe(handler: VoteChangedHandler) -> None:
    """Remove a previously registered consumer."""
    if handler in _handlers:
        _handlers.remove(handler)


def publish(db: Session, event: VoteChanged) -> None:
    """Deliver ``event`` to every handler in registration order.

    A failing handler is logged and the resource flagged stale; the remaining
    handlers still run and nothing is raised to the caller.
    """
    for handler in list(_handlers):
        try:
            handler(db, event)
        except Exception:
            db.rollback()
            logger.error(
                "VoteChanged handler %r failed for resource %s",
                handler,
                event.resource_id,
                exc_info=True,
            )
            mark_scores_stale(db, event.resource_id)
