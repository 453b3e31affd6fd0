"""Time-based lease gate for batch jobs.

Batch jobs (trending, rewards) may overlap with vote traffic but never with
themselves. A ``job_locks`` row holds a lease that expires after
``job_lock_ttl_seconds`` so a crashed holder cannot wedge the job forever.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from uuid import uuid4

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stumble_higher.core.settings import settings
from stumble_higher.db.time import utcnow
from stumble_higher.models import JobLock
from stumble_higher.services.errors import JobLockedError

logger = logging.getLogger(__name__)

TRENDING_JOB = "trending_scores"
WEEKLY_REWARDS_JOB = "weekly_rewards"


def acquire_job_lock(
    db: Session,
    name: str,
    *,
    ttl_seconds: int | None = None,
    now: datetime | None = None,
) -> str:
    """Take the lease for ``name`` and return the holder token.

    Raises:
        JobLockedError: If another holder's lease has not expired.
    """
    now = now or utcnow()
    ttl = ttl_seconds if ttl_seconds is not None else settings.job_lock_ttl_seconds
    token = uuid4().hex
    expires = now + timedelta(seconds=ttl)

    result = db.execute(
        update(JobLock)
        .where(
            JobLock.name == name,
            or_(JobLock.locked_until.is_(None), JobLock.locked_until <= now),
        )
        .values(holder=token, locked_until=expires)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        db.commit()
        return token

    if db.get(JobLock, name) is not None:
        db.rollback()
        raise JobLockedError(f"Job {name!r} is already running")

    try:
        with db.begin_nested():
            db.add(JobLock(name=name, holder=token, locked_until=expires))
    except IntegrityError as err:
        db.rollback()
        raise JobLockedError(f"Job {name!r} is already running") from err
    db.commit()
    return token


def release_job_lock(
    db: Session,
    name: str,
    token: str,
    *,
    completed: bool = True,
    now: datetime | None = None,
) -> None:
    """Drop the lease held by ``token``; stamp completion when requested."""
    values: dict[str, object] = {"holder": None, "locked_until": None}
    if completed:
        values["last_completed_at"] = now or utcnow()
    db.execute(
        update(JobLock)
        .where(JobLock.name == name, JobLock.holder == token)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()


@contextmanager
def job_lock(db: Session, name: str, *, now: datetime | None = None) -> Iterator[str]:
    """Hold the ``name`` lease for the duration of the block."""
    token = acquire_job_lock(db, name, now=now)
    completed = False
    try:
        yield token
        completed = True
    finally:
        if not completed:
            db.rollback()
        release_job_lock(db, name, token, completed=completed)


def last_completed_at(db: Session, name: str) -> datetime | None:
    """Return when ``name`` last finished successfully."""
    lock = db.get(JobLock, name)
    return None if lock is None else lock.last_completed_at
