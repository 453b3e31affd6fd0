# src/stumble_higher/models/vote.py
"""Models capturing voting interactions on resources."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from stumble_higher.db.session import Base
from stumble_higher.db.time import utcnow

VOTE_UP = "up"
VOTE_DOWN = "down"


class Vote(Base):
    """Per-user vote on a resource.

    The weight is captured at cast time from the voter's reputation; the
    scorer recomputes contributions from live reputation instead.
    """

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("vote_type IN ('up', 'down')", name="ck_votes_vote_type"),
        # At most one vote per (user, resource); concurrent inserts collide here.
        UniqueConstraint("resource_id", "user_id", name="uq_votes_resource_user"),
        Index("ix_votes_resource_id", "resource_id"),
        Index("ix_votes_user_id", "user_id"),
        Index("ix_votes_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    resource_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    vote_type: Mapped[str] = mapped_column(String(4), nullable=False)
    weight: Mapped[float] = mapped_column(
        Numeric(8, 4, asdecimal=False), nullable=False, default=1.0
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
