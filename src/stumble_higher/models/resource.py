# src/stumble_higher/models/resource.py
"""SQLAlchemy model for discoverable resources."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from stumble_higher.db.session import Base
from stumble_higher.db.time import utcnow

RESOURCE_STATUS_PENDING = "pending"
RESOURCE_STATUS_APPROVED = "approved"
RESOURCE_STATUS_REJECTED = "rejected"
RESOURCE_STATUS_HIDDEN = "hidden"

RESOURCE_STATUSES = (
    RESOURCE_STATUS_PENDING,
    RESOURCE_STATUS_APPROVED,
    RESOURCE_STATUS_REJECTED,
    RESOURCE_STATUS_HIDDEN,
)

# Votes are only accepted while a resource is in one of these states.
VOTABLE_STATUSES = (RESOURCE_STATUS_PENDING, RESOURCE_STATUS_APPROVED)

RESOURCE_CATEGORIES = ("books", "articles", "videos", "tools", "research", "philosophy")
DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")

MAX_TAGS = 10


class Resource(Base):
    """A discoverable content item.

    Status machine: ``pending -> approved|hidden`` via auto-moderation;
    ``approved <-> hidden`` and ``pending -> rejected`` via admins only.
    Deletion is a transition to ``hidden``; rows are never removed.
    """

    __tablename__ = "resources"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'hidden')",
            name="ck_resources_status",
        ),
        CheckConstraint(
            "difficulty_level IS NULL OR "
            "difficulty_level IN ('beginner', 'intermediate', 'advanced')",
            name="ck_resources_difficulty",
        ),
        Index("ix_resources_status", "status"),
        Index("ix_resources_category", "category"),
        Index("ix_resources_quality_score", "quality_score"),
        Index("ix_resources_trending_score", "trending_score"),
        Index("ix_resources_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    difficulty_level: Mapped[str | None] = mapped_column(String(16), nullable=True)
    estimated_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    submitted_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )
    # Payment transaction for the submission; verification happens upstream.
    submission_tx_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    submission_amount: Mapped[float] = mapped_column(
        Numeric(18, 4, asdecimal=False), nullable=False, default=1000.0
    )

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RESOURCE_STATUS_PENDING
    )
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_viewers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Weighted vote sum; negative values are expected for disliked content.
    quality_score: Mapped[float] = mapped_column(
        Numeric(12, 4, asdecimal=False), nullable=False, default=0.0
    )
    trending_score: Mapped[float] = mapped_column(
        Numeric(12, 4, asdecimal=False), nullable=False, default=0.0
    )
    # Set when a best-effort recompute failed; cleared by reconciliation.
    scores_stale: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_viewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    is_genesis: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
