# src/stumble_higher/models/interaction.py
"""Append-only log of engagement with resources."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stumble_higher.db.session import Base
from stumble_higher.db.time import utcnow

INTERACTION_VIEW = "view"
INTERACTION_FAVORITE = "favorite"
INTERACTION_SHARE = "share"
INTERACTION_COMPLETE = "complete"
INTERACTION_CLICK_THROUGH = "click_through"

INTERACTION_TYPES = (
    INTERACTION_VIEW,
    INTERACTION_FAVORITE,
    INTERACTION_SHARE,
    INTERACTION_COMPLETE,
    INTERACTION_CLICK_THROUGH,
)


class UserInteraction(Base):
    """One user (or anonymous session) engaging with a resource.

    Rows are immutable once written.
    """

    __tablename__ = "user_interactions"
    __table_args__ = (
        Index("ix_user_interactions_user_id", "user_id"),
        Index("ix_user_interactions_resource_id", "resource_id"),
        Index("ix_user_interactions_type", "interaction_type"),
        Index("ix_user_interactions_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=True,
    )
    session_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    resource_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("resources.id"),
        nullable=False,
    )
    interaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    # Column is named "metadata" in the database; the attribute avoids
    # shadowing DeclarativeBase.metadata.
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
