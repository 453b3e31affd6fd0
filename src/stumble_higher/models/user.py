# src/stumble_higher/models/user.py
"""SQLAlchemy models for user identities and discovery preferences."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stumble_higher.db.session import Base
from stumble_higher.db.time import utcnow


class User(Base):
    """A person (or the synthetic genesis account) known to the service.

    ``reputation_score`` is derived: it is only ever written by
    ``services.reputation.recompute_user_reputation``.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    reputation_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_submissions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rewards_earned: Mapped[float] = mapped_column(
        Numeric(18, 4, asdecimal=False), nullable=False, default=0.0
    )

    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Soft flag; users are never hard-deleted.
    is_suspended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_genesis: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    preferences: Mapped[UserPreferences | None] = relationship(
        "UserPreferences",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )


class UserPreferences(Base):
    """Explicit discovery preferences; one row per user at most."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    preferred_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    excluded_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    preferred_difficulty: Mapped[str] = mapped_column(
        String(16), nullable=False, default="intermediate"
    )
    max_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    discovery_algorithm: Mapped[str] = mapped_column(
        String(16), nullable=False, default="personalized"
    )

    user: Mapped[User] = relationship("User", back_populates="preferences")
