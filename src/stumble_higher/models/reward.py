# src/stumble_higher/models/reward.py
"""Weekly reward batch snapshots."""

from __future__ import annotations

from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stumble_higher.db.session import Base
from stumble_higher.db.time import utcnow


class WeeklyReward(Base):
    """Token pool computed for one week of submissions.

    ``week_start`` is the natural dedup key: one batch per week.
    """

    __tablename__ = "weekly_rewards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    week_start: Mapped[date] = mapped_column(Date, nullable=False, unique=True)
    week_end: Mapped[date] = mapped_column(Date, nullable=False)
    total_pool_amount: Mapped[float] = mapped_column(
        Numeric(18, 4, asdecimal=False), nullable=False, default=0.0
    )
    total_submissions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Commit signal for the batch.
    calculation_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Written by the external payout process.
    distribution_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    distributions: Mapped[list[RewardDistribution]] = relationship(
        "RewardDistribution",
        back_populates="weekly_reward",
        order_by="RewardDistribution.rank",
    )


class RewardDistribution(Base):
    """One ranked resource's share of a weekly pool."""

    __tablename__ = "reward_distributions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    weekly_reward_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("weekly_rewards.id"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=True,
    )
    resource_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("resources.id"),
        nullable=False,
    )
    amount: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    # Snapshot at computation time, not live-linked.
    quality_score: Mapped[float] = mapped_column(
        Numeric(12, 4, asdecimal=False), nullable=False
    )
    tx_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    distributed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    weekly_reward: Mapped[WeeklyReward] = relationship(
        "WeeklyReward", back_populates="distributions"
    )
