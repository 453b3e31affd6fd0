"""initial schema

Revision ID: 5b1e0c7d2a41
Revises:
Create Date: 2026-10-18 09:12:44.318502

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1e0c7d2a41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Mirrors stumble_higher.services.system_config.DEFAULT_CONFIG at the time of writing.
SEED_CONFIG = {
    "submission_cost": 1000,
    "reward_pool_percentage": 60,
    "treasury_percentage": 30,
    "lp_percentage": 10,
    "auto_approve_threshold": 10,
    "auto_hide_threshold": -5,
    "min_votes_for_auto_action": 3,
    "max_reputation_weight": 5.0,
    "weekly_distribution_percentage": 80,
}


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create every table and seed scoring configuration."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("reputation_score", sa.Integer(), nullable=False),
        sa.Column("total_submissions", sa.Integer(), nullable=False),
        sa.Column("total_upvotes", sa.Integer(), nullable=False),
        sa.Column("total_downvotes", sa.Integer(), nullable=False),
        sa.Column("total_rewards_earned", sa.Numeric(18, 4), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("is_suspended", sa.Boolean(), nullable=False),
        sa.Column("is_genesis", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "user_preferences",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("preferred_categories", sa.JSON(), nullable=False),
        sa.Column("excluded_categories", sa.JSON(), nullable=False),
        sa.Column("preferred_difficulty", sa.String(length=16), nullable=False),
        sa.Column("max_time_minutes", sa.Integer(), nullable=False),
        sa.Column("discovery_algorithm", sa.String(length=16), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_table(
        "resources",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("author", sa.Text(), nullable=True),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("difficulty_level", sa.String(length=16), nullable=True),
        sa.Column("estimated_time_minutes", sa.Integer(), nullable=True),
        sa.Column("submitted_by", sa.String(length=36), nullable=True),
        sa.Column("submission_tx_hash", sa.Text(), nullable=True),
        sa.Column("submission_amount", sa.Numeric(18, 4), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False),
        sa.Column("downvotes", sa.Integer(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("unique_viewers", sa.Integer(), nullable=False),
        sa.Column("quality_score", sa.Numeric(12, 4), nullable=False),
        sa.Column("trending_score", sa.Numeric(12, 4), nullable=False),
        sa.Column("scores_stale", sa.Boolean(), nullable=False),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_genesis", sa.Boolean(), nullable=False),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'hidden')",
            name="ck_resources_status",
        ),
        sa.CheckConstraint(
            "difficulty_level IS NULL OR "
            "difficulty_level IN ('beginner', 'intermediate', 'advanced')",
            name="ck_resources_difficulty",
        ),
        sa.ForeignKeyConstraint(["submitted_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("url"),
    )
    op.create_index("ix_resources_submitted_by", "resources", ["submitted_by"])
    op.create_index("ix_resources_status", "resources", ["status"])
    op.create_index("ix_resources_category", "resources", ["category"])
    op.create_index("ix_resources_quality_score", "resources", ["quality_score"])
    op.create_index("ix_resources_trending_score", "resources", ["trending_score"])
    op.create_index("ix_resources_created_at", "resources", ["created_at"])

    op.create_table(
        "votes",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("vote_type", sa.String(length=4), nullable=False),
        sa.Column("weight", sa.Numeric(8, 4), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("vote_type IN ('up', 'down')", name="ck_votes_vote_type"),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("resource_id", "user_id", name="uq_votes_resource_user"),
    )
    op.create_index("ix_votes_resource_id", "votes", ["resource_id"])
    op.create_index("ix_votes_user_id", "votes", ["user_id"])
    op.create_index("ix_votes_created_at", "votes", ["created_at"])

    op.create_table(
        "user_interactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("session_id", sa.Text(), nullable=True),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("interaction_type", sa.String(length=16), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_interactions_user_id", "user_interactions", ["user_id"])
    op.create_index("ix_user_interactions_resource_id", "user_interactions", ["resource_id"])
    op.create_index("ix_user_interactions_type", "user_interactions", ["interaction_type"])
    op.create_index("ix_user_interactions_created_at", "user_interactions", ["created_at"])

    op.create_table(
        "weekly_rewards",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("week_end", sa.Date(), nullable=False),
        sa.Column("total_pool_amount", sa.Numeric(18, 4), nullable=False),
        sa.Column("total_submissions", sa.Integer(), nullable=False),
        sa.Column("total_participants", sa.Integer(), nullable=False),
        sa.Column("calculation_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("distribution_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("week_start"),
    )
    op.create_table(
        "reward_distributions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("weekly_reward_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("amount", sa.Numeric(18, 4), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("quality_score", sa.Numeric(12, 4), nullable=False),
        sa.Column("tx_hash", sa.Text(), nullable=True),
        sa.Column("distributed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["weekly_reward_id"], ["weekly_rewards.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_reward_distributions_weekly_reward_id",
        "reward_distributions",
        ["weekly_reward_id"],
    )

    system_config = op.create_table(
        "system_config",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_by", sa.String(length=36), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key"),
    )
    op.create_table(
        "job_locks",
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("holder", sa.Text(), nullable=True),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("name"),
    )
    op.create_table(
        "analytics_events",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("resource_id", sa.String(length=36), nullable=True),
        sa.Column("session_id", sa.Text(), nullable=True),
        sa.Column("properties", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_analytics_events_type", "analytics_events", ["event_type"])
    op.create_index("ix_analytics_events_created_at", "analytics_events", ["created_at"])
    op.create_table(
        "admin_actions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("admin_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("target_type", sa.String(length=32), nullable=True),
        sa.Column("target_id", sa.String(length=64), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["admin_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.bulk_insert(
        system_config,
        [{"key": key, "value": value} for key, value in SEED_CONFIG.items()],
    )


def downgrade() -> None:
    """Drop every table."""
    op.drop_table("admin_actions")
    op.drop_index("ix_analytics_events_created_at", table_name="analytics_events")
    op.drop_index("ix_analytics_events_type", table_name="analytics_events")
    op.drop_table("analytics_events")
    op.drop_table("job_locks")
    op.drop_table("system_config")
    op.drop_index("ix_reward_distributions_weekly_reward_id", table_name="reward_distributions")
    op.drop_table("reward_distributions")
    op.drop_table("weekly_rewards")
    for index in (
        "ix_user_interactions_created_at",
        "ix_user_interactions_type",
        "ix_user_interactions_resource_id",
        "ix_user_interactions_user_id",
    ):
        op.drop_index(index, table_name="user_interactions")
    op.drop_table("user_interactions")
    op.drop_index("ix_votes_created_at", table_name="votes")
    op.drop_index("ix_votes_user_id", table_name="votes")
    op.drop_index("ix_votes_resource_id", table_name="votes")
    op.drop_table("votes")
    for index in (
        "ix_resources_created_at",
        "ix_resources_trending_score",
        "ix_resources_quality_score",
        "ix_resources_category",
        "ix_resources_status",
        "ix_resources_submitted_by",
    ):
        op.drop_index(index, table_name="resources")
    op.drop_table("resources")
    op.drop_table("user_preferences")
    op.drop_table("users")
