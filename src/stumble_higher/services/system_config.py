"""Access to the persisted ``system_config`` key-value store."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from stumble_higher.models import SystemConfig
from stumble_higher.services.errors import ConfigurationError

logger = logging.getLogger(__name__)

AUTO_APPROVE_THRESHOLD = "auto_approve_threshold"
AUTO_HIDE_THRESHOLD = "auto_hide_threshold"
MIN_VOTES_FOR_AUTO_ACTION = "min_votes_for_auto_action"
WEEKLY_DISTRIBUTION_PERCENTAGE = "weekly_distribution_percentage"
MAX_REPUTATION_WEIGHT = "max_reputation_weight"

# Seed values written on first boot.
DEFAULT_CONFIG: dict[str, Any] = {
    "submission_cost": 1000,
    "reward_pool_percentage": 60,
    "treasury_percentage": 30,
    "lp_percentage": 10,
    AUTO_APPROVE_THRESHOLD: 10,
    AUTO_HIDE_THRESHOLD: -5,
    MIN_VOTES_FOR_AUTO_ACTION: 3,
    MAX_REPUTATION_WEIGHT: 5.0,
    WEEKLY_DISTRIBUTION_PERCENTAGE: 80,
}

REQUIRED_SCORING_KEYS = (
    AUTO_APPROVE_THRESHOLD,
    AUTO_HIDE_THRESHOLD,
    MIN_VOTES_FOR_AUTO_ACTION,
)

NUMERIC_KEYS = (*REQUIRED_SCORING_KEYS, MAX_REPUTATION_WEIGHT, WEEKLY_DISTRIBUTION_PERCENTAGE)


@dataclass(frozen=True)
class ScoringConfig:
    """Thresholds consumed by the quality scorer."""

    auto_approve_threshold: float
    auto_hide_threshold: float
    min_votes_required: int
    max_reputation_weight: float = 5.0


def get_config_value(db: Session, key: str) -> Any | None:
    """Return the stored value for ``key`` or ``None`` when unset."""
    row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
    return None if row is None else row.value


def get_all_config(db: Session) -> dict[str, Any]:
    """Return every stored configuration entry."""
    return {row.key: row.value for row in db.query(SystemConfig).order_by(SystemConfig.key)}


def set_config_value(db: Session, key: str, value: Any, updated_by: str | None = None) -> None:
    """Insert or update a configuration entry (caller commits).

    Raises:
        ConfigurationError: If a numeric key is given a non-numeric value.
    """
    if key in NUMERIC_KEYS:
        _as_number(key, value)
    row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
    if row is None:
        db.add(SystemConfig(key=key, value=value, updated_by=updated_by))
    else:
        row.value = value
        row.updated_by = updated_by
    db.flush()


def seed_default_config(db: Session) -> int:
    """Write default values for any missing keys and return how many were added."""
    existing = {key for (key,) in db.query(SystemConfig.key)}
    added = 0
    for key, value in DEFAULT_CONFIG.items():
        if key in existing:
            continue
        db.add(SystemConfig(key=key, value=value))
        added += 1
    if added:
        db.commit()
        logger.info("Seeded %d system_config defaults", added)
    return added


def _as_number(key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"Config key {key!r} is not numeric: {value!r}") from err
    if not math.isfinite(number):
        raise ConfigurationError(f"Config key {key!r} is not finite: {value!r}")
    return number


def load_scoring_config(db: Session) -> ScoringConfig:
    """Read scorer thresholds from the config table.

    Raises:
        ConfigurationError: If any threshold key is missing or non-numeric.
    """
    values = {
        row.key: row.value
        for row in db.query(SystemConfig).filter(
            SystemConfig.key.in_((*REQUIRED_SCORING_KEYS, MAX_REPUTATION_WEIGHT))
        )
    }
    missing = [key for key in REQUIRED_SCORING_KEYS if values.get(key) is None]
    if missing:
        raise ConfigurationError(f"Missing scoring configuration: {', '.join(missing)}")

    max_weight = values.get(MAX_REPUTATION_WEIGHT)
    return ScoringConfig(
        auto_approve_threshold=_as_number(
            AUTO_APPROVE_THRESHOLD, values[AUTO_APPROVE_THRESHOLD]
        ),
        auto_hide_threshold=_as_number(AUTO_HIDE_THRESHOLD, values[AUTO_HIDE_THRESHOLD]),
        min_votes_required=int(
            _as_number(MIN_VOTES_FOR_AUTO_ACTION, values[MIN_VOTES_FOR_AUTO_ACTION])
        ),
        max_reputation_weight=(
            DEFAULT_CONFIG[MAX_REPUTATION_WEIGHT]
            if max_weight is None
            else _as_number(MAX_REPUTATION_WEIGHT, max_weight)
        ),
    )


def load_distribution_percentage(db: Session) -> float:
    """Return the share of weekly submission fees paid out as rewards."""
    value = get_config_value(db, WEEKLY_DISTRIBUTION_PERCENTAGE)
    if value is None:
        return float(DEFAULT_CONFIG[WEEKLY_DISTRIBUTION_PERCENTAGE])
    return _as_number(WEEKLY_DISTRIBUTION_PERCENTAGE, value)
