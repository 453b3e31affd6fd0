"""Tests for the persisted system configuration helpers."""

import pytest

from stumble_higher.models import SystemConfig
from stumble_higher.services.errors import ConfigurationError
from stumble_higher.services.system_config import (
    AUTO_APPROVE_THRESHOLD,
    AUTO_HIDE_THRESHOLD,
    DEFAULT_CONFIG,
    MAX_REPUTATION_WEIGHT,
    MIN_VOTES_FOR_AUTO_ACTION,
    WEEKLY_DISTRIBUTION_PERCENTAGE,
    get_all_config,
    load_distribution_percentage,
    load_scoring_config,
    seed_default_config,
    set_config_value,
)


def test_seed_default_config_is_idempotent(db_session) -> None:
    assert seed_default_config(db_session) == len(DEFAULT_CONFIG)
    assert seed_default_config(db_session) == 0
    assert get_all_config(db_session) == dict(sorted(DEFAULT_CONFIG.items()))


def test_load_scoring_config_reads_seeded_values(seeded_config) -> None:
    config = load_scoring_config(seeded_config)

    assert config.auto_approve_threshold == 10
    assert config.auto_hide_threshold == -5
    assert config.min_votes_required == 3
    assert config.max_reputation_weight == 5.0


def test_missing_threshold_raises(db_session) -> None:
    """An empty config table must not yield permissive defaults."""
    set_config_value(db_session, AUTO_HIDE_THRESHOLD, -5)
    db_session.commit()

    with pytest.raises(ConfigurationError, match=AUTO_APPROVE_THRESHOLD):
        load_scoring_config(db_session)


@pytest.mark.parametrize(
    "key",
    [
        AUTO_APPROVE_THRESHOLD,
        AUTO_HIDE_THRESHOLD,
        MIN_VOTES_FOR_AUTO_ACTION,
        MAX_REPUTATION_WEIGHT,
        WEEKLY_DISTRIBUTION_PERCENTAGE,
    ],
)
@pytest.mark.parametrize("value", ["lots", "nan", [1], {"n": 1}])
def test_numeric_keys_reject_bad_values(seeded_config, key, value) -> None:
    with pytest.raises(ConfigurationError):
        set_config_value(seeded_config, key, value)

    seeded_config.rollback()
    assert get_all_config(seeded_config)[key] == DEFAULT_CONFIG[key]


def test_other_keys_accept_any_value(seeded_config) -> None:
    set_config_value(seeded_config, "treasury_percentage", "about a third")

    assert get_all_config(seeded_config)["treasury_percentage"] == "about a third"


def test_non_numeric_stored_threshold_raises(seeded_config) -> None:
    seeded_config.query(SystemConfig).filter_by(key=AUTO_APPROVE_THRESHOLD).update(
        {SystemConfig.value: "lots"}, synchronize_session=False
    )
    seeded_config.commit()

    with pytest.raises(ConfigurationError):
        load_scoring_config(seeded_config)


def test_set_config_value_updates_existing_row(seeded_config) -> None:
    set_config_value(seeded_config, MAX_REPUTATION_WEIGHT, 3.5)
    seeded_config.commit()

    assert load_scoring_config(seeded_config).max_reputation_weight == 3.5


def test_distribution_percentage_defaults_to_80(db_session) -> None:
    assert load_distribution_percentage(db_session) == 80.0

    set_config_value(db_session, WEEKLY_DISTRIBUTION_PERCENTAGE, 50)
    db_session.commit()
    assert load_distribution_percentage(db_session) == 50.0
