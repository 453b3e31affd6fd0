"""Tests for the background scoring worker."""

import asyncio
from datetime import timedelta

import pytest

from stumble_higher.services.jobs import TRENDING_JOB, last_completed_at
from stumble_higher.services.rewards import get_weekly_reward, last_completed_week_start
from stumble_higher.services.worker import ScoringWorker


@pytest.mark.asyncio
async def test_disabled_worker_does_not_start(mocker):
    run_once = mocker.patch.object(ScoringWorker, "run_once")
    worker = ScoringWorker(enabled=False)

    await worker.start()

    assert worker._task is None
    run_once.assert_not_called()


@pytest.mark.asyncio
async def test_worker_runs_until_stopped(mocker):
    run_once = mocker.patch.object(ScoringWorker, "run_once")
    worker = ScoringWorker(enabled=True)

    await worker.start()
    await asyncio.sleep(0.05)
    await worker.stop()

    assert run_once.call_count >= 1
    assert worker._task is None


@pytest.mark.asyncio
async def test_worker_survives_tick_errors(mocker):
    run_once = mocker.patch.object(ScoringWorker, "run_once", side_effect=ValueError("boom"))
    worker = ScoringWorker(enabled=True)

    await worker.start()
    await asyncio.sleep(0.05)
    await worker.stop()

    run_once.assert_called()


def test_run_once_performs_every_due_task(seeded_config, make_resource, now):
    db = seeded_config
    stale = make_resource(scores_stale=True)
    worker = ScoringWorker(db_session=db, enabled=True)

    worker.run_once(now)

    assert last_completed_at(db, TRENDING_JOB) is not None
    db.refresh(stale)
    assert stale.scores_stale is False
    assert get_weekly_reward(db, last_completed_week_start(now.date())) is not None
    assert worker.state.last_reconcile == now
    assert worker.state.last_rewards_check == now


def test_run_once_skips_tasks_not_yet_due(seeded_config, mocker, now):
    worker = ScoringWorker(db_session=seeded_config, enabled=True)
    worker.run_once(now)

    trending = mocker.patch("stumble_higher.services.worker.recompute_trending_scores")
    reconcile = mocker.patch("stumble_higher.services.worker.reconcile_stale_scores")
    rewards = mocker.patch("stumble_higher.services.worker.compute_weekly_rewards")

    worker.run_once(now + timedelta(seconds=1))

    trending.assert_not_called()
    reconcile.assert_not_called()
    rewards.assert_not_called()
