import asyncio

import pytest

from superbridge.sync.scheduler import RefetchScheduler, SchedulerState


def test_interval_must_be_positive():
    async def _noop():
        return None

    with pytest.raises(ValueError):
        RefetchScheduler(0, _noop)


@pytest.mark.asyncio
async def test_trigger_now_fetches_and_rearms_while_running():
    calls = {"n": 0}

    async def _refetch():
        calls["n"] += 1

    scheduler = RefetchScheduler(10.0, _refetch)
    scheduler.start()
    assert scheduler.state is SchedulerState.SCHEDULED

    await scheduler.trigger_now()
    assert calls["n"] == 1
    assert scheduler.state is SchedulerState.SCHEDULED

    scheduler.stop()
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_trigger_during_fetch_queues_one_follow_up_run():
    release = asyncio.Event()
    active = {"now": 0, "max": 0, "runs": 0}

    async def _refetch():
        active["now"] += 1
        active["max"] = max(active["max"], active["now"])
        active["runs"] += 1
        await release.wait()
        active["now"] -= 1

    scheduler = RefetchScheduler(10.0, _refetch)
    first = scheduler.trigger_now()
    await asyncio.sleep(0)
    assert scheduler.state is SchedulerState.FETCHING

    second = scheduler.trigger_now()
    third = scheduler.trigger_now()
    assert second is first
    assert third is first

    release.set()
    await first
    assert active["runs"] == 2
    assert active["max"] == 1


@pytest.mark.asyncio
async def test_timer_fires_repeatedly():
    calls = {"n": 0}

    async def _refetch():
        calls["n"] += 1

    scheduler = RefetchScheduler(0.01, _refetch)
    scheduler.start()
    await asyncio.sleep(0.1)
    scheduler.stop()
    await scheduler.wait_idle()

    assert calls["n"] >= 2


@pytest.mark.asyncio
async def test_failed_fetch_still_rearms():
    async def _refetch():
        raise RuntimeError("boom")

    scheduler = RefetchScheduler(10.0, _refetch)
    scheduler.start()
    await scheduler.trigger_now()

    assert scheduler.state is SchedulerState.SCHEDULED
    scheduler.stop()


@pytest.mark.asyncio
async def test_stopped_scheduler_does_not_arm_after_manual_fetch():
    async def _refetch():
        return None

    scheduler = RefetchScheduler(10.0, _refetch)
    await scheduler.trigger_now()
    assert scheduler.state is SchedulerState.IDLE
    assert not scheduler.running


@pytest.mark.asyncio
async def test_delay_next_rearms_without_fetching():
    calls = {"n": 0}

    async def _refetch():
        calls["n"] += 1

    scheduler = RefetchScheduler(10.0, _refetch)
    scheduler.delay_next()
    assert scheduler.state is SchedulerState.IDLE

    scheduler.start()
    scheduler.delay_next()
    assert scheduler.state is SchedulerState.SCHEDULED
    assert calls["n"] == 0
    scheduler.stop()
