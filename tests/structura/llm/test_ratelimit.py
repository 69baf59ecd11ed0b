"""Tests for the minimum-interval throttle."""

import asyncio

import pytest

from structura.llm.ratelimit import MinIntervalThrottle


@pytest.mark.asyncio
async def test_first_acquire_is_immediate(fake_clock):
    throttle = MinIntervalThrottle(1.0, clock=fake_clock, sleep=fake_clock.sleep)
    stamp = await throttle.acquire()
    assert stamp == fake_clock.now
    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_back_to_back_acquires_are_spaced(fake_clock):
    throttle = MinIntervalThrottle(1.0, clock=fake_clock, sleep=fake_clock.sleep)
    stamps = [await throttle.acquire() for _ in range(4)]
    gaps = [b - a for a, b in zip(stamps, stamps[1:])]
    assert all(gap >= 1.0 for gap in gaps)
    assert fake_clock.sleeps == [1.0, 1.0, 1.0]


@pytest.mark.asyncio
async def test_no_wait_when_interval_already_elapsed(fake_clock):
    throttle = MinIntervalThrottle(1.0, clock=fake_clock, sleep=fake_clock.sleep)
    await throttle.acquire()
    fake_clock.now += 5.0
    await throttle.acquire()
    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_waits_only_the_remainder(fake_clock):
    throttle = MinIntervalThrottle(1.0, clock=fake_clock, sleep=fake_clock.sleep)
    await throttle.acquire()
    fake_clock.now += 0.25
    await throttle.acquire()
    assert fake_clock.sleeps == [pytest.approx(0.75)]


@pytest.mark.asyncio
async def test_concurrent_callers_are_serialized(fake_clock):
    throttle = MinIntervalThrottle(0.5, clock=fake_clock, sleep=fake_clock.sleep)
    stamps = await asyncio.gather(*(throttle.acquire() for _ in range(3)))
    ordered = sorted(stamps)
    assert all(b - a >= 0.5 for a, b in zip(ordered, ordered[1:]))


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        MinIntervalThrottle(-1)
