"""Tests for the fixed-interval pacing gate."""

import pytest

from src.domain.services.pacing import IntervalGate


class FakeClock:
    """Clock whose sleep advances time instantly."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.mark.asyncio
async def test_first_pass_does_not_wait(clock):
    gate = IntervalGate(0.5, clock=clock, sleep=clock.sleep)

    waited = await gate.wait()

    assert waited == 0.0
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_back_to_back_passes_are_spaced(clock):
    """Test that consecutive passes are at least one interval apart."""
    gate = IntervalGate(0.5, clock=clock, sleep=clock.sleep)

    await gate.wait()
    clock.now += 0.2
    waited = await gate.wait()

    assert waited == pytest.approx(0.3)
    assert clock.sleeps == [pytest.approx(0.3)]


@pytest.mark.asyncio
async def test_no_wait_after_interval_elapsed(clock):
    gate = IntervalGate(0.5, clock=clock, sleep=clock.sleep)

    await gate.wait()
    clock.now += 2.0
    waited = await gate.wait()

    assert waited == 0.0


@pytest.mark.asyncio
async def test_reset_forgets_last_pass(clock):
    gate = IntervalGate(0.5, clock=clock, sleep=clock.sleep)

    await gate.wait()
    gate.reset()
    waited = await gate.wait()

    assert waited == 0.0


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        IntervalGate(-1)
