"""Unit tests for BoundedWorkQueue."""

import asyncio

import pytest

from movie_agent.work_queue import BoundedWorkQueue


class ConcurrencyProbe:
    def __init__(self):
        self.active = 0
        self.peak = 0
        self.order: list[int] = []

    async def work(self, item: int) -> int:
        self.active += 1
        self.peak = max(self.peak, self.active)
        self.order.append(item)
        await asyncio.sleep(0.001)
        self.active -= 1
        return item * 10


@pytest.mark.asyncio
async def test_concurrency_one_runs_in_order_one_at_a_time():
    """Test that concurrency one runs items one at a time in order."""
    probe = ConcurrencyProbe()

    results = await BoundedWorkQueue(1).run([1, 2, 3, 4], probe.work)

    assert results == [10, 20, 30, 40]
    assert probe.order == [1, 2, 3, 4]
    assert probe.peak == 1


@pytest.mark.asyncio
async def test_higher_concurrency_is_bounded():
    """Test that concurrency never exceeds the limit."""
    probe = ConcurrencyProbe()

    results = await BoundedWorkQueue(2).run(list(range(6)), probe.work)

    assert results == [i * 10 for i in range(6)]
    assert probe.peak == 2


@pytest.mark.asyncio
async def test_empty_items_returns_empty_list():
    """Test running an empty list."""
    assert await BoundedWorkQueue(1).run([], ConcurrencyProbe().work) == []


@pytest.mark.asyncio
async def test_failure_does_not_stop_remaining_items():
    """Test that one failure does not stop the others."""
    seen = []

    async def work(item):
        seen.append(item)
        if item == 1:
            raise RuntimeError("item 1 failed")
        return item

    with pytest.raises(RuntimeError, match="item 1 failed"):
        await BoundedWorkQueue(1).run([0, 1, 2], work)

    assert seen == [0, 1, 2]


def test_rejects_zero_concurrency():
    """Test that zero concurrency is rejected."""
    with pytest.raises(ValueError):
        BoundedWorkQueue(0)
