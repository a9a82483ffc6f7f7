"""Bounded work queue for rate-limited generation stages."""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BoundedWorkQueue:
    """Runs a worker over items with at most ``concurrency`` in flight.

    With concurrency 1 items are processed strictly one at a time in list
    order. Results come back in item order. A worker exception is re-raised
    after the remaining items finish; callers that need per-item tolerance
    catch inside the worker.
    """

    def __init__(self, concurrency: int = 1):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
    ) -> list[R]:
        if not items:
            return []

        queue: asyncio.Queue = asyncio.Queue()
        for index, item in enumerate(items):
            queue.put_nowait((index, item))

        results: list = [None] * len(items)
        errors: list[BaseException] = []

        async def consume() -> None:
            while True:
                try:
                    index, item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    results[index] = await worker(item)
                except Exception as e:
                    logger.debug(f"Work item {index} failed: {e}")
                    errors.append(e)
                finally:
                    queue.task_done()

        consumers = min(self.concurrency, len(items))
        await asyncio.gather(*(consume() for _ in range(consumers)))

        if errors:
            raise errors[0]
        return results
