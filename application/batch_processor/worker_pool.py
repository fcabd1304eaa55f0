"""
Worker Pool

Bounded async worker pool for batch operations. A fixed number of worker
coroutines pull items from a shared queue, so a new item starts as soon as
any running one finishes (sliding window).
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from ...core.constants import MAX_CONCURRENT_JOBS

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class PoolStats:
    """Statistics for the worker pool."""

    total_tasks: int = 0
    started_tasks: int = 0
    completed_tasks: int = 0
    failed_tasks: int = 0
    cancelled_tasks: int = 0
    active_workers: int = 0
    peak_active_workers: int = 0


class WorkerPool(Generic[T]):
    """
    Async worker pool with sliding-window admission.

    Features:
    - Configurable number of workers
    - Stop predicate checked before each item is claimed
    - Cancellation of in-flight items
    - Statistics
    """

    def __init__(
        self,
        max_workers: int = MAX_CONCURRENT_JOBS,
        name: str = "BatchWorkerPool",
    ):
        """
        Initialize the worker pool.

        Args:
            max_workers: Maximum number of concurrently running items
            name: Name for the pool (for logging)
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.name = name
        self.max_workers = max_workers
        self.stats = PoolStats()

        self._workers: List[asyncio.Task] = []
        self._cancelled = False

    async def run(
        self,
        handler: Callable[[T], Awaitable[None]],
        items: Sequence[T],
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[T]:
        """
        Run *handler* over *items* with at most ``max_workers`` in flight.

        The handler owns its own error reporting; an exception escaping it
        is logged and counted, and the worker moves on to the next item.

        Args:
            handler: Coroutine function called once per item
            items: Items in submission order
            should_stop: Checked before claiming each item

        Returns:
            Items that were never started.
        """
        queue: asyncio.Queue = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)

        self.stats = PoolStats(total_tasks=len(items))
        worker_count = min(self.max_workers, len(items))
        if worker_count == 0:
            return []

        self._workers = [
            asyncio.create_task(self._worker(queue, handler, should_stop), name=f"{self.name}-{i}")
            for i in range(worker_count)
        ]
        logger.info(f"Started {self.name} with {worker_count} workers for {len(items)} items")

        try:
            await asyncio.gather(*self._workers, return_exceptions=True)
        except asyncio.CancelledError:
            # Let in-flight items settle before propagating
            for worker in self._workers:
                worker.cancel()
            await asyncio.wait(self._workers)
            raise
        finally:
            self._workers = []

        unstarted = []
        while not queue.empty():
            unstarted.append(queue.get_nowait())
        logger.info(
            f"{self.name} finished: {self.stats.completed_tasks} completed, "
            f"{self.stats.failed_tasks} failed, {self.stats.cancelled_tasks} cancelled, "
            f"{len(unstarted)} not started"
        )
        return unstarted

    async def _worker(
        self,
        queue: asyncio.Queue,
        handler: Callable[[T], Awaitable[None]],
        should_stop: Optional[Callable[[], bool]],
    ) -> None:
        while not self._cancelled:
            if should_stop is not None and should_stop():
                return
            try:
                item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            self.stats.started_tasks += 1
            self.stats.active_workers += 1
            self.stats.peak_active_workers = max(
                self.stats.peak_active_workers, self.stats.active_workers
            )
            try:
                await handler(item)
                self.stats.completed_tasks += 1
            except asyncio.CancelledError:
                self.stats.cancelled_tasks += 1
                raise
            except Exception as e:
                self.stats.failed_tasks += 1
                logger.error(f"{self.name}: task failed: {e}", exc_info=True)
            finally:
                self.stats.active_workers -= 1

    def cancel(self) -> None:
        """Stop claiming items and cancel the ones in flight."""
        self._cancelled = True
        for worker in self._workers:
            if not worker.done():
                worker.cancel()
