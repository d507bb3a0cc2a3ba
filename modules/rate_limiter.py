"""
Paced Task Queue

Runs page fetches strictly one at a time with a minimum delay between the
end of one fetch and the start of the next (the politeness interval).

Behaviour:
- The configured delay is a hard floor, never an average
- Delay grows by backoff_factor after a failed fetch (up to max_delay)
- Delay relaxes by 10% after each success, never below the floor
- Sequential: items are handled in input order, one at a time
"""

import asyncio
import time
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

from loguru import logger

T = TypeVar('T')
R = TypeVar('R')


class PacedTaskQueue:
    """
    Sequential task runner with a politeness interval.

    Usage:
        queue = PacedTaskQueue(min_delay=3.0)
        result = await queue.submit(lambda: session.goto(url))
        records = await queue.run(targets, process_target)
    """

    def __init__(
        self,
        min_delay: float = 3.0,
        max_delay: float = 10.0,
        backoff_factor: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize task queue.

        Args:
            min_delay: Minimum seconds between consecutive tasks (hard floor)
            max_delay: Upper bound for the delay after repeated errors
            backoff_factor: Multiplier applied to the delay after an error
            clock: Monotonic clock (injectable for tests)
            sleep: Async sleep (injectable for tests)
        """
        self.min_delay = max(0.0, min_delay)
        self.max_delay = max(self.min_delay, max_delay)
        self.backoff_factor = max(1.0, backoff_factor)
        self.current_delay = self.min_delay

        self._clock = clock
        self._sleep = sleep
        self._last_finished: Optional[float] = None
        self._lock = asyncio.Lock()

        # Statistics
        self.total_tasks = 0
        self.total_waited = 0.0
        self.total_errors = 0

    def _get_wait_time(self) -> float:
        if self._last_finished is None:
            return 0.0
        elapsed = self._clock() - self._last_finished
        return max(0.0, self.current_delay - elapsed)

    async def pace(self) -> float:
        """
        Wait until the politeness interval since the last task has passed.

        Returns:
            Seconds waited
        """
        wait_time = self._get_wait_time()
        if wait_time > 0:
            logger.debug(f"Pacing: waiting {wait_time:.1f}s")
            await self._sleep(wait_time)
            self.total_waited += wait_time
        return wait_time

    def mark_finished(self):
        self._last_finished = self._clock()

    async def submit(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Run one paced task.

        The lock keeps tasks from overlapping even if a caller forgets to
        await them in order.
        """
        async with self._lock:
            await self.pace()
            try:
                return await task()
            finally:
                self.total_tasks += 1
                self.mark_finished()

    async def run(self, items: Iterable[T], handler: Callable[[T], Awaitable[R]]) -> List[R]:
        """
        Handle items one at a time, in order.

        Pacing applies to the fetches the handler submits, not to the
        handler calls themselves.
        """
        results = []
        for item in items:
            results.append(await handler(item))
        return results

    def record_success(self):
        """Relax the delay after a successful fetch."""
        if self.current_delay > self.min_delay:
            self.current_delay = max(self.min_delay, self.current_delay * 0.9)
            logger.debug(f"Reduced pacing delay to {self.current_delay:.1f}s")

    def record_error(self):
        """Back off after a failed fetch."""
        self.total_errors += 1
        base = self.current_delay or 1.0
        self.current_delay = min(self.max_delay, base * self.backoff_factor)
        logger.info(f"Fetch error: pacing delay increased to {self.current_delay:.1f}s")

    def get_stats(self) -> dict:
        """
        Get queue statistics.

        Returns:
            Dictionary with stats
        """
        return {
            'total_tasks': self.total_tasks,
            'total_errors': self.total_errors,
            'total_waited': round(self.total_waited, 1),
            'avg_wait_per_task': round(self.total_waited / max(1, self.total_tasks), 2),
            'current_delay': round(self.current_delay, 2),
        }
