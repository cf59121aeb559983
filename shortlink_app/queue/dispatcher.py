"""
Click Dispatcher

Runs click increments outside the request/response cycle.

Architecture:
- dispatch() puts a ClickEvent on a bounded asyncio.Queue and returns
- a fixed pool of worker tasks drains the queue into store.increment_clicks
- failures are logged and dropped; they never reach the resolving caller
- a full queue drops the event instead of blocking the redirect
"""

import asyncio
import logging
from typing import List, Optional

from shortlink_app.queue.models import ClickEvent
from shortlink_app.storage.strategies import LinkStore

logger = logging.getLogger(__name__)


class ClickDispatcher:
    """
    Bounded queue plus worker pool for fire-and-forget click tracking.

    Workers belong to the dispatcher, not to any request, so a cancelled
    request does not cancel the increment it triggered.
    """

    def __init__(
        self,
        store: LinkStore,
        workers: int = 4,
        queue_size: int = 1000,
        shutdown_timeout: float = 5.0,
    ):
        """
        Initialize dispatcher with dependencies.

        Args:
            store: Link store receiving the increments
            workers: Number of worker tasks
            queue_size: Maximum pending events before new ones are dropped
            shutdown_timeout: Seconds stop() waits for the queue to drain
        """
        self.store = store
        self.workers = workers
        self.queue_size = queue_size
        self.shutdown_timeout = shutdown_timeout
        self._queue: Optional[asyncio.Queue] = None
        self._tasks: List[asyncio.Task] = []
        self.processed_count = 0
        self.failed_count = 0
        self.dropped_count = 0

    @property
    def running(self) -> bool:
        return self._queue is not None

    async def start(self) -> None:
        """Create the queue and spawn the workers on the running loop."""
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"click-worker-{i}")
            for i in range(self.workers)
        ]
        logger.info(
            "Click dispatcher started (workers=%d, queue_size=%d)",
            self.workers, self.queue_size,
        )

    def dispatch(self, event: ClickEvent) -> bool:
        """
        Enqueue a click without waiting for it to be applied.

        Returns:
            True if queued, False if dropped
        """
        if self._queue is None:
            self.dropped_count += 1
            logger.warning("Click dispatcher not running, dropping click for %s", event.short_code)
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped_count += 1
            logger.warning("Click queue full, dropping click for %s", event.short_code)
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued click has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        """Drain for up to shutdown_timeout seconds, then cancel the workers."""
        if not self.running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Click dispatcher stopping with %d unprocessed clicks", self._queue.qsize()
            )

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._queue = None
        logger.info(
            "Click dispatcher stopped (processed=%d, failed=%d, dropped=%d)",
            self.processed_count, self.failed_count, self.dropped_count,
        )

    async def _worker(self, worker_id: int) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.store.increment_clicks(event.short_code)
                self.processed_count += 1
            except Exception as e:
                # Never propagated: the redirect was answered before this ran
                self.failed_count += 1
                logger.debug(
                    "Worker %d failed to record click for %s: %s",
                    worker_id, event.short_code, e,
                )
            finally:
                self._queue.task_done()
