"""
Delayed callbacks with cancellation handles.

The only time-based deferral in the core is the start-up focus request,
which waits for the first render pass. It is modelled as a scheduled task
whose handle can be cancelled on teardown or when a newer focus request
supersedes it.

- `TimerScheduler` runs callbacks on a `threading.Timer`.
- `ManualScheduler` keeps a virtual clock that callers advance explicitly;
  it is used for headless session replay and in tests.
"""

from typing import Callable, List, Optional
import heapq
import itertools
import logging
import threading

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for one pending callback."""

    PENDING = "pending"
    CANCELLED = "cancelled"
    DONE = "done"

    def __init__(self, callback: Callable[[], None], delay: float):
        self._callback = callback
        self.delay = delay
        self.status = self.PENDING
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def pending(self) -> bool:
        return self.status == self.PENDING

    def cancel(self) -> bool:
        """Cancel the task. Returns False if it already ran or was cancelled."""
        with self._lock:
            if self.status != self.PENDING:
                return False
            self.status = self.CANCELLED
        if self._timer is not None:
            self._timer.cancel()
        logger.debug("Cancelled scheduled task (delay %.3fs)", self.delay)
        return True

    def run(self) -> None:
        with self._lock:
            if self.status != self.PENDING:
                return
            self.status = self.DONE
        try:
            self._callback()
        except Exception:
            logger.exception("Scheduled task failed")


class TimerScheduler:
    """Runs each task on its own daemon `threading.Timer`."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback, delay)
        timer = threading.Timer(delay, task.run)
        timer.daemon = True
        task._timer = timer
        timer.start()
        return task


class ManualScheduler:
    """Virtual-clock scheduler; nothing runs until `advance` or `run_pending`."""

    def __init__(self):
        self.now = 0.0
        self._queue: List[tuple] = []
        self._seq = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback, delay)
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), task))
        return task

    def pending_tasks(self) -> List[ScheduledTask]:
        return [task for _, _, task in sorted(self._queue) if task.pending]

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every task that became due.

        Returns the number of tasks that ran.
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self.now = due
            if task.pending:
                task.run()
                ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run every queued task regardless of its due time."""
        if not self._queue:
            return 0
        last_due = max(due for due, _, _ in self._queue)
        return self.advance(max(0.0, last_due - self.now))
