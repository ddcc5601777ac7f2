"""Virtual clock and cancellable task list driving the simulation."""

import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class ScheduledTask:
    """
    A callback due at a point in virtual time.

    repeat=0 fires once, repeat=n fires n + 1 times, loop=True fires
    until cancelled.
    """

    def __init__(self, scheduler: "Scheduler", delay: float,
                 callback: Callable[[], None], repeat: int = 0,
                 loop: bool = False):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.repeat = repeat
        self.loop = loop
        self.remaining = repeat
        self.fire_count = 0
        self.due = 0.0
        self.cancelled = False
        self._generation = 0

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True
        self._generation += 1

    def reset(self, delay: Optional[float] = None,
              repeat: Optional[int] = None) -> None:
        """Restart the task from the current time, discarding progress."""
        if delay is not None:
            self.delay = delay
        if repeat is not None:
            self.repeat = repeat
        self.remaining = self.repeat
        self.fire_count = 0
        self.cancelled = False
        self._generation += 1
        self.scheduler._push(self)

    def _fire(self) -> None:
        self.fire_count += 1
        if self.loop:
            self.scheduler._push(self)
        elif self.remaining > 0:
            self.remaining -= 1
            self.scheduler._push(self)
        else:
            self.cancelled = True
        self.callback()

    def __repr__(self) -> str:
        return (f"ScheduledTask(due={self.due}, delay={self.delay}, "
                f"fired={self.fire_count}, cancelled={self.cancelled})")


class Scheduler:
    """
    Single-threaded discrete-event clock.

    Tasks due at the same instant fire in the order they were queued.
    Callbacks may schedule or cancel other tasks while the clock advances.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def _push(self, task: ScheduledTask) -> None:
        task.due = self.now + task.delay
        heapq.heappush(self._queue,
                       (task.due, next(self._counter), task._generation, task))

    def schedule(self, delay: float, callback: Callable[[], None],
                 repeat: int = 0, loop: bool = False) -> ScheduledTask:
        """Queue callback to run after delay time units."""
        if delay < 0:
            raise ValueError(f"Task delay must be non-negative, got {delay}")
        if repeat < 0:
            raise ValueError(f"Task repeat count must be non-negative, got {repeat}")
        if loop and delay == 0:
            raise ValueError("Looping tasks need a positive delay")
        task = ScheduledTask(self, delay, callback, repeat=repeat, loop=loop)
        self._push(task)
        return task

    def advance(self, duration: float) -> None:
        """Run every task due within the next duration time units."""
        if duration < 0:
            raise ValueError(f"Cannot advance by a negative duration: {duration}")
        target = self.now + duration
        while self._queue and self._queue[0][0] <= target:
            due, _, generation, task = heapq.heappop(self._queue)
            if task.cancelled or generation != task._generation:
                continue
            self.now = due
            task._fire()
        self.now = target

    @property
    def pending(self) -> int:
        """Number of live queued tasks."""
        return sum(1 for _, _, generation, task in self._queue
                   if not task.cancelled and generation == task._generation)
