"""Cancellable repeating tasks.

The engine only ever talks to a ``Scheduler``. Two implementations exist: a
virtual clock advanced by hand (tests, gymnasium env) and one backed by
``pygame.time.set_timer`` for interactive play.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Dict, List, Optional, Protocol


logger = logging.getLogger(__name__)

Callback = Callable[[], None]

_task_ids = itertools.count(1)


class TaskHandle:
    """Handle to one repeating task. ``cancel`` may be called any number of times."""

    def __init__(self, period_ms: int, callback: Callback, on_cancel: Callable[["TaskHandle"], None]) -> None:
        self.task_id = next(_task_ids)
        self.period_ms = int(period_ms)
        self.callback = callback
        self._on_cancel = on_cancel
        self._active = True
        self.next_due_ms = 0

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._on_cancel(self)


class Scheduler(Protocol):
    def schedule_repeating(self, period_ms: int, callback: Callback) -> TaskHandle:
        ...


def _check_period(period_ms: int) -> int:
    period_ms = int(period_ms)
    if period_ms <= 0:
        raise ValueError(f"period must be positive, got {period_ms}")
    return period_ms


class ManualScheduler:
    """Deterministic scheduler driven by ``advance``.

    Tasks due at the same instant fire in the order they were scheduled. A task
    cancelled from inside another callback does not fire again.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._tasks: List[TaskHandle] = []

    def schedule_repeating(self, period_ms: int, callback: Callback) -> TaskHandle:
        period_ms = _check_period(period_ms)
        handle = TaskHandle(period_ms, callback, self._remove)
        handle.next_due_ms = self.now_ms + period_ms
        self._tasks.append(handle)
        return handle

    def _remove(self, handle: TaskHandle) -> None:
        if handle in self._tasks:
            self._tasks.remove(handle)

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    def _next_due(self, until_ms: int) -> Optional[TaskHandle]:
        due = [t for t in self._tasks if t.next_due_ms <= until_ms]
        if not due:
            return None
        return min(due, key=lambda t: (t.next_due_ms, t.task_id))

    def advance(self, ms: int) -> int:
        """Move the clock forward ``ms`` and run everything that falls due. Returns callbacks run."""
        target = self.now_ms + int(ms)
        fired = 0
        while True:
            task = self._next_due(target)
            if task is None:
                break
            self.now_ms = task.next_due_ms
            task.next_due_ms += task.period_ms
            task.callback()
            fired += 1
        self.now_ms = target
        return fired


class PygameScheduler:
    """Scheduler backed by pygame timer events.

    Each live task owns one custom event type armed with ``set_timer``; the
    event carries the task id so events queued before a cancel are ignored.
    Call ``dispatch`` for every event pulled from the pygame queue.
    """

    def __init__(self) -> None:
        import pygame

        self._pygame = pygame
        self._free_types: List[int] = []
        self._by_type: Dict[int, TaskHandle] = {}

    def _event_type(self) -> int:
        if self._free_types:
            return self._free_types.pop()
        return self._pygame.event.custom_type()

    def schedule_repeating(self, period_ms: int, callback: Callback) -> TaskHandle:
        period_ms = _check_period(period_ms)
        handle = TaskHandle(period_ms, callback, self._disarm)
        event_type = self._event_type()
        self._by_type[event_type] = handle
        event = self._pygame.event.Event(event_type, {"task_id": handle.task_id})
        self._pygame.time.set_timer(event, period_ms)
        logger.debug("armed pygame timer %s every %d ms", event_type, period_ms)
        return handle

    def _disarm(self, handle: TaskHandle) -> None:
        for event_type, owner in list(self._by_type.items()):
            if owner is handle:
                self._pygame.time.set_timer(event_type, 0)
                del self._by_type[event_type]
                self._free_types.append(event_type)
                logger.debug("disarmed pygame timer %s", event_type)

    def dispatch(self, event) -> bool:
        """Run the task for a timer event. Returns True if the event was a timer event."""
        handle = self._by_type.get(event.type)
        if handle is None:
            return False
        if getattr(event, "task_id", None) == handle.task_id and handle.active:
            handle.callback()
        return True


class RepeatingTimer:
    """A single recurring action whose period can be changed.

    At most one scheduled task exists at any time: every (re)start cancels
    the previous handle before arming a new one.
    """

    def __init__(self, scheduler: Scheduler, callback: Callback, name: str = "timer") -> None:
        self.scheduler = scheduler
        self.callback = callback
        self.name = name
        self._handle: Optional[TaskHandle] = None
        self._period_ms: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def period_ms(self) -> Optional[int]:
        return self._period_ms

    def start(self, period_ms: int) -> None:
        self.stop()
        self._period_ms = _check_period(period_ms)
        self._handle = self.scheduler.schedule_repeating(self._period_ms, self.callback)
        logger.debug("%s started at %d ms", self.name, self._period_ms)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("%s stopped", self.name)

    def set_period(self, period_ms: int) -> None:
        """Use ``period_ms`` for the next tick onward; does not start a stopped timer."""
        if self.running:
            self.start(period_ms)
        else:
            self._period_ms = _check_period(period_ms)
