# command_queue.py
# Serializes move requests and paces board-changing moves by a settle delay.

import asyncio
import heapq
import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional, Protocol, Tuple

from core import DIRECTION

logger = logging.getLogger(__name__)

Completion = Callable[[bool], None]


# --- Schedulers ---

class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay, e.g. an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules on whichever asyncio event loop is running when a timer is needed."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback, *args)


class VirtualTimer:
    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """
    A scheduler driven by hand. Nothing fires until advance() moves time past
    a timer's deadline; callbacks then run synchronously, in deadline order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: List[Tuple[float, int, VirtualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> VirtualTimer:
        timer = VirtualTimer(self.now + delay, callback, args)
        heapq.heappush(self._timers, (timer.when, next(self._counter), timer))
        return timer

    def pending(self) -> int:
        return sum(1 for _, _, timer in self._timers if not timer.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._timers and self._timers[0][0] <= target:
            when, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self.now = when
            timer.callback(*timer.args)
        self.now = target


# --- Queue ---

@dataclass
class MoveCommand:
    direction: DIRECTION
    completion: Completion


class CommandQueue:
    """
    FIFO of move commands drained against a settle delay.

    A drain pops commands one by one and reports each result through its
    completion. After a move that changed the board the drain stops and
    resumes ``delay`` seconds later; moves that changed nothing cost no time.
    Waiting commands plus the one running or settling take up to ``capacity``
    slots; commands arriving when all slots are taken are dropped without
    calling their completion.
    """

    def __init__(
        self,
        perform: Callable[[DIRECTION], bool],
        scheduler: Optional[Scheduler] = None,
        capacity: int = 100,
        delay: float = 0.3,
    ):
        if capacity <= 0:
            raise ValueError("Queue capacity must be positive.")
        if delay < 0:
            raise ValueError("Queue delay cannot be negative.")
        self._perform = perform
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.capacity = capacity
        self.delay = delay
        self._commands: Deque[MoveCommand] = deque()
        self._timer: Optional[TimerHandle] = None
        self._draining = False
        self._generation = 0

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def _occupied(self) -> int:
        # The command running or settling holds a slot until its timer fires.
        in_flight = 1 if self._draining or self._timer is not None else 0
        return len(self._commands) + in_flight

    def enqueue(self, direction: DIRECTION, completion: Completion) -> None:
        if self._occupied() >= self.capacity:
            logger.debug("Command queue full (%d), dropping %s", self.capacity, direction.name)
            return
        self._commands.append(MoveCommand(direction, completion))
        if self._timer is None and not self._draining:
            self._drain()

    def _timer_fired(self) -> None:
        self._timer = None
        self._drain()

    def _drain(self) -> None:
        changed = False
        generation = self._generation
        self._draining = True
        try:
            while self._commands:
                command = self._commands.popleft()
                changed = self._perform(command.direction)
                command.completion(changed)
                if changed:
                    break
        finally:
            self._draining = False
        if generation != self._generation:
            # A clear() from inside a completion ends the old cycle; commands
            # enqueued after it start a fresh one right away.
            if self._commands:
                self._drain()
        elif changed:
            self._timer = self._scheduler.call_later(self.delay, self._timer_fired)

    def clear(self) -> None:
        """Drops queued commands without completing them and cancels any pending timer."""
        if self._commands:
            logger.debug("Abandoning %d queued commands", len(self._commands))
        self._commands.clear()
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
