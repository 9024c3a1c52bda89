"""Run independent async tasks with a fixed number in flight."""

import asyncio
import inspect
from collections import deque
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Deque,
    Generic,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from loguru import logger

T = TypeVar("T")
R = TypeVar("R")

Worker = Callable[[T], Awaitable[R]]
DoneCallback = Callable[[], Any]


@dataclass
class TaskOutcome(Generic[T, R]):
    """Completion of one scheduled item."""

    item: T
    result: Optional[R] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SchedulerState:
    """Bookkeeping of one ``BoundedScheduler.run`` call.

    Invariants: ``0 <= in_flight <= capacity`` and ``completed`` only grows.
    """

    capacity: int
    total: int = 0
    in_flight: int = 0
    completed: int = 0
    peak_in_flight: int = 0
    # (input index, item) not yet started
    pending: Deque[Tuple[int, Any]] = field(default_factory=deque)

    @property
    def done(self) -> bool:
        return self.completed == self.total


class BoundedScheduler:
    """
    Drive a worker over a sequence of items with at most ``capacity`` running.

    Items are started in input order; each finished item (success or
    failure) frees its slot for the next pending one. A failing item never
    stops the others.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.state = SchedulerState(capacity=capacity)

    async def run(
        self,
        items: Sequence[T],
        worker: Worker,
        on_done: Optional[DoneCallback] = None,
    ) -> List[TaskOutcome]:
        """
        Run ``worker`` on every item.

        Args:
            items: Items to process, started in this order
            worker: Async callable invoked once per item
            on_done: Called exactly once after every item completed

        Returns:
            One TaskOutcome per item, in input order
        """
        state = SchedulerState(
            capacity=self.capacity,
            total=len(items),
            pending=deque(enumerate(items)),
        )
        self.state = state
        outcomes: List[Optional[TaskOutcome]] = [None] * len(items)

        slots = min(self.capacity, len(items))
        logger.debug(f"Scheduling {len(items)} items on {slots} slots")

        async def slot() -> None:
            while state.pending:
                index, item = state.pending.popleft()
                state.in_flight += 1
                state.peak_in_flight = max(state.peak_in_flight, state.in_flight)
                try:
                    result = await worker(item)
                    outcomes[index] = TaskOutcome(item=item, result=result)
                except Exception as e:
                    logger.error(f"Task failed for {item}: {e}")
                    outcomes[index] = TaskOutcome(item=item, error=e)
                finally:
                    state.in_flight -= 1
                    state.completed += 1

        tasks = [asyncio.ensure_future(slot()) for _ in range(slots)]
        try:
            if tasks:
                await asyncio.gather(*tasks)
        except BaseException:
            # No slot outlives the run
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if on_done is not None:
            done = on_done()
            if inspect.isawaitable(done):
                await done

        return [outcome for outcome in outcomes if outcome is not None]
