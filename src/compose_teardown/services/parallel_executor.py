"""Bounded parallel execution of runtime calls.

Runs one callable per item on a ThreadPoolExecutor sized
min(item_count, max_workers). A shared cancellation event is checked before
each call starts: once it is set, calls already running finish normally and
calls not yet started are reported as cancelled without being made.
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskOutcome(Generic[T, R]):
    """Result of running one task."""

    item: T
    value: Optional[R] = None
    error: Optional[Exception] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


class ParallelExecutor:
    """Execute independent runtime calls concurrently with bounded fan-out."""

    DEFAULT_MAX_WORKERS = 8

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            max_workers: Upper bound on concurrently running tasks
            cancel_event: Event that stops dispatch of new tasks once set
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.cancel_event = cancel_event or threading.Event()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def map(self, fn: Callable[[T], R], items: Sequence[T]) -> List[TaskOutcome[T, R]]:
        """Run fn over items concurrently.

        Returns:
            One TaskOutcome per item, in input order
        """
        if not items:
            return []

        worker_count = min(len(items), self.max_workers)
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=worker_count
        ) as executor:
            futures = [executor.submit(self._run_one, fn, item) for item in items]
            return [future.result() for future in futures]

    def _run_one(self, fn: Callable[[T], R], item: T) -> TaskOutcome[T, R]:
        if self.cancel_event.is_set():
            return TaskOutcome(item=item, cancelled=True)
        try:
            return TaskOutcome(item=item, value=fn(item))
        except Exception as e:
            return TaskOutcome(item=item, error=e)
