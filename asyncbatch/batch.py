# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import Any, override

import asyncio
import dataclasses
import math
from enum import Enum

from loguru import logger

from asyncbatch.config import BatchConfig
from asyncbatch.dtypes import EventHandler, TaskFn
from asyncbatch.errors import (
    CANNOT_ADD_AFTER_COMPLETION,
    CANNOT_ADD_DURING_PROCESSING,
    CANNOT_RESET_DURING_PROCESSING,
    NO_TASKS,
    TASK_MUST_BE_CALLABLE,
    EmptyBatchError,
    StateError,
    ValidationError,
)
from asyncbatch.events import (
    CompleteEvent,
    EventEmitter,
    EventKind,
    ProgressEvent,
    StartEvent,
)
from asyncbatch.queue import WorkItem, WorkQueue
from asyncbatch.results import ResultStore, TaskResult
from asyncbatch.worker import run_task

BatchResults = tuple[TaskResult[Any], ...]


class BatchState(str, Enum):
    """Lifecycle state of a [`Batch`][batch.Batch]."""

    IDLE = "idle"
    """No run exists; tasks may be added."""
    PROCESSING = "processing"
    """A run is in flight; `add` and `reset` are rejected."""
    COMPLETED = "completed"
    """The run settled and its handle is retained until `reset`."""


class Batch:
    """
    Runs a set of tasks with bounded concurrency and returns their results in
    submission order.

    Tasks are zero-argument callables that return a value or an awaitable. They
    are admitted first-in first-out through a sliding window: at most
    [`concurrency`][batch.Batch.concurrency] tasks are unsettled at any time,
    and each time one settles the next queued task starts immediately.

    ```python
    import asyncio

    from asyncbatch import Batch


    async def main():
        batch = Batch(concurrency=3)
        for delay in [0.1, 0.05, 0.025]:
            batch.add(lambda d=delay: asyncio.sleep(d, result=d))

        batch.subscribe("progress", lambda e: print(f"{e.progress}%"))
        results = await batch.process()
        print([r.response for r in results])  # [0.1, 0.05, 0.025]


    asyncio.run(main())
    ```
    """

    def __init__(
        self,
        concurrency: int | None = None,
        *,
        config: BatchConfig | None = None,
    ) -> None:
        """
        Args:
            concurrency: Maximum number of unsettled tasks. Overrides
                `config.concurrency` when both are given. Defaults to the number
                of logical CPUs.
            config: Full [`BatchConfig`][config.BatchConfig].

        Raises:
            ValidationError: If `concurrency` is not a positive number.
        """
        if config is None:
            config = BatchConfig() if concurrency is None else BatchConfig(concurrency)
        elif concurrency is not None:
            config = dataclasses.replace(config, concurrency=concurrency)

        self.config: BatchConfig = config
        """Validated settings for this batch."""

        self.events: EventEmitter = EventEmitter()
        """Lifecycle event handlers; see [`subscribe`][batch.Batch.subscribe]."""

        self._queue: WorkQueue = WorkQueue()
        self._completed: int = 0
        self._store: ResultStore[Any] | None = None
        self._run: "asyncio.Future[BatchResults] | None" = None
        self._runner: "asyncio.Task[BatchResults] | None" = None

    def add(self, task: TaskFn) -> None:
        """Queue `task` for the next run.

        Once a run has completed the batch is closed to new tasks until
        [`reset`][batch.Batch.reset] is called, so a settled run never gains
        unprocessed tasks.

        Args:
            task: Zero-argument callable; its return value is awaited if it is
                awaitable.

        Raises:
            StateError: If the batch is processing or has already completed.
            ValidationError: If `task` is not callable.
        """
        if self.is_processing:
            raise StateError(CANNOT_ADD_DURING_PROCESSING)
        if self._run is not None:
            raise StateError(CANNOT_ADD_AFTER_COMPLETION)
        if not callable(task):
            raise ValidationError(TASK_MUST_BE_CALLABLE)
        item = self._queue.push(task)
        logger.debug(f"Added task {item.index}")

    def process(self) -> "asyncio.Future[BatchResults]":
        """Run every queued task and return a handle to the ordered results.

        Must be called from a coroutine or callback running on an event loop.
        Only one run exists per batch: while it is in flight, and after it
        completes until [`reset`][batch.Batch.reset], this returns the very
        same handle instead of starting another run.

        The run is driven by a private task, so cancelling the returned handle
        (for example through `asyncio.wait_for`) only stops that caller from
        waiting; the run itself always finishes. Calling `process()` again
        after the handle was cancelled returns a new handle joined to the same
        run.

        The `start` event is emitted before this returns. The `complete` event
        is emitted before the handle settles, so handlers subscribed beforehand
        observe it no later than `await batch.process()` returns.

        Returns:
            Future resolving to a tuple of
                [`TaskResult`][results.result.TaskResult]s where
                `results[i].index == i`. If no tasks were added, the future has
                already failed with [`EmptyBatchError`][errors.EmptyBatchError].
        """
        if self._run is not None:
            if self._run.cancelled() and self._runner is not None:
                self._run = self._join(self._runner)
            return self._run

        loop = asyncio.get_running_loop()
        total = self._queue.total
        if total == 0:
            logger.warning("Requested to process a batch without tasks")
            failed: "asyncio.Future[BatchResults]" = loop.create_future()
            failed.set_exception(EmptyBatchError(NO_TASKS))
            return failed

        self._store = ResultStore(total)
        logger.info(
            f"Processing {total} tasks with concurrency of {self.concurrency}"
        )
        self.events.emit(StartEvent(total_tasks=total))
        self._runner = loop.create_task(self._process(self._store))
        self._run = self._join(self._runner)
        return self._run

    @staticmethod
    def _join(runner: "asyncio.Task[BatchResults]") -> "asyncio.Future[BatchResults]":
        handle: "asyncio.Future[BatchResults]" = runner.get_loop().create_future()

        def settle(done: "asyncio.Task[BatchResults]") -> None:
            if handle.done():
                return
            if done.cancelled():
                handle.cancel()
            elif (error := done.exception()) is not None:
                handle.set_exception(error)
            else:
                handle.set_result(done.result())

        if runner.done():
            settle(runner)
        else:
            runner.add_done_callback(settle)
        return handle

    async def _process(self, store: ResultStore[Any]) -> BatchResults:
        async with asyncio.TaskGroup() as group:
            n_initial = min(self.concurrency, len(self._queue))
            for _ in range(n_initial):
                self._admit(group, store)

        store.finalize()
        results = store.get()
        logger.info(f"Completed {len(results)} tasks")
        self.events.emit(CompleteEvent(task_results=results))
        return results

    def _admit(self, group: asyncio.TaskGroup, store: ResultStore[Any]) -> None:
        item = self._queue.pop()
        logger.debug(f"Admitting task {item.index}")
        _ = group.create_task(self._execute(item, group, store))

    async def _execute(
        self, item: WorkItem, group: asyncio.TaskGroup, store: ResultStore[Any]
    ) -> None:
        result = await run_task(item)
        store.add_result(result)
        self._completed += 1
        logger.debug(
            f"Task {item.index} finished with {result.response_status.value} "
            f"({self._completed}/{store.size})"
        )
        self.events.emit(
            ProgressEvent(
                total_tasks=store.size,
                completed_tasks=self._completed,
                pending_tasks=store.size - self._completed,
                progress=self.progress,
                last_completed_task_result=result,
            )
        )
        # Slide the window: one settled, one admitted.
        if self._queue:
            self._admit(group, store)

    def reset(self) -> None:
        """Discard queued tasks, counters, results, and the run handle.

        The run must have fully finished, including its `complete` event, so
        a `progress` handler cannot reset the batch from under the last task.

        Raises:
            StateError: If the batch is processing.
        """
        if self.is_processing or self._running():
            raise StateError(CANNOT_RESET_DURING_PROCESSING)
        self._queue.clear()
        self._completed = 0
        self._store = None
        self._run = None
        self._runner = None
        logger.debug("Batch reset")

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> EventHandler:
        """Register `handler` for `"start"`, `"progress"`, or `"complete"` events.

        See [`EventEmitter.subscribe`][events.EventEmitter.subscribe].
        """
        return self.events.subscribe(kind, handler)

    def unsubscribe(self, kind: EventKind | str, handler: EventHandler) -> bool:
        return self.events.unsubscribe(kind, handler)

    @property
    def state(self) -> BatchState:
        if self._run is None:
            return BatchState.IDLE
        if self._completed < self._queue.total or self._running():
            return BatchState.PROCESSING
        return BatchState.COMPLETED

    def _running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def is_processing(self) -> bool:
        """`True` while a run exists and not every task has settled."""
        return self._run is not None and self._completed < self._queue.total

    @property
    def progress(self) -> float:
        """Percentage of settled tasks, `0` to `100` with two decimals."""
        total = self._queue.total
        if total == 0:
            return 0.0
        # Round half up.
        return math.floor(self._completed * 10000 / total + 0.5) / 100

    @property
    def size(self) -> int:
        """Total number of tasks added since construction or the last reset."""
        return self._queue.total

    @property
    def concurrency(self) -> int:
        return self.config.concurrency

    @override
    def __repr__(self) -> str:
        return (
            f"<Batch state={self.state.value} size={self.size} "
            f"concurrency={self.concurrency} progress={self.progress}>"
        )
