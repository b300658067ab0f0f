from typing import Any

from collections.abc import Iterable, Mapping

from loguru import logger

from asyncbatch.batch import Batch, BatchResults
from asyncbatch.config import BatchConfig
from asyncbatch.dtypes import EventHandler, TaskFn
from asyncbatch.events import EventKind


async def submit_tasks(
    tasks: Iterable[TaskFn],
    concurrency: int | None = None,
    *,
    config: BatchConfig | None = None,
    handlers: Mapping[EventKind | str, EventHandler] | None = None,
) -> BatchResults:
    """Run `tasks` in a fresh [`Batch`][batch.Batch] and wait for the results.

    This is the one-call entrypoint for when the batch object itself is not
    needed.

    Args:
        tasks: Zero-argument callables, in the order their results should be
            returned.
        concurrency: Maximum number of unsettled tasks.
        config: Full [`BatchConfig`][config.BatchConfig]; `concurrency` overrides
            its value when both are given.
        handlers: Event handlers keyed by event kind, subscribed before the run
            starts.

    Returns:
        One [`TaskResult`][results.result.TaskResult] per task, in submission
            order.

    Raises:
        EmptyBatchError: If `tasks` is empty.
        ValidationError: If a task is not callable or `concurrency` is invalid.

    Examples:
        ```python
        results = await submit_tasks(
            [fetch_a, fetch_b, fetch_c],
            concurrency=2,
            handlers={"progress": lambda e: print(e.progress)},
        )
        values = [r.unwrap() for r in results]
        ```
    """
    batch = Batch(concurrency, config=config)
    if handlers is not None:
        for kind, handler in handlers.items():
            batch.subscribe(kind, handler)
    for task in tasks:
        batch.add(task)
    logger.info(f"Submitting {batch.size} tasks")
    return await batch.process()


def responses(results: Iterable[Any]) -> list[Any]:
    """Unwrap every result, raising on the first failed task.

    Raises:
        TaskError: For the lowest-index task that failed.
    """
    return [result.unwrap() for result in results]
