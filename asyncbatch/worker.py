from typing import Any

import inspect

from loguru import logger

from asyncbatch.queue import WorkItem
from asyncbatch.results import TaskResult


async def run_task(item: WorkItem) -> TaskResult[Any]:
    """
    Execute a single [`WorkItem`][queue.WorkItem] and capture its outcome.

    This is the core execution unit used by [`Batch`][batch.Batch]. It calls
    `item.fn()` and, if the returned value is awaitable (a coroutine, an
    `asyncio.Future`, a Ray `ObjectRef`, ...), awaits it.

    Failures never escape: any `Exception` raised while calling or awaiting the
    task is stored on the returned result so one bad task cannot abort the
    batch. Cancellation and other `BaseException`s are not captured.

    Args:
        item: The queued task and its submission index.

    Returns:
        A successful result holding the task's value, or a failed result holding
            the captured exception.

    Examples:
        ```python
        item = WorkItem(index=0, fn=lambda: 21 * 2)
        result = await run_task(item)
        result.response  # 42
        ```
    """
    try:
        value = item.fn()
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        logger.debug(f"Task {item.index} failed with {type(e).__name__}: {e}")
        return TaskResult.failure(item.index, e)
    return TaskResult.success(item.index, value)
