# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import Any

from abc import ABC, abstractmethod
from collections.abc import Awaitable


class Task(ABC):
    """Class-based unit of work for a [`Batch`][batch.Batch].

    Any zero-argument callable can be added to a batch. Subclassing `Task` is
    useful when the work needs state or configuration; instances are callable
    and simply forward to [`do`][task.Task.do].

    ```python
    import asyncio

    from asyncbatch import Batch, Task


    class FetchTask(Task):
        def __init__(self, url: str) -> None:
            super().__init__()
            self.url = url

        async def do(self) -> str:
            await asyncio.sleep(0.1)
            return self.url


    batch = Batch(concurrency=4)
    for url in ["a", "b", "c"]:
        batch.add(FetchTask(url))
    ```
    """

    def __init__(self) -> None:
        super().__init__()

    @abstractmethod
    def do(self) -> Awaitable[Any] | Any:
        """Perform the work.

        May be a regular method returning a value or an `async def` returning a
        coroutine; the batch awaits whatever is returned if it is awaitable.
        Raising marks the task as failed without affecting its siblings.

        Returns:
            The task's response, or an awaitable that settles with it.
        """

    def __call__(self) -> Awaitable[Any] | Any:
        return self.do()
