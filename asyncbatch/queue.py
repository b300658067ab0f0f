# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import override

from collections import deque
from dataclasses import dataclass

from asyncbatch.dtypes import TaskFn


@dataclass(slots=True)
class WorkItem:
    """A submitted task tagged with its submission index."""

    index: int
    """Position of this task in submission order; also its result slot."""

    fn: TaskFn
    """Zero-argument callable performing the work."""


class WorkQueue:
    """FIFO queue of pending [`WorkItem`][queue.WorkItem]s.

    Indices are assigned on [`push`][queue.WorkQueue.push] from a counter that
    only moves forward until [`clear`][queue.WorkQueue.clear], so every item
    gets a unique, strictly increasing index.
    """

    def __init__(self) -> None:
        self._items: deque[WorkItem] = deque()
        self._total: int = 0

    def push(self, fn: TaskFn) -> WorkItem:
        """Append `fn` with the next free index."""
        item = WorkItem(index=self._total, fn=fn)
        self._items.append(item)
        self._total += 1
        return item

    def pop(self) -> WorkItem:
        """Remove and return the oldest item.

        Raises:
            IndexError: If the queue is empty.
        """
        return self._items.popleft()

    def clear(self) -> None:
        self._items.clear()
        self._total = 0

    @property
    def total(self) -> int:
        """Number of items pushed since construction or the last clear."""
        return self._total

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    @override
    def __repr__(self) -> str:
        return f"<WorkQueue pending={len(self._items)} total={self._total}>"
