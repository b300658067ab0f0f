# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import override

from loguru import logger

from asyncbatch.dtypes import OutputType
from asyncbatch.results.handler import ResultsHandler
from asyncbatch.results.result import TaskResult



class ResultStore(ResultsHandler[OutputType]):
    """
    Fixed-size, write-once slots addressed by task index.

    Results arrive in completion order but each one is written straight into
    the slot of its submission index, so [`get`][results.store.ResultStore.get]
    always returns them in submission order. The scheduler completes every index
    exactly once; a duplicate or out-of-range write is a bug, not an input error,
    and fails an assertion.
    """

    def __init__(self, size: int) -> None:
        """
        Args:
            size: Number of slots; the total number of tasks in the run.
        """
        assert size >= 0, "size must be non-negative"
        self._slots: list[TaskResult[OutputType] | None] = [None] * size
        self._filled: int = 0
        self._frozen: tuple[TaskResult[OutputType], ...] | None = None

    @property
    def size(self) -> int:
        return len(self._slots)

    @property
    def filled(self) -> int:
        """Number of slots written so far."""
        return self._filled

    @property
    def is_finalized(self) -> bool:
        return self._frozen is not None

    @override
    def add_result(self, result: TaskResult[OutputType]) -> None:
        assert self._frozen is None, "ResultStore is already finalized"
        index = result.index
        assert 0 <= index < len(self._slots), f"Index of {index} is out of range"
        assert self._slots[index] is None, f"Index of {index} already exists"
        self._slots[index] = result
        self._filled += 1
        logger.trace(f"Stored result {index} ({self._filled}/{len(self._slots)})")

    @override
    def finalize(self) -> None:
        """Freeze the slots into an immutable, index-ordered tuple."""
        if self._frozen is not None:
            return
        assert self._filled == len(self._slots), (
            f"Cannot finalize with {len(self._slots) - self._filled} empty slots"
        )
        self._frozen = tuple(self._slots)  # type: ignore[arg-type]

    @override
    def get(self) -> tuple[TaskResult[OutputType], ...]:
        assert self._frozen is not None, "ResultStore must be finalized first"
        return self._frozen
