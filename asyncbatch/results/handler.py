# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import Any, Generic

from abc import ABC, abstractmethod

from asyncbatch.dtypes import OutputType
from asyncbatch.results.result import TaskResult



class ResultsHandler(ABC, Generic[OutputType]):
    """
    Abstract base class for collecting [`TaskResult`][results.result.TaskResult]s
    as tasks settle.
    """

    @abstractmethod
    def add_result(self, result: TaskResult[OutputType]) -> None:
        """
        Record a [`TaskResult`][results.result.TaskResult]. This method is called
        once per task, in completion order, as soon as the task settles.

        Args:
            result: Outcome of a single task.
        """

    @abstractmethod
    def get(self) -> Any:
        """Get the collected results."""

    def finalize(self) -> None:
        """Finish up any handling once every task has settled."""
