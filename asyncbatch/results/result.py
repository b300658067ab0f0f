# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scientific Computing Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import Any, Generic, Self

from dataclasses import dataclass
from enum import Enum

from asyncbatch.dtypes import OutputType
from asyncbatch.errors import TaskError



class TaskResponseStatus(str, Enum):
    """Outcome of a single task."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TaskResult(Generic[OutputType]):
    """
    Outcome of one task, addressed by its submission index.

    Exactly one of `response` and `error` is meaningful: `response` holds the
    value when `response_status` is `SUCCESS`, and `error` holds the captured
    exception when it is `ERROR`.
    """

    index: int
    """Submission index of the task."""

    response_status: TaskResponseStatus
    """Whether the task succeeded or failed."""

    response: OutputType | None = None
    """Value returned by the task; `None` on failure."""

    error: BaseException | None = None
    """Exception raised by the task; `None` on success."""

    @classmethod
    def success(cls, index: int, response: OutputType) -> Self:
        return cls(index, TaskResponseStatus.SUCCESS, response, None)

    @classmethod
    def failure(cls, index: int, error: BaseException) -> Self:
        return cls(index, TaskResponseStatus.ERROR, None, error)

    @property
    def ok(self) -> bool:
        return self.response_status is TaskResponseStatus.SUCCESS

    def unwrap(self) -> OutputType | None:
        """Return the response, or raise if the task failed.

        Raises:
            TaskError: Chained from the captured exception.
        """
        if self.error is not None:
            raise TaskError(self.index, self.error) from self.error
        return self.response

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "response_status": self.response_status.value,
            "response": self.response,
            "error": self.error,
        }
