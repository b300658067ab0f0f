# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.

CONCURRENCY_MUST_BE_POSITIVE = "Concurrency must be greater than 0"
TASK_MUST_BE_CALLABLE = "Task must be a callable"
CANNOT_ADD_DURING_PROCESSING = "Cannot add new tasks during processing"
CANNOT_ADD_AFTER_COMPLETION = (
    "Cannot add new tasks after processing has completed; call reset() first"
)
CANNOT_RESET_DURING_PROCESSING = "Cannot reset while processing is in progress"
NO_TASKS = "No tasks to process"
UNKNOWN_EVENT_KIND = "Unknown event kind: {kind!r}"


class BatchError(Exception):
    """Base class for every error raised by `asyncbatch`."""


class ValidationError(BatchError, ValueError):
    """Malformed input, such as a non-callable task or a bad concurrency."""


class StateError(BatchError, RuntimeError):
    """The [`Batch`][batch.Batch] is in a state that forbids the operation."""


class EmptyBatchError(BatchError):
    """[`process`][batch.Batch.process] was called without any tasks.

    This is delivered as the exception of the returned future, not raised.
    """


class TaskError(BatchError):
    """A single task failed.

    The scheduler never raises this; failures are stored on the
    [`TaskResult`][results.result.TaskResult]. It is raised by
    [`TaskResult.unwrap`][results.result.TaskResult.unwrap] with the original
    exception as `__cause__`.
    """

    def __init__(self, index: int, error: BaseException) -> None:
        self.index: int = index
        self.error: BaseException = error
        super().__init__(f"Task {index} failed: {error!r}")
