"""Run tasks with bounded concurrency and collect results in submission order."""

from typing import Any

import sys

from loguru import logger

from .errors import (
    BatchError,
    EmptyBatchError,
    StateError,
    TaskError,
    ValidationError,
)
from .task import Task
from .results import TaskResponseStatus, TaskResult
from .events import CompleteEvent, EventKind, ProgressEvent, StartEvent
from .config import BatchConfig
from .batch import Batch, BatchState
from .runner import responses, submit_tasks
from .remote import remote_task

__all__ = [
    "Batch",
    "BatchConfig",
    "BatchError",
    "BatchState",
    "CompleteEvent",
    "EmptyBatchError",
    "EventKind",
    "ProgressEvent",
    "StartEvent",
    "StateError",
    "Task",
    "TaskError",
    "TaskResponseStatus",
    "TaskResult",
    "ValidationError",
    "enable_logging",
    "remote_task",
    "responses",
    "submit_tasks",
]

__version__ = "0.1.0"

logger.disable("asyncbatch")

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def enable_logging(
    level_set: int | None,
    stdout_set: bool = True,
    file_path: str | None = None,
    log_format: str = LOG_FORMAT,
) -> None:
    """
    Enable logging.

    Args:
        level_set: Lowest logging level to print. Loguru levels are `5` (trace),
            `10` (debug), `20` (info), `25` (success), `30` (warning),
            `40` (error), and `50` (critical).
        stdout_set: Print logs to stdout.
        file_path: Also write logs to this file.
        log_format: Format of log messages.
    """
    if level_set is None:
        return

    config: dict[str, Any] = {"handlers": []}
    if stdout_set:
        config["handlers"].append(
            {"sink": sys.stdout, "level": level_set, "format": log_format}
        )
    if isinstance(file_path, str):
        config["handlers"].append(
            {"sink": file_path, "level": level_set, "format": log_format}
        )
    # https://loguru.readthedocs.io/en/stable/api/logger.html#loguru._logger.Logger.configure
    logger.configure(**config)

    logger.enable("asyncbatch")
