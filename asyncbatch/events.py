"""
Lifecycle events published by a [`Batch`][batch.Batch].

Ordering guarantees:

- Synchronous emission: handlers run inline, in subscription order.
- Best-effort delivery: if a handler raises, the exception is logged and the
  remaining handlers and the run continue.
- Per-run ordering: `start` < every `progress` < `complete`. Progress events
  follow actual completion order, not submission order.
"""

from typing import Any, ClassVar

from collections import defaultdict
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum

from loguru import logger

from asyncbatch.dtypes import EventHandler
from asyncbatch.errors import UNKNOWN_EVENT_KIND, ValidationError
from asyncbatch.results import TaskResult


class EventKind(str, Enum):
    """Types of events emitted during a run."""

    START = "start"
    PROGRESS = "progress"
    COMPLETE = "complete"

    @classmethod
    def parse(cls, kind: "EventKind | str") -> "EventKind":
        """Accept either an `EventKind` or its string value."""
        try:
            return cls(kind)
        except ValueError:
            raise ValidationError(UNKNOWN_EVENT_KIND.format(kind=kind)) from None


def timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g.
    `2024-01-01T12:00:00.000Z`."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, kw_only=True)
class Event:
    kind: ClassVar[EventKind]

    timestamp: str = field(default_factory=timestamp)
    """ISO-8601 time at which the event was created."""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, TaskResult):
                value = value.to_dict()
            elif isinstance(value, tuple):
                value = [r.to_dict() for r in value]
            data[f.name] = value
        return data


@dataclass(frozen=True, kw_only=True)
class StartEvent(Event):
    """Emitted once, before any task runs."""

    kind: ClassVar[EventKind] = EventKind.START

    total_tasks: int


@dataclass(frozen=True, kw_only=True)
class ProgressEvent(Event):
    """Emitted once per settled task."""

    kind: ClassVar[EventKind] = EventKind.PROGRESS

    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    progress: float
    """Percentage of settled tasks in `[0, 100]`, rounded to two decimals."""
    last_completed_task_result: TaskResult[Any]


@dataclass(frozen=True, kw_only=True)
class CompleteEvent(Event):
    """Emitted once, after all results are collected and before the run settles."""

    kind: ClassVar[EventKind] = EventKind.COMPLETE

    task_results: tuple[TaskResult[Any], ...]


class EventEmitter:
    """
    Registry of event handlers keyed by [`EventKind`][events.EventKind].
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[EventKind, list[EventHandler]] = defaultdict(list)

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> EventHandler:
        """
        Register `handler` for events of `kind`.

        Subscribing the same handler twice for one kind has no effect.

        Args:
            kind: An [`EventKind`][events.EventKind] or its string value.
            handler: Callable receiving the event record.

        Returns:
            `handler`, unchanged.

        Raises:
            ValidationError: If `kind` is unknown or `handler` is not callable.
        """
        kind = EventKind.parse(kind)
        if not callable(handler):
            raise ValidationError("Event handler must be a callable")
        handlers = self._handlers[kind]
        if handler not in handlers:
            handlers.append(handler)
        return handler

    def unsubscribe(self, kind: EventKind | str, handler: EventHandler) -> bool:
        """Remove `handler`; returns `False` if it was not registered."""
        handlers = self._handlers[EventKind.parse(kind)]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def handlers(self, kind: EventKind | str) -> tuple[EventHandler, ...]:
        return tuple(self._handlers[EventKind.parse(kind)])

    def emit(self, event: Event) -> None:
        """Deliver `event` to every handler subscribed to its kind."""
        # Copy so handlers may (un)subscribe while being called.
        for handler in tuple(self._handlers[event.kind]):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event handler {handler!r} failed for {event.kind.value}")
