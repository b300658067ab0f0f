from typing import Any, TypeAlias, TypeVar

from collections.abc import Awaitable, Callable

OutputType = TypeVar("OutputType")
"""
Value produced by a single task once it settles.
"""

TaskFn: TypeAlias = Callable[[], Awaitable[Any] | Any]
"""
A zero-argument unit of work. Calling it either returns a value directly or
returns an awaitable (coroutine, `asyncio.Future`, Ray `ObjectRef`, ...) that
settles with the value.
"""

EventHandler: TypeAlias = Callable[[Any], object]
"""
Observer callable that receives an event detail record.
"""
