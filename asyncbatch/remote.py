# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import TYPE_CHECKING, Any

from collections.abc import Callable, Mapping

try:
    import ray

    has_ray = True
except ImportError:
    has_ray = False
from loguru import logger

if TYPE_CHECKING:
    from ray import ObjectRef


def _ensure_ray() -> None:
    if not has_ray:
        raise ImportError("Requested to use ray, but ray is not installed.")
    if not ray.is_initialized():
        logger.info("Initializing Ray.")
        ray.init()


if has_ray:

    @ray.remote
    def ray_worker(fn: Callable[..., Any], *args: object, **kwargs: object) -> Any:
        """
        Remote Ray function that calls `fn(*args, **kwargs)` on a Ray worker.
        """
        return fn(*args, **kwargs)


def remote_task(
    fn: Callable[..., Any],
    *args: object,
    num_cpus: float = 1,
    kwargs_remote: Mapping[str, Any] | None = None,
    **kwargs: object,
) -> Callable[[], "ObjectRef"]:
    """
    Wrap `fn` as a task that runs on a Ray worker.

    The returned zero-argument callable submits `fn(*args, **kwargs)` to Ray
    when the [`Batch`][batch.Batch] admits it and returns the `ObjectRef`.
    `ObjectRef`s are awaitable, so the batch treats them like any other
    awaitable task: the concurrency limit bounds how many Ray tasks are in
    flight, and exceptions raised on the worker are captured on the result.

    Args:
        fn: Picklable callable to run remotely.
        *args: Positional arguments for `fn`.
        num_cpus: CPUs reserved for each Ray task.
        kwargs_remote: Extra Ray options such as `num_gpus` or `max_retries`. Do
            not include `num_cpus`; use the `num_cpus` argument instead.
        **kwargs: Keyword arguments for `fn`.

    Returns:
        Task callable suitable for [`Batch.add`][batch.Batch.add].

    Raises:
        ImportError: If Ray is not installed.

    Examples:
        ```python
        batch = Batch(concurrency=8)
        for chunk in chunks:
            batch.add(remote_task(expensive_fn, chunk, num_cpus=2))
        results = await batch.process()
        ```
    """
    if not has_ray:
        raise ImportError("Requested to use ray, but ray is not installed.")
    if kwargs_remote is None:
        kwargs_remote = {}

    def submit() -> "ObjectRef":
        _ensure_ray()
        logger.debug(f"Submitting Ray task for {getattr(fn, '__name__', fn)}")
        return ray_worker.options(num_cpus=num_cpus, **kwargs_remote).remote(
            fn, *args, **kwargs
        )

    return submit
