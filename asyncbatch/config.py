# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scienting Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.


from typing import Any

import os
from dataclasses import dataclass, field
from numbers import Real

from loguru import logger

from asyncbatch.errors import CONCURRENCY_MUST_BE_POSITIVE, ValidationError

FALLBACK_CONCURRENCY: int = 10
"""Concurrency used when the number of CPUs cannot be determined."""


def default_concurrency() -> int:
    """Number of logical CPUs, or
    [`FALLBACK_CONCURRENCY`][config.FALLBACK_CONCURRENCY] if unknown."""
    return os.cpu_count() or FALLBACK_CONCURRENCY


def validate_concurrency(concurrency: Any) -> int:
    """
    Check that `concurrency` is a positive number and return it as an `int`.

    Floats are accepted and truncated, but never below `1` so that values such
    as `0.5` still allow one task in flight.

    Raises:
        ValidationError: If `concurrency` is missing, not a real number, or not
            greater than zero.
    """
    if (
        isinstance(concurrency, bool)
        or not isinstance(concurrency, Real)
        or not concurrency > 0
    ):
        raise ValidationError(CONCURRENCY_MUST_BE_POSITIVE)
    return max(1, int(concurrency))


@dataclass(frozen=True)
class BatchConfig:
    """Settings for a [`Batch`][batch.Batch]."""

    concurrency: int = field(default_factory=default_concurrency)
    """
    Maximum number of tasks that may be unsettled at the same time.

    This bounds the number of in-flight awaitables on the event loop; it is not
    a number of threads or processes. Defaults to the number of logical CPUs.

    Example:
        ```python
        # Up to 8 requests in flight
        config = BatchConfig(concurrency=8)
        ```
    """

    def __post_init__(self) -> None:
        value = validate_concurrency(self.concurrency)
        if value != self.concurrency:
            logger.debug(f"Truncated concurrency {self.concurrency} to {value}")
        object.__setattr__(self, "concurrency", value)
