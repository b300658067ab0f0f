# This file is licensed under the Prosperity Public License 3.0.0.
# You may use, copy, and share it for noncommercial purposes.
# Commercial use is allowed for a 30-day trial only.
#
# Contributor: Scientific Computing Studio
# Source Code: https://github.com/scienting/simlify
#
# See the LICENSE.md file for full license terms.

import asyncio

import pytest

from asyncbatch import enable_logging


@pytest.fixture(scope="session", autouse=True)
def setup_tests():
    enable_logging(10)
    yield


def _delayed(value, delay):
    async def task():
        await asyncio.sleep(delay)
        return value

    return task


def _failing(error, delay=0.0):
    async def task():
        await asyncio.sleep(delay)
        raise error

    return task


@pytest.fixture
def delayed():
    """Factory for tasks returning `value` after `delay` seconds."""
    return _delayed


@pytest.fixture
def failing():
    """Factory for tasks raising `error` after `delay` seconds."""
    return _failing


class ConcurrencyProbe:
    """Makes tasks that track how many of them are running at once."""

    def __init__(self):
        self.running = 0
        self.max_running = 0
        self.started = []

    def task(self, index, delay):
        async def run():
            self.started.append(index)
            self.running += 1
            self.max_running = max(self.max_running, self.running)
            try:
                await asyncio.sleep(delay)
            finally:
                self.running -= 1
            return index

        return run


@pytest.fixture
def probe():
    return ConcurrencyProbe()
