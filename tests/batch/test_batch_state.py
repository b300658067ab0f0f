import asyncio

import pytest

from asyncbatch import Batch, BatchConfig, BatchState, StateError, ValidationError


def test_default_concurrency(monkeypatch):
    monkeypatch.setattr("asyncbatch.config.os.cpu_count", lambda: 3)
    assert Batch().concurrency == 3


def test_custom_concurrency():
    assert Batch(concurrency=5).concurrency == 5
    assert Batch(config=BatchConfig(concurrency=2)).concurrency == 2
    assert Batch(4, config=BatchConfig(concurrency=2)).concurrency == 4


@pytest.mark.parametrize("value", [0, -1])
def test_invalid_concurrency(value):
    with pytest.raises(ValidationError, match="Concurrency must be greater than 0"):
        Batch(concurrency=value)


def test_add_tracks_size():
    batch = Batch(concurrency=2)
    assert batch.size == 0
    batch.add(lambda: 1)
    batch.add(lambda: 2)
    assert batch.size == 2
    assert batch.state is BatchState.IDLE
    assert not batch.is_processing
    assert batch.progress == 0


@pytest.mark.parametrize("task", [None, 42, "task", [lambda: 1]])
def test_add_rejects_non_callable(task):
    batch = Batch(concurrency=2)
    with pytest.raises(ValidationError, match="Task must be a callable"):
        batch.add(task)  # type: ignore[arg-type]
    assert batch.size == 0


@pytest.mark.asyncio
async def test_add_during_processing_fails(delayed):
    batch = Batch(concurrency=1)
    batch.add(delayed(1, 0.01))
    handle = batch.process()

    assert batch.is_processing
    assert batch.state is BatchState.PROCESSING
    with pytest.raises(StateError, match="Cannot add new tasks during processing"):
        batch.add(lambda: 2)

    results = await handle
    assert len(results) == 1


@pytest.mark.asyncio
async def test_add_after_completion_fails():
    batch = Batch(concurrency=1)
    batch.add(lambda: 1)
    await batch.process()

    assert batch.state is BatchState.COMPLETED
    with pytest.raises(StateError, match="call reset"):
        batch.add(lambda: 2)
    assert batch.size == 1


@pytest.mark.asyncio
async def test_is_processing_lifecycle(delayed):
    batch = Batch(concurrency=2)
    assert not batch.is_processing
    batch.add(delayed("a", 0.01))
    batch.add(delayed("b", 0.02))

    handle = batch.process()
    assert batch.is_processing
    await handle

    assert not batch.is_processing
    assert batch.state is BatchState.COMPLETED
    assert batch.progress == 100.0


@pytest.mark.asyncio
async def test_progress_query_during_run():
    gate = asyncio.Event()
    batch = Batch(concurrency=4)
    batch.add(lambda: "fast")

    async def blocked():
        await gate.wait()
        return "slow"

    batch.add(blocked)
    handle = batch.process()
    await asyncio.sleep(0.01)

    assert batch.progress == 50.0
    gate.set()
    await handle
    assert batch.progress == 100.0


@pytest.mark.asyncio
async def test_reset_during_processing_fails(delayed):
    batch = Batch(concurrency=1)
    batch.add(delayed(1, 0.01))
    handle = batch.process()

    with pytest.raises(StateError, match="Cannot reset while processing is in progress"):
        batch.reset()

    await handle


def test_reset_from_idle_clears_queue():
    batch = Batch(concurrency=1)
    batch.add(lambda: 1)
    batch.reset()
    assert batch.size == 0
    assert batch.state is BatchState.IDLE


@pytest.mark.asyncio
async def test_reset_after_completion_allows_fresh_run():
    batch = Batch(concurrency=2)
    batch.add(lambda: "first")
    first = await batch.process()

    batch.reset()
    assert batch.progress == 0
    assert not batch.is_processing
    assert batch.size == 0
    assert batch.state is BatchState.IDLE

    batch.add(lambda: "second-0")
    batch.add(lambda: "second-1")
    second = await batch.process()

    assert [r.response for r in first] == ["first"]
    assert [r.index for r in second] == [0, 1]
    assert [r.response for r in second] == ["second-0", "second-1"]


@pytest.mark.asyncio
async def test_multiple_reset_cycles():
    batch = Batch(concurrency=3)
    for cycle in range(5):
        for i in range(4):
            batch.add(lambda cycle=cycle, i=i: (cycle, i))
        results = await batch.process()
        assert [r.response for r in results] == [(cycle, i) for i in range(4)]
        batch.reset()


def test_repr():
    batch = Batch(concurrency=2)
    assert repr(batch) == "<Batch state=idle size=0 concurrency=2 progress=0.0>"


@pytest.mark.asyncio
async def test_timed_out_wait_does_not_stop_run(delayed):
    batch = Batch(concurrency=1)
    batch.add(delayed("slow", 0.05))
    batch.add(delayed("next", 0.01))
    handle = batch.process()

    with pytest.raises(TimeoutError):
        await asyncio.wait_for(handle, 0.01)
    assert handle.cancelled()
    assert batch.is_processing

    results = await batch.process()

    assert [r.response for r in results] == ["slow", "next"]
    assert not batch.is_processing
    assert batch.state is BatchState.COMPLETED
    batch.reset()
    assert batch.state is BatchState.IDLE


@pytest.mark.asyncio
async def test_cancelled_handle_run_still_completes(delayed):
    batch = Batch(concurrency=2)
    completes = []
    batch.subscribe("complete", completes.append)
    batch.add(delayed(1, 0.03))
    handle = batch.process()

    handle.cancel()
    await asyncio.sleep(0.06)

    assert batch.state is BatchState.COMPLETED
    assert len(completes) == 1
    assert batch.process() is not handle
    results = await batch.process()
    assert results[0].response == 1


@pytest.mark.asyncio
async def test_reset_from_last_progress_event_fails():
    batch = Batch(concurrency=1)
    errors = []
    completes = []

    def reset_on_progress(event):
        try:
            batch.reset()
        except StateError as e:
            errors.append(e)

    batch.subscribe("progress", reset_on_progress)
    batch.subscribe("complete", completes.append)
    batch.add(lambda: 1)

    results = await batch.process()

    assert len(errors) == 1
    assert len(completes) == 1
    assert batch.state is BatchState.COMPLETED
    assert batch.size == 1
    assert [r.response for r in results] == [1]
