import pytest

from asyncbatch import EmptyBatchError, TaskError, responses, submit_tasks


@pytest.mark.asyncio
async def test_submit_tasks(delayed):
    completes = []
    results = await submit_tasks(
        [delayed(i, 0.01 * (3 - i)) for i in range(3)],
        concurrency=2,
        handlers={"complete": completes.append},
    )

    assert [r.response for r in results] == [0, 1, 2]
    assert completes[0].task_results == results


@pytest.mark.asyncio
async def test_submit_tasks_empty():
    with pytest.raises(EmptyBatchError):
        await submit_tasks([], concurrency=1)


@pytest.mark.asyncio
async def test_responses(failing):
    results = await submit_tasks([lambda: 1, lambda: 2], concurrency=1)
    assert responses(results) == [1, 2]

    error = ValueError("bad")
    results = await submit_tasks([lambda: 1, failing(error)], concurrency=1)
    with pytest.raises(TaskError) as exc_info:
        responses(results)
    assert exc_info.value.index == 1
    assert exc_info.value.__cause__ is error
