import asyncio
import pytest

from app.utils.worker_pool import run_bounded


@pytest.mark.asyncio
async def test_failure_stays_at_its_index():
    """limit=2, 작업 5개 중 1개 실패 -> 결과 5개, 실패 자리에만 Exception"""
    async def ok(value):
        await asyncio.sleep(0)
        return value

    async def boom():
        raise RuntimeError("boom")

    tasks = [
        lambda: ok(0),
        lambda: ok(1),
        boom,
        lambda: ok(3),
        lambda: ok(4),
    ]

    results = await run_bounded(tasks, limit=2)

    assert len(results) == 5
    assert isinstance(results[2], RuntimeError)
    assert [r for i, r in enumerate(results) if i != 2] == [0, 1, 3, 4]


@pytest.mark.asyncio
async def test_concurrency_never_exceeds_limit():
    running = 0
    peak = 0

    async def job():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return True

    results = await run_bounded([job for _ in range(7)], limit=3)

    assert results == [True] * 7
    assert peak == 3


@pytest.mark.asyncio
async def test_fewer_tasks_than_limit():
    async def job():
        return "done"

    assert await run_bounded([job], limit=4) == ["done"]


@pytest.mark.asyncio
async def test_empty_and_invalid_limit():
    assert await run_bounded([], limit=2) == []
    with pytest.raises(ValueError):
        await run_bounded([], limit=0)
