"""
고정 크기 워커 풀

브라우저 페이지처럼 메모리를 많이 쓰는 작업을 동시에 N개까지만 실행합니다.
- min(limit, len(tasks))개의 워커가 큐에서 아직 처리되지 않은 인덱스를 꺼내 실행
- 한 작업이 실패해도 해당 인덱스에 Exception을 남기고 나머지 작업/워커는 계속 진행
- 모든 워커가 끝난 뒤에만 반환 (결과 순서 = 작업 순서)
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar, Union

logger = logging.getLogger("app")

T = TypeVar("T")
TaskFactory = Callable[[], Awaitable[T]]


async def run_bounded(tasks: Sequence[TaskFactory], limit: int) -> List[Union[T, Exception]]:
    """
    Args:
        tasks: 호출 시 코루틴을 만드는 팩토리 리스트 (워커가 꺼낼 때 비로소 시작됨)
        limit: 동시에 실행할 최대 작업 수 (1 이상)

    Returns:
        tasks와 같은 순서의 결과 리스트. 실패한 자리에는 발생한 Exception
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if not tasks:
        return []

    results: List[Union[T, Exception, None]] = [None] * len(tasks)
    pending: asyncio.Queue[int] = asyncio.Queue()
    for index in range(len(tasks)):
        pending.put_nowait(index)

    async def worker(worker_id: int) -> None:
        while True:
            try:
                index = pending.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[index] = await tasks[index]()
            except Exception as e:
                logger.warning({
                    "message": "worker task failed",
                    "worker": worker_id,
                    "task_index": index,
                    "error": repr(e),
                })
                results[index] = e

    worker_count = min(limit, len(tasks))
    await asyncio.gather(*(worker(i) for i in range(worker_count)))
    return results
