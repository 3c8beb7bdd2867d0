from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar


T = TypeVar("T")
R = TypeVar("R")


async def gather_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
    label: Callable[[T], str] = str,
) -> List[R]:
    """
    items 를 worker 로 동시에 처리하되, 동시에 진행 중인 요청은 limit 개까지.
    - 실패한 item 은 로그만 남기고 결과에서 빠진다 (나머지는 계속)
    - 결과는 입력 순서 유지
    """
    semaphore = asyncio.Semaphore(limit)
    total = len(items)
    done = 0

    async def _run(item: T) -> Optional[R]:
        nonlocal done
        async with semaphore:
            try:
                return await worker(item)
            except Exception as e:
                print(f"[상세] 실패: {label(item)} -> {e}")
                return None
            finally:
                done += 1
                if done % limit == 0 or done == total:
                    print(f"[진행] {done}/{total}")

    results = await asyncio.gather(*(_run(item) for item in items))
    return [r for r in results if r is not None]


async def grow_until_stable(
    step: Callable[[int], Awaitable[int]],
    max_iterations: int,
) -> int:
    """
    step(i) 로 목록을 늘리고(스크롤/다음 페이지) 누적 개수를 받는다.
    개수가 더 안 늘거나 max_iterations 에 닿으면 멈춤.
    """
    count = 0
    for i in range(max_iterations):
        prev_count = count
        count = await step(i)
        if count <= prev_count:
            break
    return count
