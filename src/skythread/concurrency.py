from __future__ import annotations

import asyncio
from typing import Any, Awaitable


async def gather_fail_fast(*aws: Awaitable[Any]) -> tuple[Any, ...]:
    """Await all of ``aws`` concurrently and return results in order.

    The first failure to complete is raised immediately. Siblings keep
    running to completion and whatever they produce, including errors, is
    dropped.
    """
    if not aws:
        return ()
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.add_done_callback(_discard_result)
        raise
    return tuple(results)


def _discard_result(task: asyncio.Future[Any]) -> None:
    if not task.cancelled():
        task.exception()
