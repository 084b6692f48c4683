from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Coroutine
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class _Runner(Generic[T]):  # noqa: UP046
    def __init__(self, coro: Coroutine[Any, Any, T]):
        self.coro = coro
        self.out: T | None = None
        self.err: BaseException | None = None

    def run(self) -> None:
        try:
            self.out = asyncio.run(self.coro)
        except BaseException as e:  # noqa: BLE001
            self.err = e


def run_async(coro: Coroutine[Any, Any, T]) -> T:  # noqa: UP047
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop
        return asyncio.run(coro)

    if loop.is_running():
        r: _Runner[T] = _Runner(coro)
        t = threading.Thread(target=r.run, daemon=True)
        t.start()
        t.join()
        if r.err:
            raise r.err
        return r.out  # type: ignore[return-value]
    return asyncio.run(coro)


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Await every branch concurrently; the first failure cancels the rest.

    The failing branch's exception is re-raised as is.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
