from __future__ import annotations

import asyncio
import threading
import time

import pytest

from carestats.infrastructure.cache import SingleFlight


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_execution() -> None:
    flight: SingleFlight[str, int] = SingleFlight()
    calls = 0
    gate = asyncio.Event()

    async def compute() -> int:
        nonlocal calls
        calls += 1
        await gate.wait()
        return 42

    tasks = [asyncio.create_task(flight.do("stats", compute)) for _ in range(5)]
    await asyncio.sleep(0)
    assert flight.in_flight("stats")

    gate.set()
    results = await asyncio.gather(*tasks)

    assert results == [42] * 5
    assert calls == 1
    assert not flight.in_flight("stats")


@pytest.mark.asyncio
async def test_failure_reaches_every_waiter_and_releases_key() -> None:
    flight: SingleFlight[str, int] = SingleFlight()
    gate = asyncio.Event()

    async def explode() -> int:
        await gate.wait()
        raise RuntimeError("count failed")

    tasks = [asyncio.create_task(flight.do("stats", explode)) for _ in range(3)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(result, RuntimeError) for result in results)
    assert not flight.in_flight("stats")

    async def recover() -> int:
        return 7

    assert await flight.do("stats", recover) == 7


@pytest.mark.asyncio
async def test_distinct_keys_run_independently() -> None:
    flight: SingleFlight[str, str] = SingleFlight()
    seen: list[str] = []

    def factory(key: str):
        async def run() -> str:
            seen.append(key)
            await asyncio.sleep(0)
            return key

        return run

    results = await asyncio.gather(flight.do("a", factory("a")), flight.do("b", factory("b")))

    assert results == ["a", "b"]
    assert sorted(seen) == ["a", "b"]


@pytest.mark.asyncio
async def test_sequential_calls_are_not_deduplicated() -> None:
    flight: SingleFlight[str, int] = SingleFlight()
    calls = 0

    async def compute() -> int:
        nonlocal calls
        calls += 1
        return calls

    assert await flight.do("stats", compute) == 1
    assert await flight.do("stats", compute) == 2


def test_callers_on_separate_event_loops_share_one_execution() -> None:
    flight: SingleFlight[str, int] = SingleFlight()
    started = threading.Event()
    release = threading.Event()
    calls = 0
    results: dict[str, int] = {}

    async def compute() -> int:
        nonlocal calls
        calls += 1
        started.set()
        await asyncio.to_thread(release.wait, 5)
        return 99

    def worker(name: str) -> None:
        results[name] = asyncio.run(flight.do("stats", compute))

    leader = threading.Thread(target=worker, args=("leader",))
    leader.start()
    assert started.wait(5)

    follower = threading.Thread(target=worker, args=("follower",))
    follower.start()
    time.sleep(0.1)
    release.set()

    leader.join(5)
    follower.join(5)

    assert results == {"leader": 99, "follower": 99}
    assert calls == 1
