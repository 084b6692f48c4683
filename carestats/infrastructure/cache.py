# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from concurrent.futures import Future
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

from carestats.infrastructure.clock import Clock, SystemClock
from carestats.shared.logging import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_STATS_TTL_MS = 5 * 60 * 1000


@dataclass(slots=True)
class CacheEntry(Generic[V]):  # noqa: UP046
    value: V
    expires_at: float

    def is_fresh(self, now_ms: float) -> bool:
        return now_ms < self.expires_at


class TTLCache(Generic[V]):  # noqa: UP046
    """Single-slot cache: one value, one expiry, last writer wins.

    Expiry is evaluated lazily on ``get``; nothing purges the slot in the
    background. Every ``clear`` bumps ``generation``; a ``set`` tagged with an
    older generation is dropped, so a computation that started before an
    invalidation never repopulates the slot.
    """

    def __init__(self, clock: Clock | None = None, *, name: str = "stats") -> None:
        self._clock = clock or SystemClock()
        self._name = name
        self._lock = Lock()
        self._entry: CacheEntry[V] | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self) -> V | None:
        now = self._clock.monotonic_ms()
        with self._lock:
            entry = self._entry
        if entry is None:
            logger.debug(f"cache: miss name={self._name}")
            return None
        if not entry.is_fresh(now):
            logger.debug(f"cache: expired name={self._name}")
            return None
        logger.debug(f"cache: hit name={self._name}")
        return entry.value

    def set(
        self,
        value: V,
        ttl_ms: int = DEFAULT_STATS_TTL_MS,
        *,
        generation: int | None = None,
    ) -> bool:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        expires_at = self._clock.monotonic_ms() + ttl_ms
        with self._lock:
            if generation is not None and generation != self._generation:
                current = self._generation
                stored = False
            else:
                self._entry = CacheEntry(value=value, expires_at=expires_at)
                stored = True
        if not stored:
            logger.debug(
                f"cache: stale set dropped name={self._name} "
                f"generation={generation} current={current}"
            )
            return False
        logger.debug(f"cache: set name={self._name} ttl_ms={ttl_ms}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._entry = None
            self._generation += 1
            generation = self._generation
        logger.debug(f"cache: clear name={self._name} generation={generation}")


class SingleFlight(Generic[K, V]):  # noqa: UP046
    """Collapse concurrent calls for the same key into one execution.

    The first caller runs the factory; callers arriving before it settles
    await the same result or exception. Works across event loops and threads.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._calls: dict[K, Future[V]] = {}

    def in_flight(self, key: K) -> bool:
        with self._lock:
            return key in self._calls

    async def do(self, key: K, factory: Callable[[], Awaitable[V]]) -> V:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if call is None:
                call = Future()
                # running futures cannot be cancelled by a waiter going away
                call.set_running_or_notify_cancel()
                self._calls[key] = call

        if not leader:
            logger.debug(f"singleflight: joined key={key}")
            return await asyncio.wrap_future(call)

        try:
            value = await factory()
        except BaseException as exc:
            call.set_exception(exc)
            raise
        else:
            call.set_result(value)
            return value
        finally:
            with self._lock:
                self._calls.pop(key, None)


__all__ = ["DEFAULT_STATS_TTL_MS", "CacheEntry", "SingleFlight", "TTLCache"]
