# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Clock abstraction so that TTLs and "now" comparisons can be faked in tests."""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current wall-clock time, timezone aware (UTC)."""
        ...

    def monotonic_ms(self) -> float:
        """Monotonic milliseconds, only meaningful as a difference."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)

    def monotonic_ms(self) -> float:
        return time.monotonic() * 1000.0


class FakeClock:
    """
    Manually driven clock.
    Wall time and monotonic time advance together.
    """

    def __init__(self, initial: datetime | None = None, monotonic_ms: float = 0.0) -> None:
        if initial is None:
            initial = datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC)
        self._now = initial
        self._monotonic_ms = monotonic_ms

    def now(self) -> datetime:
        return self._now

    def monotonic_ms(self) -> float:
        return self._monotonic_ms

    def set_ms(self, value: float) -> None:
        """Jump the monotonic clock to ``value`` (wall time moves by the same delta)."""
        self.advance_ms(value - self._monotonic_ms)

    def advance_ms(self, delta: float) -> None:
        self._monotonic_ms += delta
        self._now += timedelta(milliseconds=delta)


__all__ = ["Clock", "FakeClock", "SystemClock"]
