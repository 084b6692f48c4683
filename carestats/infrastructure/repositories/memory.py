# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""In-process collections. They support role grouping too, but the scan
strategy is the default for this backend."""

from __future__ import annotations

import uuid
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import replace
from threading import Lock
from typing import Any, Generic, Protocol, TypeVar

from carestats.application.interfaces import Filter
from carestats.domain import (
    AnalysisRecord,
    AppointmentRecord,
    ReportRecord,
    RoleGroup,
    UserRecord,
)

from .filters import as_utc, matches


class _Record(Protocol):
    @property
    def id(self) -> str: ...


R = TypeVar("R", bound=_Record)


def new_id() -> str:
    return uuid.uuid4().hex


class _InMemoryCollection(Generic[R]):  # noqa: UP046
    def __init__(self, records: Iterable[R] = ()) -> None:
        self._lock = Lock()
        self._records: dict[str, R] = {}
        for record in records:
            self.insert(record)

    def insert(self, record: R) -> R:
        with self._lock:
            self._records[record.id] = record
        return record

    def _snapshot(self) -> list[R]:
        with self._lock:
            return list(self._records.values())

    async def find(self, filter: Filter | None = None) -> list[R]:
        return [record for record in self._snapshot() if matches(record, filter)]

    async def count_documents(self, filter: Filter | None = None) -> int:
        return sum(1 for record in self._snapshot() if matches(record, filter))

    async def distinct(self, field: str, filter: Filter | None = None) -> list[Any]:
        seen: dict[Any, None] = {}
        for record in self._snapshot():
            if matches(record, filter):
                value = getattr(record, field)
                if value is not None:
                    seen.setdefault(value, None)
        return list(seen)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryUserCollection(_InMemoryCollection[UserRecord]):
    async def find_by_id(self, user_id: str) -> UserRecord | None:
        with self._lock:
            return self._records.get(user_id)

    async def find_by_id_and_update(
        self, user_id: str, changes: Mapping[str, Any]
    ) -> UserRecord | None:
        with self._lock:
            current = self._records.get(user_id)
            if current is None:
                return None
            normalized = {key: as_utc(value) for key, value in changes.items()}
            updated = replace(current, **normalized)
            self._records[user_id] = updated
            return updated

    async def find_by_id_and_delete(self, user_id: str) -> UserRecord | None:
        with self._lock:
            return self._records.pop(user_id, None)

    async def aggregate_by_role(self) -> list[RoleGroup]:
        counts = Counter(user.role for user in self._snapshot())
        return [RoleGroup(role=role, count=count) for role, count in counts.items()]


class InMemoryAppointmentCollection(_InMemoryCollection[AppointmentRecord]):
    pass


class InMemoryAnalysisCollection(_InMemoryCollection[AnalysisRecord]):
    pass


class InMemoryReportCollection(_InMemoryCollection[ReportRecord]):
    pass


__all__ = [
    "InMemoryAnalysisCollection",
    "InMemoryAppointmentCollection",
    "InMemoryReportCollection",
    "InMemoryUserCollection",
    "new_id",
]
