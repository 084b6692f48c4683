# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypeAlias

from carestats.domain import (
    AnalysisRecord,
    RoleBreakdown,
    RoleGroup,
    UserRecord,
)

# Field -> value, or field -> {"$in": [...], "$gte": ..., ...}; "$or" takes a
# list of such mappings.
Filter: TypeAlias = Mapping[str, Any]


class UserCollection(Protocol):
    async def find(self, filter: Filter | None = None) -> list[UserRecord]: ...

    async def find_by_id(self, user_id: str) -> UserRecord | None: ...

    async def find_by_id_and_update(
        self, user_id: str, changes: Mapping[str, Any]
    ) -> UserRecord | None: ...

    async def find_by_id_and_delete(self, user_id: str) -> UserRecord | None: ...


class GroupedUserCollection(UserCollection, Protocol):
    async def aggregate_by_role(self) -> list[RoleGroup]: ...


class AppointmentCollection(Protocol):
    async def count_documents(self, filter: Filter | None = None) -> int: ...

    async def distinct(self, field: str, filter: Filter | None = None) -> list[Any]: ...


class AnalysisCollection(Protocol):
    async def count_documents(self, filter: Filter | None = None) -> int: ...

    async def find(self, filter: Filter | None = None) -> list[AnalysisRecord]: ...


class ReportCollection(Protocol):
    async def count_documents(self, filter: Filter | None = None) -> int: ...


class RoleBreakdownStrategy(Protocol):
    mode: str

    async def count(self) -> RoleBreakdown: ...


class StatsCachePort(Protocol):
    @property
    def generation(self) -> int: ...

    def get(self) -> Any | None: ...

    def set(self, value: Any, ttl_ms: int, *, generation: int | None = None) -> bool: ...

    def clear(self) -> None: ...
