# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from carestats.domain import UserRecord

from ...interfaces import UserCollection

MAX_LISTED_USERS = 100


class ListUsersUseCase:
    def __init__(self, *, users: UserCollection) -> None:
        self._users = users

    async def execute(
        self, *, role: str | None = None, search: str | None = None
    ) -> list[UserRecord]:
        query: dict[str, Any] = {}
        if role:
            query["role"] = role
        if search:
            query["$or"] = [
                {"name": {"$icontains": search}},
                {"email": {"$icontains": search}},
            ]

        users = await self._users.find(query)
        users.sort(key=lambda user: user.created_at, reverse=True)
        return users[:MAX_LISTED_USERS]


__all__ = ["MAX_LISTED_USERS", "ListUsersUseCase"]
