# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from carestats.domain import UserChanges, UserNotFoundError, UserRecord
from carestats.shared.logging import logger

from ...interfaces import StatsCachePort, UserCollection


class UpdateUserUseCase:
    def __init__(self, *, users: UserCollection, stats_cache: StatsCachePort) -> None:
        self._users = users
        self._stats_cache = stats_cache

    async def execute(self, user_id: str, updates: Mapping[str, Any]) -> UserRecord:
        changes = UserChanges(dict(updates))

        user = await self._users.find_by_id_and_update(user_id, changes.values)
        if user is None:
            raise UserNotFoundError(context={"user_id": user_id})

        if changes.changes_role:
            self._stats_cache.clear()
            logger.info(f"users.update: role changed user_id={user_id}, stats cache cleared")
        else:
            logger.info(f"users.update: ok user_id={user_id} fields={sorted(changes.values)}")
        return user


__all__ = ["UpdateUserUseCase"]
