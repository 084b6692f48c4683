# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from carestats.domain import Principal, SelfDeletionError, UserNotFoundError
from carestats.shared.logging import logger

from ...interfaces import StatsCachePort, UserCollection


class DeleteUserUseCase:
    def __init__(self, *, users: UserCollection, stats_cache: StatsCachePort) -> None:
        self._users = users
        self._stats_cache = stats_cache

    async def execute(self, user_id: str, *, requester: Principal) -> None:
        if user_id == requester.id:
            raise SelfDeletionError()

        deleted = await self._users.find_by_id_and_delete(user_id)
        if deleted is None:
            raise UserNotFoundError(context={"user_id": user_id})

        self._stats_cache.clear()
        logger.info(f"users.delete: ok user_id={user_id} by={requester.id}")


__all__ = ["DeleteUserUseCase"]
