# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from carestats.domain import UserNotFoundError, UserRecord

from ...interfaces import UserCollection


class GetUserUseCase:
    def __init__(self, *, users: UserCollection) -> None:
        self._users = users

    async def execute(self, user_id: str) -> UserRecord:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(context={"user_id": user_id})
        return user


__all__ = ["GetUserUseCase"]
