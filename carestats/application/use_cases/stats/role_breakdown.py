# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Literal

from carestats.domain import RoleBreakdown
from carestats.shared.logging import logger

from ...interfaces import GroupedUserCollection, RoleBreakdownStrategy, UserCollection

BreakdownMode = Literal["aggregate", "scan"]


class GroupedRoleBreakdown:
    """One grouped count per role, summed on the way out."""

    mode = "aggregate"

    def __init__(self, users: GroupedUserCollection) -> None:
        self._users = users

    async def count(self) -> RoleBreakdown:
        groups = await self._users.aggregate_by_role()
        breakdown = RoleBreakdown.from_groups(groups)
        logger.debug(
            f"stats.breakdown: aggregate groups={len(groups)} total={breakdown.total}"
        )
        return breakdown


class ScanRoleBreakdown:
    """Loads every user and counts roles in memory."""

    mode = "scan"

    def __init__(self, users: UserCollection) -> None:
        self._users = users

    async def count(self) -> RoleBreakdown:
        users = await self._users.find({})
        breakdown = RoleBreakdown.from_users(users)
        logger.debug(f"stats.breakdown: scan users={breakdown.total}")
        return breakdown


def build_role_breakdown(users: UserCollection, mode: BreakdownMode) -> RoleBreakdownStrategy:
    if mode == "aggregate":
        return GroupedRoleBreakdown(users)  # type: ignore[arg-type]
    if mode == "scan":
        return ScanRoleBreakdown(users)
    raise ValueError(f"unknown role breakdown mode: {mode!r}")


__all__ = [
    "BreakdownMode",
    "GroupedRoleBreakdown",
    "ScanRoleBreakdown",
    "build_role_breakdown",
]
