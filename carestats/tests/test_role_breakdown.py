from __future__ import annotations

import random
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from carestats.application.use_cases.stats.role_breakdown import (
    GroupedRoleBreakdown,
    ScanRoleBreakdown,
    build_role_breakdown,
)
from carestats.domain import RoleBreakdown, RoleGroup, UserRecord
from carestats.infrastructure.db import create_db_engine, create_session_factory, init_db
from carestats.infrastructure.repositories.memory import InMemoryUserCollection, new_id
from carestats.infrastructure.repositories.sqlalchemy import SqlAlchemyUserCollection
from carestats.shared.config import DatabaseConfig

ROLES = ("admin", "doctor", "patient", "nurse")
BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


def _random_users(seed: int) -> list[UserRecord]:
    rng = random.Random(seed)
    count = rng.randint(0, 40)
    return [
        UserRecord(
            id=new_id(),
            name=f"user-{index}",
            email=f"user-{seed}-{index}@example.test",
            role=rng.choice(ROLES),
            created_at=BASE_TIME + timedelta(minutes=index),
        )
        for index in range(count)
    ]


@pytest.fixture()
def sql_users(tmp_path: Path) -> Iterator[SqlAlchemyUserCollection]:
    engine = create_db_engine(DatabaseConfig(url=f"sqlite:///{tmp_path / 'roles.db'}"))
    init_db(engine)
    yield SqlAlchemyUserCollection(create_session_factory(engine))
    engine.dispose()


def test_breakdown_from_groups_sums_every_role() -> None:
    groups = [
        RoleGroup(role="patient", count=6),
        RoleGroup(role="doctor", count=3),
        RoleGroup(role="admin", count=1),
    ]
    assert RoleBreakdown.from_groups(groups) == RoleBreakdown(total=10, patients=6, doctors=3)


def test_breakdown_from_groups_missing_roles_count_zero() -> None:
    assert RoleBreakdown.from_groups([RoleGroup(role="admin", count=2)]) == RoleBreakdown(
        total=2, patients=0, doctors=0
    )
    assert RoleBreakdown.from_groups([]) == RoleBreakdown(total=0, patients=0, doctors=0)


def test_build_role_breakdown_selects_strategy() -> None:
    users = InMemoryUserCollection()
    assert isinstance(build_role_breakdown(users, "aggregate"), GroupedRoleBreakdown)
    assert isinstance(build_role_breakdown(users, "scan"), ScanRoleBreakdown)
    with pytest.raises(ValueError):
        build_role_breakdown(users, "mapreduce")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_ten_user_population() -> None:
    roles = ["patient"] * 6 + ["doctor"] * 3 + ["admin"]
    users = InMemoryUserCollection(
        UserRecord(
            id=new_id(),
            name=f"u{index}",
            email=f"u{index}@example.test",
            role=role,
            created_at=BASE_TIME,
        )
        for index, role in enumerate(roles)
    )
    expected = RoleBreakdown(total=10, patients=6, doctors=3)

    assert await GroupedRoleBreakdown(users).count() == expected
    assert await ScanRoleBreakdown(users).count() == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", range(8))
async def test_strategies_agree_in_memory(seed: int) -> None:
    records = _random_users(seed)
    users = InMemoryUserCollection(records)

    grouped = await GroupedRoleBreakdown(users).count()
    scanned = await ScanRoleBreakdown(users).count()

    assert grouped == scanned
    assert grouped.total == len(records)


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", range(4))
async def test_strategies_agree_on_database(
    sql_users: SqlAlchemyUserCollection, seed: int
) -> None:
    records = _random_users(seed)
    for record in records:
        sql_users.insert(record)

    grouped = await GroupedRoleBreakdown(sql_users).count()
    scanned = await ScanRoleBreakdown(sql_users).count()

    assert grouped == scanned
    assert grouped == RoleBreakdown.from_users(records)
