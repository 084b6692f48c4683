from __future__ import annotations

from pathlib import Path

import pytest

from carestats.application.use_cases.stats.role_breakdown import (
    GroupedRoleBreakdown,
    ScanRoleBreakdown,
)
from carestats.infrastructure.container import Container
from carestats.infrastructure.repositories.memory import InMemoryUserCollection
from carestats.infrastructure.repositories.sqlalchemy import SqlAlchemyUserCollection
from carestats.shared.config import AppConfig, DatabaseConfig, StatsConfig, StorageConfig


def test_stats_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("STATS_CACHE_TTL_MS", "STATS_SINGLE_FLIGHT", "STATS_BREAKDOWN_MODE"):
        monkeypatch.delenv(name, raising=False)

    config = StatsConfig()

    assert config.cache_ttl_ms == 300_000
    assert config.single_flight is True
    assert config.breakdown_mode == "auto"


def test_stats_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATS_CACHE_TTL_MS", "1500")
    monkeypatch.setenv("STATS_SINGLE_FLIGHT", "no")
    monkeypatch.setenv("STATS_BREAKDOWN_MODE", "scan")

    config = StatsConfig()

    assert config.cache_ttl_ms == 1500
    assert config.single_flight is False
    assert config.breakdown_mode == "scan"


@pytest.mark.parametrize(
    ("backend", "mode", "expected"),
    [
        ("sqlalchemy", "auto", "aggregate"),
        ("memory", "auto", "scan"),
        ("memory", "aggregate", "aggregate"),
        ("sqlalchemy", "scan", "scan"),
    ],
)
def test_breakdown_mode_resolution(backend: str, mode: str, expected: str) -> None:
    config = AppConfig(
        storage=StorageConfig(backend=backend),
        stats=StatsConfig(breakdown_mode=mode),
    )
    assert config.resolved_breakdown_mode() == expected


def test_environment_modes() -> None:
    assert AppConfig(app_env="production").is_production()
    assert AppConfig(app_env="dev").is_development()
    assert not AppConfig(app_env="test").is_development()


def test_memory_container_wiring() -> None:
    container = Container(AppConfig(storage=StorageConfig(backend="memory")))

    assert isinstance(container.user_collection, InMemoryUserCollection)
    assert isinstance(container.role_breakdown, ScanRoleBreakdown)
    assert container.single_flight is not None
    assert container.update_user_use_case._stats_cache is container.stats_cache


def test_database_container_wiring(tmp_path: Path) -> None:
    container = Container(
        AppConfig(
            database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'wiring.db'}"),
            storage=StorageConfig(backend="sqlalchemy"),
            stats=StatsConfig(single_flight=False),
        )
    )

    assert isinstance(container.user_collection, SqlAlchemyUserCollection)
    assert isinstance(container.role_breakdown, GroupedRoleBreakdown)
    assert container.single_flight is None
    container.engine.dispose()
