# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///carestats.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = SettingsConfigDict(validate_by_name=True, extra="ignore")


class StorageConfig(BaseSettings):
    backend: Literal["sqlalchemy", "memory"] = Field("sqlalchemy", alias="STORAGE_BACKEND")

    model_config = SettingsConfigDict(validate_by_name=True, extra="ignore")


class StatsConfig(BaseSettings):
    cache_ttl_ms: int = Field(300_000, ge=1, alias="STATS_CACHE_TTL_MS")
    single_flight: bool = Field(True, alias="STATS_SINGLE_FLIGHT")
    breakdown_mode: Literal["auto", "aggregate", "scan"] = Field(
        "auto", alias="STATS_BREAKDOWN_MODE"
    )

    model_config = SettingsConfigDict(validate_by_name=True, extra="ignore")

    @field_validator("single_flight", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _storage_config_factory() -> StorageConfig:
    return StorageConfig()  # type: ignore[call-arg]


def _stats_config_factory() -> StatsConfig:
    return StatsConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"], alias="ALLOWED_ORIGINS")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    storage: StorageConfig = Field(default_factory=_storage_config_factory)
    stats: StatsConfig = Field(default_factory=_stats_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        validate_by_name=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    def is_development(self) -> bool:
        return self.app_env.lower() in ("development", "dev")

    def resolved_breakdown_mode(self) -> Literal["aggregate", "scan"]:
        if self.stats.breakdown_mode != "auto":
            return self.stats.breakdown_mode
        return "aggregate" if self.storage.backend == "sqlalchemy" else "scan"


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "DatabaseConfig", "StatsConfig", "StorageConfig", "load_config"]
