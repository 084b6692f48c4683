# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import cached_property

from carestats.application.interfaces import (
    AnalysisCollection,
    AppointmentCollection,
    ReportCollection,
    RoleBreakdownStrategy,
    UserCollection,
)
from carestats.application.use_cases.analytics.get_health_trends import (
    GetHealthTrendsUseCase,
)
from carestats.application.use_cases.stats.get_dashboard_stats import (
    GetDashboardStatsUseCase,
)
from carestats.application.use_cases.stats.role_breakdown import build_role_breakdown
from carestats.application.use_cases.users.delete_user import DeleteUserUseCase
from carestats.application.use_cases.users.get_user import GetUserUseCase
from carestats.application.use_cases.users.list_users import ListUsersUseCase
from carestats.application.use_cases.users.update_user import UpdateUserUseCase
from carestats.domain import AdminStats
from carestats.infrastructure.cache import SingleFlight, TTLCache
from carestats.infrastructure.clock import Clock, SystemClock
from carestats.infrastructure.db import create_db_engine, create_session_factory, init_db
from carestats.infrastructure.repositories.memory import (
    InMemoryAnalysisCollection,
    InMemoryAppointmentCollection,
    InMemoryReportCollection,
    InMemoryUserCollection,
)
from carestats.infrastructure.repositories.sqlalchemy import (
    SqlAlchemyAnalysisCollection,
    SqlAlchemyAppointmentCollection,
    SqlAlchemyReportCollection,
    SqlAlchemyUserCollection,
)
from carestats.interfaces.http.controllers.stats_controller import StatsController
from carestats.interfaces.http.controllers.users_controller import UsersController
from carestats.shared.config import AppConfig, load_config
from carestats.shared.logging import logger
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session


class Container:
    def __init__(self, config: AppConfig | None = None, *, clock: Clock | None = None) -> None:
        self._config = config
        self._clock = clock

    @cached_property
    def config(self) -> AppConfig:
        return self._config or load_config()

    @cached_property
    def clock(self) -> Clock:
        return self._clock or SystemClock()

    @property
    def uses_database(self) -> bool:
        return self.config.storage.backend == "sqlalchemy"

    # Storage

    @cached_property
    def engine(self) -> Engine:
        engine = create_db_engine(self.config.database)
        init_db(engine)
        return engine

    @cached_property
    def session_factory(self) -> Callable[[], Session]:
        return create_session_factory(self.engine)

    @cached_property
    def user_collection(self) -> UserCollection:
        if self.uses_database:
            return SqlAlchemyUserCollection(self.session_factory)
        return InMemoryUserCollection()

    @cached_property
    def appointment_collection(self) -> AppointmentCollection:
        if self.uses_database:
            return SqlAlchemyAppointmentCollection(self.session_factory)
        return InMemoryAppointmentCollection()

    @cached_property
    def analysis_collection(self) -> AnalysisCollection:
        if self.uses_database:
            return SqlAlchemyAnalysisCollection(self.session_factory)
        return InMemoryAnalysisCollection()

    @cached_property
    def report_collection(self) -> ReportCollection:
        if self.uses_database:
            return SqlAlchemyReportCollection(self.session_factory)
        return InMemoryReportCollection()

    # Stats

    @cached_property
    def stats_cache(self) -> TTLCache[AdminStats]:
        return TTLCache(self.clock, name="dashboard-stats")

    @cached_property
    def single_flight(self) -> SingleFlight[str, AdminStats] | None:
        if not self.config.stats.single_flight:
            return None
        return SingleFlight()

    @cached_property
    def role_breakdown(self) -> RoleBreakdownStrategy:
        mode = self.config.resolved_breakdown_mode()
        logger.info(
            f"container: role breakdown mode={mode} backend={self.config.storage.backend}"
        )
        return build_role_breakdown(self.user_collection, mode)

    @cached_property
    def get_dashboard_stats_use_case(self) -> GetDashboardStatsUseCase:
        return GetDashboardStatsUseCase(
            appointments=self.appointment_collection,
            analyses=self.analysis_collection,
            reports=self.report_collection,
            role_breakdown=self.role_breakdown,
            cache=self.stats_cache,
            single_flight=self.single_flight,
            clock=self.clock,
            ttl_ms=self.config.stats.cache_ttl_ms,
        )

    @cached_property
    def get_health_trends_use_case(self) -> GetHealthTrendsUseCase:
        return GetHealthTrendsUseCase(analyses=self.analysis_collection)

    # Users

    @cached_property
    def list_users_use_case(self) -> ListUsersUseCase:
        return ListUsersUseCase(users=self.user_collection)

    @cached_property
    def get_user_use_case(self) -> GetUserUseCase:
        return GetUserUseCase(users=self.user_collection)

    @cached_property
    def update_user_use_case(self) -> UpdateUserUseCase:
        return UpdateUserUseCase(users=self.user_collection, stats_cache=self.stats_cache)

    @cached_property
    def delete_user_use_case(self) -> DeleteUserUseCase:
        return DeleteUserUseCase(users=self.user_collection, stats_cache=self.stats_cache)

    # Controllers

    @cached_property
    def stats_controller(self) -> StatsController:
        return StatsController(
            dashboard_stats_use_case=self.get_dashboard_stats_use_case,
            health_trends_use_case=self.get_health_trends_use_case,
        )

    @cached_property
    def users_controller(self) -> UsersController:
        return UsersController(
            list_use_case=self.list_users_use_case,
            get_use_case=self.get_user_use_case,
            update_use_case=self.update_user_use_case,
            delete_use_case=self.delete_user_use_case,
        )


__all__ = ["Container"]
