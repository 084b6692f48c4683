# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import partial

from carestats.domain import (
    AdminStats,
    AppointmentStatus,
    DashboardStats,
    DoctorStats,
    PatientStats,
    Principal,
    Role,
)
from carestats.infrastructure.cache import DEFAULT_STATS_TTL_MS, SingleFlight
from carestats.infrastructure.clock import Clock, SystemClock
from carestats.shared.logging import logger
from carestats.utils.asyncio_utils import gather_all

from ...interfaces import (
    AnalysisCollection,
    AppointmentCollection,
    ReportCollection,
    RoleBreakdownStrategy,
    StatsCachePort,
)

ADMIN_STATS_KEY = "dashboard:admin"

_UPCOMING_STATUSES = [AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value]


class GetDashboardStatsUseCase:
    """Role-scoped dashboard counters.

    Admin snapshots go through the shared cache (and the single-flight guard
    when one is given); doctor and patient snapshots are always computed
    fresh and never read or write the cache.
    """

    def __init__(
        self,
        *,
        appointments: AppointmentCollection,
        analyses: AnalysisCollection,
        reports: ReportCollection,
        role_breakdown: RoleBreakdownStrategy,
        cache: StatsCachePort,
        single_flight: SingleFlight[str, AdminStats] | None = None,
        clock: Clock | None = None,
        ttl_ms: int = DEFAULT_STATS_TTL_MS,
    ) -> None:
        self._appointments = appointments
        self._analyses = analyses
        self._reports = reports
        self._role_breakdown = role_breakdown
        self._cache = cache
        self._single_flight = single_flight
        self._clock = clock or SystemClock()
        self._ttl_ms = ttl_ms

    async def execute(self, principal: Principal) -> DashboardStats:
        role = principal.role
        if role == Role.ADMIN:
            return await self._admin_stats(principal)
        if role == Role.DOCTOR:
            snapshot = await self._doctor_stats(principal.id)
            return DashboardStats(role=role, snapshot=snapshot)
        if role == Role.PATIENT:
            snapshot = await self._patient_stats(principal.id)
            return DashboardStats(role=role, snapshot=snapshot)

        logger.info(f"stats.dashboard: no counters for role={role!r} user={principal.id}")
        return DashboardStats(role=role)

    async def _admin_stats(self, principal: Principal) -> DashboardStats:
        cached = self._cache.get()
        if cached is not None:
            logger.debug(f"stats.dashboard: admin cache hit user={principal.id}")
            return DashboardStats(role=principal.role, snapshot=cached, from_cache=True)

        # a clear() moves the generation, so later misses start their own flight
        generation = self._cache.generation
        compute = partial(self._compute_admin_stats, generation)
        if self._single_flight is not None:
            key = f"{ADMIN_STATS_KEY}:{generation}"
            if self._single_flight.in_flight(key):
                logger.debug(f"stats.dashboard: joining admin computation key={key}")
            snapshot = await self._single_flight.do(key, compute)
        else:
            snapshot = await compute()
        return DashboardStats(role=principal.role, snapshot=snapshot)

    async def _compute_admin_stats(self, generation: int) -> AdminStats:
        breakdown, total_appointments, total_analyses, pending_appointments = await gather_all(
            self._role_breakdown.count(),
            self._appointments.count_documents({}),
            self._analyses.count_documents({}),
            self._appointments.count_documents({"status": AppointmentStatus.PENDING.value}),
        )
        snapshot = AdminStats(
            total_users=breakdown.total,
            total_patients=breakdown.patients,
            total_doctors=breakdown.doctors,
            total_appointments=total_appointments,
            total_analyses=total_analyses,
            pending_appointments=pending_appointments,
        )
        if not self._cache.set(snapshot, self._ttl_ms, generation=generation):
            logger.info(
                f"stats.dashboard: admin snapshot not cached, invalidated during "
                f"computation generation={generation}"
            )
            return snapshot
        logger.info(
            f"stats.dashboard: admin snapshot computed mode={self._role_breakdown.mode} "
            f"users={snapshot.total_users} ttl_ms={self._ttl_ms}"
        )
        return snapshot

    async def _doctor_stats(self, doctor_id: str) -> DoctorStats:
        scope = {"doctor_id": doctor_id}
        mine, pending, completed, analyses, patient_ids = await gather_all(
            self._appointments.count_documents(scope),
            self._appointments.count_documents(
                {**scope, "status": AppointmentStatus.PENDING.value}
            ),
            self._appointments.count_documents(
                {**scope, "status": AppointmentStatus.COMPLETED.value}
            ),
            self._analyses.count_documents(scope),
            self._appointments.distinct("patient_id", scope),
        )
        return DoctorStats(
            my_appointments=mine,
            pending_appointments=pending,
            completed_appointments=completed,
            my_analyses=analyses,
            total_patients=len(patient_ids),
        )

    async def _patient_stats(self, patient_id: str) -> PatientStats:
        scope = {"patient_id": patient_id}
        upcoming_filter = {
            **scope,
            "status": {"$in": _UPCOMING_STATUSES},
            "appointment_date": {"$gte": self._clock.now()},
        }
        mine, upcoming, reports, analyses = await gather_all(
            self._appointments.count_documents(scope),
            self._appointments.count_documents(upcoming_filter),
            self._reports.count_documents(scope),
            self._analyses.count_documents(scope),
        )
        return PatientStats(
            my_appointments=mine,
            upcoming_appointments=upcoming,
            my_reports=reports,
            my_analyses=analyses,
        )


__all__ = ["ADMIN_STATS_KEY", "GetDashboardStatsUseCase"]
