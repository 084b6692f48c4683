# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (
    AdminStats,
    AnalysisRecord,
    AppointmentRecord,
    AppointmentStatus,
    DashboardStats,
    DoctorStats,
    HealthTrendPoint,
    PatientStats,
    Principal,
    ReportRecord,
    Role,
    RoleBreakdown,
    RoleGroup,
    StatsSnapshot,
    UserChanges,
    UserRecord,
)
from .exceptions import (
    InvalidUserUpdateError,
    InvariantViolation,
    SelfDeletionError,
    UserNotFoundError,
)

__all__ = [
    "AdminStats",
    "AnalysisRecord",
    "AppointmentRecord",
    "AppointmentStatus",
    "DashboardStats",
    "DoctorStats",
    "HealthTrendPoint",
    "InvalidUserUpdateError",
    "InvariantViolation",
    "PatientStats",
    "Principal",
    "ReportRecord",
    "Role",
    "RoleBreakdown",
    "RoleGroup",
    "SelfDeletionError",
    "StatsSnapshot",
    "UserChanges",
    "UserNotFoundError",
    "UserRecord",
]
