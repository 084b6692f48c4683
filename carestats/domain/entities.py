# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .exceptions import InvalidUserUpdateError, InvariantViolation


class Role(StrEnum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


class AppointmentStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class Principal:
    """The already authenticated caller of a request."""

    id: str
    role: str

    def __post_init__(self) -> None:
        if not self.id:
            raise InvariantViolation("principal id must not be empty", field="id")


@dataclass(slots=True, frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    role: str
    created_at: datetime
    phone: str | None = None
    date_of_birth: datetime | None = None
    address: str | None = None
    specialization: str | None = None
    license_number: str | None = None
    blood_group: str | None = None
    emergency_contact: Mapping[str, Any] | None = None
    is_active: bool = True


@dataclass(slots=True, frozen=True)
class AppointmentRecord:
    id: str
    patient_id: str
    doctor_id: str
    status: str
    appointment_date: datetime
    created_at: datetime


@dataclass(slots=True, frozen=True)
class AnalysisRecord:
    id: str
    patient_id: str
    created_at: datetime
    doctor_id: str | None = None
    severity: str | None = None
    confidence: float | None = None
    possible_diagnoses: tuple[str, ...] = ()
    accuracy: float | None = None


@dataclass(slots=True, frozen=True)
class ReportRecord:
    id: str
    patient_id: str
    created_at: datetime
    doctor_id: str | None = None


@dataclass(slots=True, frozen=True)
class RoleGroup:
    role: str | None
    count: int


@dataclass(slots=True, frozen=True)
class RoleBreakdown:
    total: int
    patients: int
    doctors: int

    @classmethod
    def from_groups(cls, groups: list[RoleGroup]) -> RoleBreakdown:
        counts = {group.role: group.count for group in groups}
        return cls(
            total=sum(group.count for group in groups),
            patients=counts.get(Role.PATIENT.value, 0),
            doctors=counts.get(Role.DOCTOR.value, 0),
        )

    @classmethod
    def from_users(cls, users: list[UserRecord]) -> RoleBreakdown:
        return cls(
            total=len(users),
            patients=sum(1 for user in users if user.role == Role.PATIENT.value),
            doctors=sum(1 for user in users if user.role == Role.DOCTOR.value),
        )


@dataclass(slots=True, frozen=True)
class AdminStats:
    total_users: int
    total_patients: int
    total_doctors: int
    total_appointments: int
    total_analyses: int
    pending_appointments: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalUsers": self.total_users,
            "totalPatients": self.total_patients,
            "totalDoctors": self.total_doctors,
            "totalAppointments": self.total_appointments,
            "totalAnalyses": self.total_analyses,
            "pendingAppointments": self.pending_appointments,
        }


@dataclass(slots=True, frozen=True)
class DoctorStats:
    my_appointments: int
    pending_appointments: int
    completed_appointments: int
    my_analyses: int
    total_patients: int

    def to_dict(self) -> dict[str, int]:
        return {
            "myAppointments": self.my_appointments,
            "pendingAppointments": self.pending_appointments,
            "completedAppointments": self.completed_appointments,
            "myAnalyses": self.my_analyses,
            "totalPatients": self.total_patients,
        }


@dataclass(slots=True, frozen=True)
class PatientStats:
    my_appointments: int
    upcoming_appointments: int
    my_reports: int
    my_analyses: int

    def to_dict(self) -> dict[str, int]:
        return {
            "myAppointments": self.my_appointments,
            "upcomingAppointments": self.upcoming_appointments,
            "myReports": self.my_reports,
            "myAnalyses": self.my_analyses,
        }


StatsSnapshot = AdminStats | DoctorStats | PatientStats


@dataclass(slots=True, frozen=True)
class DashboardStats:
    role: str
    snapshot: StatsSnapshot | None = None
    from_cache: bool = False

    def to_dict(self) -> dict[str, int]:
        if self.snapshot is None:
            return {}
        return self.snapshot.to_dict()


@dataclass(slots=True, frozen=True)
class HealthTrendPoint:
    date: datetime
    severity: str = "low"
    confidence: float = 0
    accuracy: float | None = None
    diagnosis_count: int = 0

    @classmethod
    def from_analysis(cls, analysis: AnalysisRecord) -> HealthTrendPoint:
        return cls(
            date=analysis.created_at,
            severity=analysis.severity or "low",
            confidence=analysis.confidence or 0,
            accuracy=analysis.accuracy or None,
            diagnosis_count=len(analysis.possible_diagnoses),
        )


USER_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "phone",
        "date_of_birth",
        "address",
        "specialization",
        "license_number",
        "blood_group",
        "emergency_contact",
        "is_active",
        "role",
    }
)


@dataclass(slots=True, frozen=True)
class UserChanges:
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.values) - USER_UPDATABLE_FIELDS)
        if unknown:
            raise InvalidUserUpdateError(context={"fields": unknown})

    @property
    def changes_role(self) -> bool:
        return "role" in self.values


__all__ = [
    "AdminStats",
    "AnalysisRecord",
    "AppointmentRecord",
    "AppointmentStatus",
    "DashboardStats",
    "DoctorStats",
    "HealthTrendPoint",
    "PatientStats",
    "Principal",
    "ReportRecord",
    "Role",
    "RoleBreakdown",
    "RoleGroup",
    "StatsSnapshot",
    "USER_UPDATABLE_FIELDS",
    "UserChanges",
    "UserRecord",
]
