# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Mapping
from typing import Any

from carestats.application.interfaces import Filter
from carestats.domain import (
    AnalysisRecord,
    AppointmentRecord,
    ReportRecord,
    RoleGroup,
    UserRecord,
)
from carestats.infrastructure.db.models import AIAnalysis, Appointment, Report, User
from carestats.infrastructure.unit_of_work import unit_of_work_scope
from carestats.shared.errors import MalformedIdentifierError
from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from .filters import as_utc, to_sql

_IDENTIFIER = re.compile(r"[0-9a-f]{32}")


def _checked_id(identifier: str) -> str:
    if not isinstance(identifier, str) or not _IDENTIFIER.fullmatch(identifier):
        raise MalformedIdentifierError(identifier)
    return identifier


def _user_to_domain(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        name=row.name,
        email=row.email,
        role=row.role,
        created_at=as_utc(row.created_at),
        phone=row.phone,
        date_of_birth=as_utc(row.date_of_birth),
        address=row.address,
        specialization=row.specialization,
        license_number=row.license_number,
        blood_group=row.blood_group,
        emergency_contact=row.emergency_contact,
        is_active=bool(row.is_active),
    )


def _analysis_to_domain(row: AIAnalysis) -> AnalysisRecord:
    return AnalysisRecord(
        id=row.id,
        patient_id=row.patient_id,
        created_at=as_utc(row.created_at),
        doctor_id=row.doctor_id,
        severity=row.severity,
        confidence=row.confidence,
        possible_diagnoses=tuple(row.possible_diagnoses or ()),
        accuracy=row.accuracy,
    )


class _SqlAlchemyCollection:
    model: type[Any]

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def _count(self, filter: Filter | None) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            stmt = select(func.count()).select_from(self.model).where(to_sql(self.model, filter))
            return int(session.execute(stmt).scalar_one())

    async def count_documents(self, filter: Filter | None = None) -> int:
        return await asyncio.to_thread(self._count, filter)


class SqlAlchemyUserCollection(_SqlAlchemyCollection):
    model = User

    def insert(self, record: UserRecord, *, password_hash: str = "") -> UserRecord:
        with unit_of_work_scope(self._session_factory) as session:
            session.add(
                User(
                    id=_checked_id(record.id),
                    name=record.name,
                    email=record.email,
                    password_hash=password_hash,
                    role=record.role,
                    phone=record.phone,
                    date_of_birth=as_utc(record.date_of_birth),
                    address=record.address,
                    specialization=record.specialization,
                    license_number=record.license_number,
                    blood_group=record.blood_group,
                    emergency_contact=(
                        dict(record.emergency_contact) if record.emergency_contact else None
                    ),
                    is_active=record.is_active,
                    created_at=as_utc(record.created_at),
                )
            )
        return record

    def _find(self, filter: Filter | None) -> list[UserRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.scalars(
                select(User).where(to_sql(User, filter)).order_by(desc(User.created_at))
            ).all()
            return [_user_to_domain(row) for row in rows]

    async def find(self, filter: Filter | None = None) -> list[UserRecord]:
        return await asyncio.to_thread(self._find, filter)

    def _get(self, user_id: str) -> UserRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(User, _checked_id(user_id))
            return _user_to_domain(row) if row else None

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        return await asyncio.to_thread(self._get, user_id)

    def _update(self, user_id: str, changes: Mapping[str, Any]) -> UserRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(User, _checked_id(user_id))
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, as_utc(value))
            session.flush()
            return _user_to_domain(row)

    async def find_by_id_and_update(
        self, user_id: str, changes: Mapping[str, Any]
    ) -> UserRecord | None:
        return await asyncio.to_thread(self._update, user_id, changes)

    def _delete(self, user_id: str) -> UserRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(User, _checked_id(user_id))
            if row is None:
                return None
            removed = _user_to_domain(row)
            session.delete(row)
            return removed

    async def find_by_id_and_delete(self, user_id: str) -> UserRecord | None:
        return await asyncio.to_thread(self._delete, user_id)

    def _group_by_role(self) -> list[RoleGroup]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(User.role, func.count(User.id)).group_by(User.role)
            ).all()
            return [RoleGroup(role=role, count=int(count)) for role, count in rows]

    async def aggregate_by_role(self) -> list[RoleGroup]:
        return await asyncio.to_thread(self._group_by_role)


class SqlAlchemyAppointmentCollection(_SqlAlchemyCollection):
    model = Appointment

    def insert(self, record: AppointmentRecord) -> AppointmentRecord:
        with unit_of_work_scope(self._session_factory) as session:
            session.add(
                Appointment(
                    id=record.id,
                    patient_id=record.patient_id,
                    doctor_id=record.doctor_id,
                    status=record.status,
                    appointment_date=as_utc(record.appointment_date),
                    created_at=as_utc(record.created_at),
                )
            )
        return record

    def _distinct(self, field: str, filter: Filter | None) -> list[Any]:
        column = getattr(Appointment, field)
        with unit_of_work_scope(self._session_factory) as session:
            values = session.scalars(
                select(column)
                .where(to_sql(Appointment, filter))
                .where(column.is_not(None))
                .distinct()
            ).all()
            return list(values)

    async def distinct(self, field: str, filter: Filter | None = None) -> list[Any]:
        return await asyncio.to_thread(self._distinct, field, filter)


class SqlAlchemyAnalysisCollection(_SqlAlchemyCollection):
    model = AIAnalysis

    def insert(self, record: AnalysisRecord) -> AnalysisRecord:
        with unit_of_work_scope(self._session_factory) as session:
            session.add(
                AIAnalysis(
                    id=record.id,
                    patient_id=record.patient_id,
                    doctor_id=record.doctor_id,
                    severity=record.severity,
                    confidence=record.confidence,
                    possible_diagnoses=list(record.possible_diagnoses),
                    accuracy=record.accuracy,
                    created_at=as_utc(record.created_at),
                )
            )
        return record

    def _find(self, filter: Filter | None) -> list[AnalysisRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.scalars(select(AIAnalysis).where(to_sql(AIAnalysis, filter))).all()
            return [_analysis_to_domain(row) for row in rows]

    async def find(self, filter: Filter | None = None) -> list[AnalysisRecord]:
        return await asyncio.to_thread(self._find, filter)


class SqlAlchemyReportCollection(_SqlAlchemyCollection):
    model = Report

    def insert(self, record: ReportRecord) -> ReportRecord:
        with unit_of_work_scope(self._session_factory) as session:
            session.add(
                Report(
                    id=record.id,
                    patient_id=record.patient_id,
                    doctor_id=record.doctor_id,
                    created_at=as_utc(record.created_at),
                )
            )
        return record


__all__ = [
    "SqlAlchemyAnalysisCollection",
    "SqlAlchemyAppointmentCollection",
    "SqlAlchemyReportCollection",
    "SqlAlchemyUserCollection",
]
