from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

from carestats.domain import AnalysisRecord, AppointmentRecord, ReportRecord, UserRecord
from carestats.infrastructure.db import create_db_engine, create_session_factory, init_db
from carestats.infrastructure.repositories.memory import new_id
from carestats.infrastructure.repositories.sqlalchemy import (
    SqlAlchemyAnalysisCollection,
    SqlAlchemyAppointmentCollection,
    SqlAlchemyReportCollection,
    SqlAlchemyUserCollection,
)
from carestats.shared.config import DatabaseConfig
from carestats.shared.errors import MalformedIdentifierError

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


@dataclass
class Store:
    users: SqlAlchemyUserCollection
    appointments: SqlAlchemyAppointmentCollection
    analyses: SqlAlchemyAnalysisCollection
    reports: SqlAlchemyReportCollection


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[Store]:
    engine = create_db_engine(DatabaseConfig(url=f"sqlite:///{tmp_path / 'carestats.db'}"))
    init_db(engine)
    factory = create_session_factory(engine)
    yield Store(
        users=SqlAlchemyUserCollection(factory),
        appointments=SqlAlchemyAppointmentCollection(factory),
        analyses=SqlAlchemyAnalysisCollection(factory),
        reports=SqlAlchemyReportCollection(factory),
    )
    engine.dispose()


def _user(name: str, role: str, *, age_days: int = 0) -> UserRecord:
    return UserRecord(
        id=new_id(),
        name=name,
        email=f"{name.lower().replace(' ', '.')}@clinic.test",
        role=role,
        created_at=NOW - timedelta(days=age_days),
    )


@pytest.mark.asyncio
async def test_user_lookup_update_and_delete(store: Store) -> None:
    alice = store.users.insert(_user("Alice Moreau", "patient"))

    found = await store.users.find_by_id(alice.id)
    assert found == alice
    assert found.created_at.tzinfo is not None

    updated = await store.users.find_by_id_and_update(
        alice.id,
        {"role": "doctor", "emergency_contact": {"name": "Bob", "phone": "123"}},
    )
    assert updated is not None
    assert updated.role == "doctor"
    assert updated.emergency_contact == {"name": "Bob", "phone": "123"}

    removed = await store.users.find_by_id_and_delete(alice.id)
    assert removed is not None and removed.id == alice.id
    assert await store.users.find_by_id(alice.id) is None
    assert await store.users.find_by_id_and_delete(alice.id) is None


@pytest.mark.asyncio
async def test_missing_user_update_returns_none(store: Store) -> None:
    assert await store.users.find_by_id_and_update(new_id(), {"name": "Ghost"}) is None


@pytest.mark.asyncio
async def test_malformed_identifier_is_rejected(store: Store) -> None:
    with pytest.raises(MalformedIdentifierError):
        await store.users.find_by_id("not-an-id")


def test_duplicate_email_raises_integrity_error(store: Store) -> None:
    first = _user("Alice", "patient")
    store.users.insert(first)
    with pytest.raises(IntegrityError):
        store.users.insert(
            UserRecord(
                id=new_id(),
                name="Other Alice",
                email=first.email,
                role="patient",
                created_at=NOW,
            )
        )


@pytest.mark.asyncio
async def test_user_search_filters(store: Store) -> None:
    store.users.insert(_user("Alice Moreau", "patient", age_days=2))
    store.users.insert(_user("Bob Stone", "patient", age_days=1))
    store.users.insert(_user("Carol Percent", "doctor"))

    patients = await store.users.find({"role": "patient"})
    assert [user.name for user in patients] == ["Bob Stone", "Alice Moreau"]

    matched = await store.users.find(
        {"$or": [{"name": {"$icontains": "moreau"}}, {"email": {"$icontains": "STONE"}}]}
    )
    assert sorted(user.name for user in matched) == ["Alice Moreau", "Bob Stone"]

    assert await store.users.find({"name": {"$icontains": "%"}}) == []

    groups = {group.role: group.count for group in await store.users.aggregate_by_role()}
    assert groups == {"patient": 2, "doctor": 1}


@pytest.mark.asyncio
async def test_appointment_counts_and_distinct(store: Store) -> None:
    doctor, other_doctor = new_id(), new_id()
    p1, p2 = new_id(), new_id()
    for patient, doc, status, offset in [
        (p1, doctor, "confirmed", 2),
        (p1, doctor, "completed", -2),
        (p2, doctor, "pending", 1),
        (p2, other_doctor, "pending", -1),
    ]:
        store.appointments.insert(
            AppointmentRecord(
                id=new_id(),
                patient_id=patient,
                doctor_id=doc,
                status=status,
                appointment_date=NOW + timedelta(days=offset),
                created_at=NOW,
            )
        )

    assert await store.appointments.count_documents({}) == 4
    assert await store.appointments.count_documents({"status": "pending"}) == 2
    assert sorted(await store.appointments.distinct("patient_id", {"doctor_id": doctor})) == sorted(
        [p1, p2]
    )
    upcoming = await store.appointments.count_documents(
        {
            "patient_id": p1,
            "status": {"$in": ["pending", "confirmed"]},
            "appointment_date": {"$gte": NOW},
        }
    )
    assert upcoming == 1


@pytest.mark.asyncio
async def test_analysis_and_report_collections(store: Store) -> None:
    patient = new_id()
    store.analyses.insert(
        AnalysisRecord(
            id=new_id(),
            patient_id=patient,
            created_at=NOW,
            severity="high",
            confidence=0.9,
            possible_diagnoses=("flu",),
        )
    )
    store.analyses.insert(AnalysisRecord(id=new_id(), patient_id=new_id(), created_at=NOW))
    store.reports.insert(ReportRecord(id=new_id(), patient_id=patient, created_at=NOW))

    mine = await store.analyses.find({"patient_id": patient})
    assert len(mine) == 1
    assert mine[0].possible_diagnoses == ("flu",)
    assert mine[0].created_at == NOW
    assert await store.analyses.count_documents({}) == 2
    assert await store.reports.count_documents({"patient_id": patient}) == 1
