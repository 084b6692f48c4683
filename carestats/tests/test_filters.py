from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from carestats.infrastructure.repositories.filters import (
    UnsupportedFilterError,
    as_utc,
    matches,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


@dataclass
class Row:
    name: str
    status: str
    when: datetime
    doctor_id: str | None = None


ROW = Row(name="Alice Moreau", status="confirmed", when=NOW + timedelta(hours=1))


@pytest.mark.parametrize(
    ("filter", "expected"),
    [
        ({}, True),
        (None, True),
        ({"status": "confirmed"}, True),
        ({"status": "pending"}, False),
        ({"status": {"$ne": "pending"}}, True),
        ({"status": {"$in": ["pending", "confirmed"]}}, True),
        ({"status": {"$in": []}}, False),
        ({"when": {"$gte": NOW}}, True),
        ({"when": {"$lt": NOW}}, False),
        ({"when": {"$gt": NOW, "$lte": NOW + timedelta(hours=1)}}, True),
        ({"name": {"$icontains": "MOREAU"}}, True),
        ({"$or": [{"name": {"$icontains": "bob"}}, {"status": "confirmed"}]}, True),
        ({"$or": [{"name": {"$icontains": "bob"}}, {"status": "pending"}]}, False),
        ({"doctor_id": None}, True),
        ({"doctor_id": {"$gte": "a"}}, False),
    ],
)
def test_matches(filter, expected: bool) -> None:
    assert matches(ROW, filter) is expected


def test_naive_datetimes_compare_as_utc() -> None:
    naive_now = NOW.replace(tzinfo=None)
    assert matches(ROW, {"when": {"$gte": naive_now}})
    assert as_utc(naive_now) == NOW


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(UnsupportedFilterError):
        matches(ROW, {"missing": 1})


def test_unknown_operator_is_rejected() -> None:
    with pytest.raises(UnsupportedFilterError):
        matches(ROW, {"status": {"$regex": "conf"}})
