# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Query filter vocabulary shared by the memory and SQLAlchemy collections.

A filter maps a field name to either a literal (equality) or to an operator
mapping such as ``{"$in": [...]}`` or ``{"$gte": value}``. A top-level
``"$or"`` holds a list of filters of which at least one must match.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

OPERATORS = ("$eq", "$ne", "$in", "$gt", "$gte", "$lt", "$lte", "$icontains")


class UnsupportedFilterError(ValueError):
    pass


def as_utc(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    if isinstance(value, datetime):
        return value.astimezone(UTC)
    return value


def _operators(condition: Any) -> Mapping[str, Any]:
    if isinstance(condition, Mapping) and condition and all(
        str(key).startswith("$") for key in condition
    ):
        unknown = [key for key in condition if key not in OPERATORS]
        if unknown:
            raise UnsupportedFilterError(f"unsupported operators: {unknown}")
        return condition
    return {"$eq": condition}


def _compare(op: str, actual: Any, expected: Any) -> bool:
    actual = as_utc(actual)
    if op == "$eq":
        return actual == as_utc(expected)
    if op == "$ne":
        return actual != as_utc(expected)
    if op == "$in":
        return actual in [as_utc(item) for item in expected]
    if op == "$icontains":
        return actual is not None and str(expected).lower() in str(actual).lower()
    if actual is None:
        return False
    expected = as_utc(expected)
    if op == "$gt":
        return actual > expected
    if op == "$gte":
        return actual >= expected
    if op == "$lt":
        return actual < expected
    return actual <= expected


def matches(record: Any, filter: Mapping[str, Any] | None) -> bool:
    """True when ``record`` (any object with attributes) satisfies ``filter``."""
    for field, condition in (filter or {}).items():
        if field == "$or":
            if not any(matches(record, branch) for branch in condition):
                return False
            continue
        if not hasattr(record, field):
            raise UnsupportedFilterError(f"unknown field: {field}")
        actual = getattr(record, field)
        for op, expected in _operators(condition).items():
            if not _compare(op, actual, expected):
                return False
    return True


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


_SQL_OPERATORS: dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
    "$eq": lambda column, value: column == value if value is not None else column.is_(None),
    "$ne": lambda column, value: column != value if value is not None else column.is_not(None),
    "$in": lambda column, value: column.in_(list(value)),
    "$gt": lambda column, value: column > value,
    "$gte": lambda column, value: column >= value,
    "$lt": lambda column, value: column < value,
    "$lte": lambda column, value: column <= value,
    "$icontains": lambda column, value: column.ilike(
        f"%{_escape_like(str(value))}%", escape="\\"
    ),
}


def to_sql(model: type, filter: Mapping[str, Any] | None) -> ColumnElement[bool]:
    """Translate ``filter`` into one SQLAlchemy boolean clause on ``model``."""
    clauses: list[ColumnElement[bool]] = []
    for field, condition in (filter or {}).items():
        if field == "$or":
            branches = [to_sql(model, branch) for branch in condition]
            clauses.append(or_(*branches) if branches else false())
            continue
        column = getattr(model, field, None)
        if column is None:
            raise UnsupportedFilterError(f"unknown field: {field}")
        for op, expected in _operators(condition).items():
            if op == "$in":
                expected = [as_utc(item) for item in expected]
            else:
                expected = as_utc(expected)
            clauses.append(_SQL_OPERATORS[op](column, expected))
    if not clauses:
        return true()
    return and_(*clauses)


__all__ = ["OPERATORS", "UnsupportedFilterError", "as_utc", "matches", "to_sql"]
