# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from carestats.shared.errors.base import DomainError


class InvariantViolationError(ValueError):
    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {super().__str__()}"
        return super().__str__()


InvariantViolation = InvariantViolationError


class UserNotFoundError(DomainError):
    default_code = "user_not_found"
    default_status = HTTPStatus.NOT_FOUND
    default_message = "User not found"


class InvalidUserUpdateError(DomainError):
    default_code = "invalid_updates"
    default_message = "Invalid updates"


class SelfDeletionError(DomainError):
    default_code = "cannot_delete_self"
    default_message = "Cannot delete your own account"


__all__ = [
    "InvalidUserUpdateError",
    "InvariantViolation",
    "InvariantViolationError",
    "SelfDeletionError",
    "UserNotFoundError",
]
