# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import traceback
from http import HTTPStatus
from typing import Any

from flask import Flask, g, jsonify, request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from carestats.shared.config import AppConfig, load_config
from carestats.shared.logging import log_event

from .base import AppError, DuplicateFieldError
from .validation import to_validation_error


# sqlite, postgres and mysql wordings; 23505 is the SQLSTATE for unique_violation
_UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")
_UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)


def classify_error(exc: BaseException) -> AppError | None:
    """Map a raised exception onto a known client-facing error, if any."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, IntegrityError):
        return DuplicateFieldError() if _is_unique_violation(exc) else None
    if isinstance(exc, PydanticValidationError):
        return to_validation_error(exc)
    return None


def _request_context(exc: BaseException, status: HTTPStatus) -> dict[str, Any]:
    principal = getattr(g, "principal", None)
    return {
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        "user_id": getattr(principal, "id", None),
        "path": request.full_path.rstrip("?") if request.query_string else request.path,
        "method": request.method,
        "status_code": int(status),
    }


def register_error_handler(
    app: Flask,
    *,
    config: AppConfig | None = None,
    default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
) -> None:
    config = config or load_config()
    include_stack = config.is_development()

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        return exc

    @app.errorhandler(Exception)
    def _handle_any(exc: Exception):
        classified = classify_error(exc)

        if classified is not None:
            log_event(
                "warning",
                classified.message or classified.code,
                _request_context(exc, classified.status),
            )
            payload = classified.to_dict()
            status = classified.status
        else:
            log_event(
                "error",
                str(exc) or "Server Error",
                _request_context(exc, default_status),
            )
            payload = {"success": False, "error": "internal_error", "message": "Server Error"}
            status = default_status

        if include_stack:
            payload["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        return jsonify(payload), status


__all__ = ["classify_error", "register_error_handler"]
