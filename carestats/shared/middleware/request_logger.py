# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
import time
from typing import Any

from flask import Flask, Response, g, request

from carestats.shared.config import AppConfig, load_config
from carestats.shared.logging import (
    clear_correlation_id,
    logger,
    sanitize_context,
    set_correlation_id,
)

CORRELATION_HEADER = "X-Request-Id"


def _get_client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return request.remote_addr or "unknown"


def _get_user_id() -> str | None:
    principal = getattr(g, "principal", None)
    return getattr(principal, "id", None)


def _log_request_start(debug_mode: bool) -> None:
    ip_address = _get_client_ip()

    if debug_mode:
        headers = sanitize_context(dict(request.headers))
        query_params = sanitize_context(dict(request.args))
        logger.info(
            f"Request started: {request.method} {request.path} "
            f"from {ip_address}, user={_get_user_id()}, "
            f"query={query_params}, headers={headers}"
        )
    else:
        logger.info(f"Request: {request.method} {request.path} from {ip_address}")


def _log_request_end(debug_mode: bool, status_code: int, start_time: float) -> None:
    duration = time.time() - start_time

    if debug_mode:
        logger.info(
            f"Request completed: {request.method} {request.path} "
            f"status={status_code}, duration={duration:.3f}s, user={_get_user_id()}"
        )
    else:
        logger.info(
            f"Response: {request.method} {request.path} "
            f"status={status_code}, duration={duration:.3f}s"
        )


def configure_request_logging(app: Flask, config: AppConfig | None = None) -> None:
    debug_mode = (config or load_config()).debug_logging

    @app.before_request
    def _before_request() -> None:
        correlation_id = request.headers.get(CORRELATION_HEADER) or secrets.token_urlsafe(8)
        set_correlation_id(correlation_id)
        g.correlation_id = correlation_id
        g.debug_mode = debug_mode
        g.request_start_time = time.time()
        _log_request_start(debug_mode)

    @app.after_request
    def _after_request(response: Response) -> Response:
        start_time = getattr(g, "request_start_time", time.time())
        _log_request_end(debug_mode, response.status_code, start_time)
        correlation_id = getattr(g, "correlation_id", None)
        if correlation_id:
            response.headers.setdefault(CORRELATION_HEADER, correlation_id)
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            context: dict[str, Any] = {"user": _get_user_id(), "query": dict(request.args)}
            logger.error(
                f"Request error: {type(exc).__name__} on {request.method} {request.path} "
                f"{sanitize_context(context)}"
            )
        clear_correlation_id()


__all__ = ["CORRELATION_HEADER", "configure_request_logging"]
