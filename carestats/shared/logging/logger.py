# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Structured logging utilities."""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import datetime
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_context, sanitize_record

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")

_RESERVED_EXTRA = frozenset({"correlation_id", "rendered"})

_STRUCTURED = False


def format_structured(
    *,
    timestamp: datetime,
    level: str,
    message: str,
    context: Mapping[str, Any] | None = None,
) -> str:
    entry: dict[str, Any] = {
        "timestamp": timestamp.isoformat(),
        "level": level.upper(),
        "message": message,
    }
    entry.update(sanitize_context(dict(context or {})))
    return json.dumps(entry, ensure_ascii=False, default=str)


def format_pretty(
    *,
    timestamp: datetime,
    level: str,
    message: str,
    context: Mapping[str, Any] | None = None,
) -> str:
    ctx = sanitize_context(dict(context or {}))
    correlation_id = ctx.pop("correlation_id", None)
    stack = ctx.pop("stack", None)
    user_id = ctx.pop("user_id", None)
    path = ctx.pop("path", None)
    method = ctx.pop("method", None)

    header = f"[{level.upper()}] {timestamp.isoformat()}"
    if correlation_id and correlation_id != "-":
        header += f" ({correlation_id})"
    lines = [header, f"Message: {message}"]
    if stack:
        lines.append(f"Stack: {stack}")
    if user_id is not None:
        lines.append(f"User ID: {user_id}")
    if path:
        lines.append(f"Path: {method or 'GET'} {path}")
    if ctx:
        lines.append(f"Additional Context: {ctx}")
    lines.append("---")
    return "\n".join(lines)


def _patch_record(record: dict[str, Any]) -> None:
    sanitize_record(record)
    context = {
        key: value for key, value in record["extra"].items() if key not in _RESERVED_EXTRA
    }
    context["correlation_id"] = record["extra"].get("correlation_id", "-")
    level = record["level"].name
    if _STRUCTURED:
        exc = record["exception"]
        if exc is not None and "stack" not in context:
            context["exception"] = "".join(
                traceback.format_exception(exc.type, exc.value, exc.traceback)
            )
        rendered = format_structured(
            timestamp=record["time"], level=level, message=record["message"], context=context
        )
    else:
        rendered = format_pretty(
            timestamp=record["time"], level=level, message=record["message"], context=context
        )
    record["extra"]["rendered"] = rendered


def _sink_format(record: dict[str, Any]) -> str:
    if _STRUCTURED:
        return "{extra[rendered]}\n"
    return "<lvl>{extra[rendered]}</lvl>\n{exception}"


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).bind(
            correlation_id=_CORRELATION_ID.get()
        ).log(level, record.getMessage())


class ContextualLogger:
    """Proxy for loguru that injects correlation ids via ContextVar."""

    def __getattr__(self, name):  # pragma: no cover
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


def log_event(level: str, message: str, context: Mapping[str, Any] | None = None) -> None:
    """Emit ``message`` with ``context`` attached as redactable extra fields."""
    fields = {str(key): value for key, value in (context or {}).items()}
    fields.pop("correlation_id", None)
    _logger.opt(depth=1).bind(correlation_id=_CORRELATION_ID.get(), **fields).log(
        level.upper(), message
    )


def setup_logging(level: str | None = None, *, structured: bool | None = None) -> None:
    global _STRUCTURED

    from carestats.shared.config import load_config

    config = load_config()
    level = (level or os.getenv("LOG_LEVEL") or config.log_level or "INFO").upper()
    _STRUCTURED = config.is_production() if structured is None else structured

    _logger.remove()
    _logger.configure(patcher=_patch_record)
    _logger.add(
        sys.stdout,
        level=level,
        format=_sink_format,
        colorize=not _STRUCTURED,
        backtrace=False,
        diagnose=False,
    )
    log_file = os.getenv("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _logger.add(
            log_file,
            level=level,
            format=_sink_format,
            colorize=False,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            encoding="utf-8",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "clear_correlation_id",
    "format_pretty",
    "format_structured",
    "log_event",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
