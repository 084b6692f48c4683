from __future__ import annotations

import json
from datetime import UTC, datetime

from loguru import logger as loguru_logger

from carestats.shared.logging import (
    clear_correlation_id,
    format_pretty,
    format_structured,
    log_event,
    sanitize_context,
    sanitize_message,
    set_correlation_id,
    setup_logging,
)

TS = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def test_sensitive_keys_are_redacted_at_any_depth() -> None:
    context = {
        "password": "hunter2",
        "user": {
            "name": "alice",
            "resetToken": "abc",
            "credentials": [{"apiKey": "k1"}, {"API_KEY": "k2", "label": "ok"}],
        },
        "Authorization": "Bearer xyz",
        "jwtClaims": {"sub": "1"},
        "clientSecret": "s",
        "path": "/api/users",
    }

    assert sanitize_context(context) == {
        "password": "[REDACTED]",
        "user": {
            "name": "alice",
            "resetToken": "[REDACTED]",
            "credentials": [{"apiKey": "[REDACTED]"}, {"API_KEY": "[REDACTED]", "label": "ok"}],
        },
        "Authorization": "[REDACTED]",
        "jwtClaims": "[REDACTED]",
        "clientSecret": "[REDACTED]",
        "path": "/api/users",
    }
    assert context["password"] == "hunter2"


def test_message_patterns_are_scrubbed() -> None:
    scrubbed = sanitize_message("retry with bearer abcdefghijklmnopqrstuvwxyz0123")
    assert "abcdefghijklmnopqrstuvwxyz0123" not in scrubbed
    assert "***REDACTED***" in scrubbed


def test_structured_format_is_one_json_line() -> None:
    line = format_structured(
        timestamp=TS,
        level="error",
        message="Server Error",
        context={"path": "/api/dashboard/stats", "token": "t", "status_code": 500},
    )

    assert "\n" not in line
    entry = json.loads(line)
    assert entry == {
        "timestamp": TS.isoformat(),
        "level": "ERROR",
        "message": "Server Error",
        "path": "/api/dashboard/stats",
        "token": "[REDACTED]",
        "status_code": 500,
    }


def test_pretty_format_lays_out_request_context() -> None:
    block = format_pretty(
        timestamp=TS,
        level="warning",
        message="User not found",
        context={
            "stack": "Traceback ...",
            "user_id": "u1",
            "path": "/api/users/u2",
            "method": "DELETE",
            "secret": "s",
            "status_code": 404,
        },
    )

    lines = block.splitlines()
    assert lines[0] == f"[WARNING] {TS.isoformat()}"
    assert "Message: User not found" in lines
    assert "Stack: Traceback ..." in lines
    assert "User ID: u1" in lines
    assert "Path: DELETE /api/users/u2" in lines
    assert "Additional Context: {'secret': '[REDACTED]', 'status_code': 404}" in lines
    assert lines[-1] == "---"


def test_log_event_emits_redacted_json_in_structured_mode() -> None:
    setup_logging("INFO", structured=True)
    captured: list[str] = []
    sink_id = loguru_logger.add(captured.append, format="{extra[rendered]}", level="INFO")
    set_correlation_id("req-1")
    try:
        log_event(
            "warning",
            "Invalid updates",
            {"user_id": "u1", "password": "hunter2", "method": "PATCH"},
        )
    finally:
        clear_correlation_id()
        loguru_logger.remove(sink_id)
        setup_logging("INFO", structured=False)

    lines = [str(message).strip() for message in captured]
    entry = json.loads(lines[-1])
    assert entry["level"] == "WARNING"
    assert entry["message"] == "Invalid updates"
    assert entry["user_id"] == "u1"
    assert entry["password"] == "[REDACTED]"
    assert entry["correlation_id"] == "req-1"
    assert "hunter2" not in lines[-1]
