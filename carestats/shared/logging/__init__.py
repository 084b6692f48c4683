# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig


from .logger import (
    clear_correlation_id,
    format_pretty,
    format_structured,
    log_event,
    logger,
    set_correlation_id,
    setup_logging,
)
from .sensitive_filter import sanitize_context, sanitize_message

__all__ = [
    "clear_correlation_id",
    "format_pretty",
    "format_structured",
    "log_event",
    "logger",
    "sanitize_context",
    "sanitize_message",
    "set_correlation_id",
    "setup_logging",
]
