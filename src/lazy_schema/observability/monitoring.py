# SPDX-License-Identifier: MIT
"""Helpers for enabling Pydantic Logfire telemetry."""

from __future__ import annotations

import os
from typing import Literal

import logfire

DOCUMENTS_MIGRATED = logfire.metric_counter("lazy_schema_documents_migrated")
"""Counter for documents that reached the target version."""

REVISIONS_APPLIED = logfire.metric_counter("lazy_schema_revisions_applied")
"""Counter for updater invocations (one per document or one per batch)."""

MIGRATION_ERRORS = logfire.metric_counter("lazy_schema_migration_errors")
"""Counter for failed migration calls."""

LogLevel = Literal["fatal", "error", "warn", "notice", "info", "debug", "trace"]


def _mask_token(value: str | None) -> str | None:
    """Return a masked representation of ``value`` for safe logging."""

    if not value:
        return None
    return f"{value[:4]}..."


def init_logfire(token: str | None = None, min_log_level: LogLevel = "warn") -> None:
    """Configure Logfire for an application embedding the engine.

    Args:
        token: Optional Logfire API token. If omitted, ``LAZY_SCHEMA_LOGFIRE_TOKEN``
            from the environment is used. Missing tokens keep telemetry local.
        min_log_level: Minimum level for console and telemetry output.
    """

    key = token or os.getenv("LAZY_SCHEMA_LOGFIRE_TOKEN")
    masked = _mask_token(key)
    if key and hasattr(logfire, "add_masking_rule"):
        logfire.add_masking_rule(key)
    logfire.debug("Configuring logfire", token=masked)
    logfire.configure(
        token=key,
        send_to_logfire="if-token-present",
        service_name="lazy-schema",
        console=logfire.ConsoleOptions(
            min_log_level=min_log_level,
            show_project_link=False,
        ),
        min_level=min_log_level,
    )
    instrument = getattr(logfire, "instrument_pydantic", None)
    if instrument:
        instrument()


__all__ = [
    "DOCUMENTS_MIGRATED",
    "REVISIONS_APPLIED",
    "MIGRATION_ERRORS",
    "LogLevel",
    "init_logfire",
]
