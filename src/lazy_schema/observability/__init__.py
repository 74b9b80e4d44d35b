"""Telemetry helpers for the migration engine.

Exports:
    init_logfire: Configure Pydantic Logfire instrumentation.
    DOCUMENTS_MIGRATED: Counter of documents brought to the target version.
    REVISIONS_APPLIED: Counter of updater invocations.
    MIGRATION_ERRORS: Counter of failed migration calls.
"""

from .monitoring import (
    DOCUMENTS_MIGRATED,
    MIGRATION_ERRORS,
    REVISIONS_APPLIED,
    init_logfire,
)

__all__ = [
    "init_logfire",
    "DOCUMENTS_MIGRATED",
    "REVISIONS_APPLIED",
    "MIGRATION_ERRORS",
]
