"""Error reporting abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod

import logfire

from ..observability.monitoring import MIGRATION_ERRORS


class ErrorHandler(ABC):
    """Interface for reporting failed migration calls.

    Implementations must not raise; the engine re-raises the original error
    after reporting it.
    """

    @abstractmethod
    def handle(self, message: str, exc: Exception | None = None) -> None:
        """Record ``message`` with optional ``exc`` context."""


class LoggingErrorHandler(ErrorHandler):
    """Error handler that logs via ``logfire``."""

    def handle(self, message: str, exc: Exception | None = None) -> None:
        """Log an error message and count the failure.

        Args:
            message: Description of the error to record.
            exc: Exception instance providing additional context.
        """
        MIGRATION_ERRORS.add(1)
        if exc:
            logfire.error(
                f"{message}: {exc}", error_type=type(exc).__name__
            )
        else:
            logfire.error(message)


__all__ = ["ErrorHandler", "LoggingErrorHandler"]
