# SPDX-License-Identifier: MIT
"""Exception hierarchy raised by the migration engine and its adapters.

Failures raised by updaters or by the storage client are never wrapped; only
conditions detected by the engine itself use these classes.
"""

from __future__ import annotations

from typing import Any


class LazySchemaError(Exception):
    """Base class for all errors raised by ``lazy_schema``."""


class ConfigurationError(LazySchemaError):
    """A revision chain or adapter was configured incorrectly."""


class VersionMismatch(LazySchemaError):
    """A document does not carry the version the engine expects.

    Attributes:
        level: Chain position being executed, or ``None`` when the mismatch
            was detected outside a level (at entry or after the final level).
        expected: Version the document should carry.
        actual: Version actually found, ``None`` when absent.
    """

    def __init__(
        self, message: str, *, level: int | None, expected: int, actual: Any
    ) -> None:
        super().__init__(message)
        self.level = level
        self.expected = expected
        self.actual = actual


class CardinalityError(LazySchemaError):
    """A list result does not line up one-to-one with its input list."""

    def __init__(self, message: str, *, expected: int, actual: int) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class PersistenceError(LazySchemaError):
    """A persistence adapter could not address the documents it must write."""


__all__ = [
    "LazySchemaError",
    "ConfigurationError",
    "VersionMismatch",
    "CardinalityError",
    "PersistenceError",
]
