# SPDX-License-Identifier: MIT
"""Value types shared by the migration engine.

A :class:`Revision` is one upgrade step of a chain; its position in the chain
is the version it upgrades from. An :class:`Entry` pairs a document under
migration with the position it had in the caller's input so results can be
returned in input order however documents were grouped internally.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal, Sequence, TypeAlias

from .errors import ConfigurationError

Document: TypeAlias = Mapping[str, Any]

DocumentUpdater: TypeAlias = Callable[[Document], Document | Awaitable[Document]]
"""Upgrade a single document from version ``k`` to ``k + 1``."""

BatchUpdater: TypeAlias = Callable[
    [list[Document]], Sequence[Document] | Awaitable[Sequence[Document]]
]
"""Upgrade a list of documents at version ``k``, preserving length and order."""

RevisionKind = Literal["document", "batch"]


@dataclass(frozen=True)
class Revision:
    """One step of a revision chain.

    Exactly one of ``update`` or ``update_many`` must be supplied.

    Args:
        update: Per-document updater, called once per eligible document.
        update_many: Batch updater, called once with every eligible document.

    Raises:
        ConfigurationError: If neither or both updaters are supplied, or an
            updater is not callable.
    """

    update: DocumentUpdater | None = None
    update_many: BatchUpdater | None = None

    def __post_init__(self) -> None:
        if (self.update is None) == (self.update_many is None):
            raise ConfigurationError(
                "A revision must declare exactly one of 'update' or 'update_many'"
            )
        updater = self.update if self.update is not None else self.update_many
        if not callable(updater):
            raise ConfigurationError(f"Revision updater is not callable: {updater!r}")

    @property
    def kind(self) -> RevisionKind:
        """Return ``"document"`` for per-document and ``"batch"`` for batch steps."""
        return "document" if self.update is not None else "batch"


@dataclass(frozen=True)
class Entry:
    """A document in the working set tagged with its original input position."""

    index: int
    document: Document


def coerce_revision(value: Revision | Mapping[str, Any], position: int) -> Revision:
    """Return ``value`` as a :class:`Revision`.

    Plain mappings with an ``update`` or ``update_many`` key are accepted so
    chains can be declared as lists of dictionaries.

    Raises:
        ConfigurationError: If ``value`` cannot describe a revision.
    """
    if isinstance(value, Revision):
        return value
    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f"Revision {position} must be a Revision or a mapping, "
            f"got {type(value).__name__}"
        )
    unknown = set(value) - {"update", "update_many"}
    if unknown:
        raise ConfigurationError(
            f"Revision {position} has unknown keys: {', '.join(sorted(unknown))}"
        )
    try:
        return Revision(
            update=value.get("update"), update_many=value.get("update_many")
        )
    except ConfigurationError as exc:
        raise ConfigurationError(f"Revision {position}: {exc}") from exc


def is_absent(value: Any) -> bool:
    """Return ``True`` for the absence sentinels ``None`` and ``False``."""
    return value is None or value is False


__all__ = [
    "Document",
    "DocumentUpdater",
    "BatchUpdater",
    "Revision",
    "RevisionKind",
    "Entry",
    "coerce_revision",
    "is_absent",
]
