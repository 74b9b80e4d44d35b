# SPDX-License-Identifier: MIT
"""Lazy migration of versioned documents through a revision chain.

A :class:`Schema` upgrades documents from whatever version they were saved in
to the version its revision chain defines. Documents sharing a version are
grouped so each revision runs at most once per call, and results are returned
in the shape and order they were passed in.

Example:
    ```python
    schema = create_schema([
        {"update": lambda doc: {**doc, "name": doc["title"], "_v": 1}},
        {"update_many": bulk_add_defaults},
    ])
    document = await schema(await collection.find_one({"_id": key}),
                            persist_by_id(collection))
    ```
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Iterable

import logfire

from ..errors import VersionMismatch
from ..models import Entry, Revision, coerce_revision, is_absent
from ..observability.monitoring import DOCUMENTS_MIGRATED
from ..runtime.settings import Settings
from ..utils import ErrorHandler, LoggingErrorHandler
from .level_executor import is_version, run_level, version_of

PersistenceAdapter = Callable[[Any], Awaitable[Any] | Any]
"""Sink receiving the fully migrated result exactly once."""

_MISSING = object()


class Schema:
    """Callable migrating documents to the version defined by a revision chain.

    Instances hold no state between calls; concurrent calls are independent.
    """

    def __init__(
        self,
        revisions: Iterable[Revision | Mapping[str, Any]],
        *,
        settings: Settings | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        """Create the schema.

        Args:
            revisions: Ordered revision chain; revision ``i`` upgrades documents
                from version ``i`` to ``i + 1``.
            settings: Engine settings. Defaults to values read from the
                environment.
            error_handler: Receives every failed call before it is re-raised.

        Raises:
            ConfigurationError: If a revision declares neither or both updaters.
        """
        self._revisions = tuple(
            coerce_revision(revision, position)
            for position, revision in enumerate(revisions)
        )
        self.settings = settings or Settings()
        self._error_handler = error_handler or LoggingErrorHandler()

    @property
    def revisions(self) -> tuple[Revision, ...]:
        """Return the revision chain."""
        return self._revisions

    @property
    def target_version(self) -> int:
        """Return the version every migrated document carries."""
        return len(self._revisions)

    def _entry_version(self, document: Any) -> int:
        """Return the starting version of ``document``.

        Raises:
            TypeError: If ``document`` is not a mapping.
            VersionMismatch: If the version is missing under the ``"error"``
                policy, is not an integer, or lies outside ``0..target``.
        """
        field = self.settings.version_field
        if not isinstance(document, Mapping):
            raise TypeError(
                f"Cannot migrate a value of type {type(document).__name__}"
            )
        version = document.get(field, _MISSING)
        if version is _MISSING:
            if self.settings.missing_version == "error":
                raise VersionMismatch(
                    f"Document has no {field} field",
                    level=None,
                    expected=self.target_version,
                    actual=None,
                )
            return 0
        valid = isinstance(version, int) and not isinstance(version, bool)
        if not valid or not 0 <= version <= self.target_version:
            raise VersionMismatch(
                f"Document {field}={version!r} is outside 0..{self.target_version}",
                level=None,
                expected=self.target_version,
                actual=version,
            )
        return version

    def _working_set(self, documents: list[Any]) -> list[Entry]:
        """Return position-tagged entries for every present document."""
        entries = []
        for index, document in enumerate(documents):
            if is_absent(document):
                continue
            self._entry_version(document)
            entries.append(Entry(index, document))
        return entries

    def _assert_complete(self, entries: list[Entry]) -> None:
        """Ensure every entry carries the target version.

        Raises:
            VersionMismatch: For the first entry short of the target.
        """
        field = self.settings.version_field
        for entry in entries:
            actual = version_of(entry.document, field)
            if not is_version(actual, self.target_version):
                raise VersionMismatch(
                    f"Document at position {entry.index} ended at "
                    f"{field}={actual!r}, expected {self.target_version}",
                    level=None,
                    expected=self.target_version,
                    actual=actual,
                )

    async def _migrate(self, documents: list[Any]) -> list[Any]:
        entries = self._working_set(documents)
        for level, revision in enumerate(self._revisions):
            entries = await run_level(
                level,
                entries,
                revision,
                version_field=self.settings.version_field,
                concurrency=self.settings.update_concurrency,
            )
        self._assert_complete(entries)
        migrated = list(documents)
        for entry in entries:
            migrated[entry.index] = entry.document
        DOCUMENTS_MIGRATED.add(len(entries))
        return migrated

    async def __call__(
        self, value: Any, adapter: PersistenceAdapter | None = None
    ) -> Any:
        """Migrate ``value`` and optionally persist the result.

        Args:
            value: A document, a list of documents, an absence sentinel
                (``None`` or ``False``), or an awaitable resolving to one of
                these.
            adapter: Optional persistence adapter, awaited with the migrated
                result once every document reached the target version.

        Returns:
            The migrated value shaped like ``value``: a document for a document,
            a list in input order for a list, the sentinel itself for a
            sentinel.

        Raises:
            VersionMismatch: If a document cannot reach the target version.
            CardinalityError: If a batch updater returns the wrong number of
                documents.
            Exception: Whatever an updater or ``adapter`` raised, unchanged.
        """
        if inspect.isawaitable(value):
            try:
                value = await value
            except Exception as exc:
                self._error_handler.handle("Schema migration failed", exc)
                raise
        if is_absent(value):
            return value

        many = isinstance(value, (list, tuple))
        documents = list(value) if many else [value]
        with logfire.span(
            "schema.migrate",
            attributes={
                "documents": len(documents),
                "target_version": self.target_version,
                "persist": adapter is not None,
            },
        ):
            try:
                migrated = await self._migrate(documents)
                result = migrated if many else migrated[0]
                if adapter is not None:
                    outcome = adapter(result)
                    if inspect.isawaitable(outcome):
                        await outcome
            except Exception as exc:
                self._error_handler.handle("Schema migration failed", exc)
                raise
            logfire.debug("Schema migration complete", documents=len(documents))
            return result


def create_schema(
    revisions: Iterable[Revision | Mapping[str, Any]],
    *,
    settings: Settings | None = None,
    error_handler: ErrorHandler | None = None,
) -> Schema:
    """Return a :class:`Schema` for ``revisions``.

    Raises:
        ConfigurationError: If a revision declares neither or both updaters.
    """
    return Schema(revisions, settings=settings, error_handler=error_handler)


__all__ = ["Schema", "PersistenceAdapter", "create_schema"]
