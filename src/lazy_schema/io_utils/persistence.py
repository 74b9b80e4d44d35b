# SPDX-License-Identifier: MIT
"""Sinks that write fully migrated documents back to storage.

The adapters returned by :func:`persist_by_id` and
:func:`persist_embedded_document` are passed to a :class:`~lazy_schema.Schema`
call and invoked once with the migrated result, after every document reached
the target version. :func:`atomic_write` serves the file-based
``migrate-jsonl`` command.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable

import logfire
from pymongo import ReplaceOne, UpdateOne

from ..errors import CardinalityError, ConfigurationError, PersistenceError
from ..models import is_absent
from ..runtime.settings import Settings
from .storage import Collection, resolve

Adapter = Callable[[Any], Awaitable[Any]]


def _identifier(document: Any, id_field: str) -> Any:
    """Return the identifier of ``document``.

    Raises:
        PersistenceError: If ``document`` carries no identifier.
    """
    if not isinstance(document, Mapping) or document.get(id_field) is None:
        raise PersistenceError(f"Cannot persist a document without '{id_field}'")
    return document[id_field]


def _resolve_options(
    id_field: str | None, bulk: bool | None, settings: Settings | None
) -> tuple[str, bool]:
    """Return ``(id_field, bulk)`` with unset values taken from settings."""
    if id_field is not None and bulk is not None:
        return id_field, bulk
    settings = settings or Settings()
    return (
        settings.id_field if id_field is None else id_field,
        settings.bulk_writes if bulk is None else bulk,
    )


def persist_by_id(
    collection: Collection,
    *,
    id_field: str | None = None,
    bulk: bool | None = None,
    settings: Settings | None = None,
) -> Adapter:
    """Return an adapter replacing each stored document by its migrated value.

    Args:
        collection: Storage the documents were read from.
        id_field: Field holding each document's identifier. Defaults to
            ``settings.id_field``.
        bulk: Replace a list of documents with one ``bulk_write`` instead of
            one ``replace_one`` per document. Defaults to
            ``settings.bulk_writes``.
        settings: Settings supplying the defaults; read from the environment
            when omitted.

    Returns:
        Adapter resolving to the storage client's write result(s).
    """
    id_field, bulk = _resolve_options(id_field, bulk, settings)

    async def _persist(migrated: Any) -> Any:
        many = isinstance(migrated, list)
        if many:
            documents = [doc for doc in migrated if not is_absent(doc)]
        else:
            documents = [migrated]
        requests = [
            ({id_field: _identifier(doc, id_field)}, doc) for doc in documents
        ]
        with logfire.span(
            "persistence.persist_by_id",
            attributes={"documents": len(requests), "bulk": many and bulk},
        ):
            if many and bulk:
                if not requests:
                    return None
                return await resolve(
                    collection.bulk_write(
                        [ReplaceOne(flt, doc) for flt, doc in requests], ordered=True
                    )
                )
            results = [
                await resolve(collection.replace_one(flt, doc)) for flt, doc in requests
            ]
            logfire.debug("Replaced documents", count=len(results))
            return results if many else results[0]

    return _persist


def _embedded_pairs(migrated: Any, base: Any, id_field: str) -> list[tuple[Any, Any]]:
    """Return ``(identifier, embedded value)`` pairs to write.

    Raises:
        PersistenceError: If ``migrated`` and ``base`` differ in shape.
        CardinalityError: If both are lists of different lengths.
    """
    if isinstance(migrated, list):
        if not isinstance(base, (list, tuple)):
            raise PersistenceError(
                "A list of embedded documents needs a list of base documents"
            )
        if len(base) != len(migrated):
            raise CardinalityError(
                f"{len(migrated)} embedded documents for {len(base)} base documents",
                expected=len(base),
                actual=len(migrated),
            )
        return [
            (_identifier(owner, id_field), value)
            for owner, value in zip(base, migrated)
            if not is_absent(value)
        ]
    if isinstance(base, (list, tuple)):
        raise PersistenceError(
            "A single embedded document needs a single base document"
        )
    return [(_identifier(base, id_field), migrated)]


def persist_embedded_document(
    collection: Collection,
    base: Mapping[str, Any] | list[Mapping[str, Any]],
    field: str,
    *,
    id_field: str | None = None,
    bulk: bool | None = None,
    settings: Settings | None = None,
) -> Adapter:
    """Return an adapter writing migrated embedded documents into ``field``.

    ``base`` is the document (or list of documents) holding the embedded
    value(s) being migrated. When the migrated result is a list, element ``i``
    is written to ``base[i]``.

    Args:
        collection: Storage holding the base documents.
        base: Base document, or list of base documents parallel to the
            embedded documents.
        field: Field of the base document(s) holding the embedded value.
        id_field: Field holding each base document's identifier. Defaults to
            ``settings.id_field``.
        bulk: Write a list with one ``bulk_write`` instead of one
            ``update_one`` per base document. Defaults to
            ``settings.bulk_writes``.
        settings: Settings supplying the defaults; read from the environment
            when omitted.

    Raises:
        ConfigurationError: If ``field`` is empty.
    """
    if not isinstance(field, str) or not field:
        raise ConfigurationError("Embedded document field must be a non-empty string")
    id_field, bulk = _resolve_options(id_field, bulk, settings)

    async def _persist(migrated: Any) -> Any:
        many = isinstance(migrated, list)
        pairs = _embedded_pairs(migrated, base, id_field)
        requests = [
            ({id_field: identifier}, {"$set": {field: value}})
            for identifier, value in pairs
        ]
        with logfire.span(
            "persistence.persist_embedded_document",
            attributes={
                "documents": len(requests),
                "field": field,
                "bulk": many and bulk,
            },
        ):
            if many and bulk:
                if not requests:
                    return None
                return await resolve(
                    collection.bulk_write(
                        [UpdateOne(flt, update) for flt, update in requests],
                        ordered=True,
                    )
                )
            results = [
                await resolve(collection.update_one(flt, update))
                for flt, update in requests
            ]
            logfire.debug(
                "Updated embedded documents", field=field, count=len(results)
            )
            return results if many else results[0]

    return _persist


def atomic_write(path: Path, lines: Iterable[str]) -> None:
    """Write ``lines`` to ``path`` atomically.

    The lines go to ``path`` with a ``.tmp`` suffix, which is flushed and
    synced to disk and then moved over ``path`` with :func:`os.replace`.
    """
    with logfire.span("fs.atomic_write", attributes={"path": str(path)}):
        tmp_path = Path(f"{path}.tmp")
        tmp_path.parent.mkdir(parents=True, exist_ok=True)
        count = 0
        with open(tmp_path, "w", encoding="utf-8") as handle:
            for line in lines:
                handle.write(f"{line}\n")
                count += 1
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
        logfire.debug("Atomic write complete", path=str(path), lines=count)


__all__ = [
    "Adapter",
    "persist_by_id",
    "persist_embedded_document",
    "atomic_write",
]
