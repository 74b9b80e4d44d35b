# SPDX-License-Identifier: MIT
"""Apply one revision of a chain to the documents currently at its version.

A level is the set of working-set entries whose version equals the chain
position of the revision being applied. Documents that reached this version
earlier in the same call, through the previous level, are part of the level
together with documents that started the call there, so a batch updater sees
every one of them in a single invocation.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Mapping
from typing import Any, Sequence

import logfire

from ..constants import DEFAULT_UPDATE_CONCURRENCY, VERSION_FIELD
from ..errors import CardinalityError, VersionMismatch
from ..models import BatchUpdater, Document, DocumentUpdater, Entry, Revision
from ..observability.monitoring import REVISIONS_APPLIED


def is_version(value: Any, expected: int) -> bool:
    """Return ``True`` when ``value`` is the integer ``expected``.

    Booleans are rejected even though ``True == 1``.
    """
    return isinstance(value, int) and not isinstance(value, bool) and value == expected


def version_of(document: Document, version_field: str = VERSION_FIELD) -> Any:
    """Return the version carried by ``document``; a missing field reads as 0."""
    return document.get(version_field, 0)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _as_list(result: Any) -> list[Any]:
    """Return a batch updater result as a list of values."""
    if isinstance(result, Mapping):
        return [result]
    if isinstance(result, Iterable) and not isinstance(result, (str, bytes)):
        return list(result)
    return []


def _validate(outputs: Sequence[Any], level: int, version_field: str) -> None:
    """Ensure every output of ``level`` carries version ``level + 1``.

    Raises:
        VersionMismatch: On the first output with any other version.
    """
    expected = level + 1
    for output in outputs:
        actual = output.get(version_field) if isinstance(output, Mapping) else None
        if not is_version(actual, expected):
            raise VersionMismatch(
                f"Revision {level} returned a document with "
                f"{version_field}={actual!r}, expected {expected}",
                level=level,
                expected=expected,
                actual=actual,
            )


async def _update_each(
    update: DocumentUpdater, documents: list[Document], concurrency: int
) -> list[Any]:
    """Run the per-document updater over ``documents`` concurrently.

    At most ``concurrency`` calls are in flight. The first failure cancels the
    calls still pending, waits for them to finish and propagates unchanged.
    """
    semaphore = asyncio.Semaphore(concurrency)

    async def _apply(document: Document) -> Any:
        async with semaphore:
            return await _resolve(update(document))

    tasks = [asyncio.ensure_future(_apply(document)) for document in documents]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _update_batch(
    update_many: BatchUpdater, documents: list[Document], level: int
) -> list[Any]:
    """Run the batch updater once and check the result lines up with the input.

    Raises:
        CardinalityError: If the result length differs from the input length.
    """
    outputs = _as_list(await _resolve(update_many(list(documents))))
    if len(outputs) != len(documents):
        raise CardinalityError(
            f"Batch revision {level} returned {len(outputs)} documents "
            f"for {len(documents)} inputs",
            expected=len(documents),
            actual=len(outputs),
        )
    return outputs


async def run_level(
    level: int,
    entries: Sequence[Entry],
    revision: Revision,
    *,
    version_field: str = VERSION_FIELD,
    concurrency: int = DEFAULT_UPDATE_CONCURRENCY,
) -> list[Entry]:
    """Apply ``revision`` to the entries currently at version ``level``.

    Args:
        level: Chain position of ``revision``.
        entries: Current working set.
        revision: Revision upgrading documents from ``level`` to ``level + 1``.
        version_field: Document field holding the version.
        concurrency: Bound on concurrent per-document updater calls.

    Returns:
        A new working set in the same order as ``entries`` in which every
        eligible entry is replaced by its upgraded document. Ineligible entries
        are returned unchanged.

    Raises:
        VersionMismatch: If an upgraded document does not carry ``level + 1``.
        CardinalityError: If a batch updater returns the wrong number of
            documents.
    """
    eligible = [
        entry
        for entry in entries
        if is_version(version_of(entry.document, version_field), level)
    ]
    if not eligible:
        return list(entries)

    with logfire.span(
        "level_executor.run_level",
        attributes={"level": level, "kind": revision.kind, "eligible": len(eligible)},
    ):
        documents = [entry.document for entry in eligible]
        if revision.update_many is not None:
            outputs = await _update_batch(revision.update_many, documents, level)
            REVISIONS_APPLIED.add(1)
        else:
            outputs = await _update_each(revision.update, documents, concurrency)
            REVISIONS_APPLIED.add(len(outputs))
        _validate(outputs, level, version_field)
        logfire.debug("Level applied", level=level, count=len(outputs))

    updated = {
        entry.index: Entry(entry.index, output)
        for entry, output in zip(eligible, outputs)
    }
    return [updated.get(entry.index, entry) for entry in entries]


__all__ = ["run_level", "is_version", "version_of"]
