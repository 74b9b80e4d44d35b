# SPDX-License-Identifier: MIT
"""Storage capability consumed by the persistence adapters.

The adapters only ever replace a document or set one of its fields, addressed
by identifier. Both blocking clients (``pymongo.collection.Collection``) and
asyncio clients (pymongo's async collection, motor) satisfy this protocol;
the adapters await whatever a method returns when it is awaitable.
"""

from __future__ import annotations

import inspect
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from pymongo import ReplaceOne, UpdateOne


@runtime_checkable
class Collection(Protocol):
    """Minimal write surface of a document collection."""

    def replace_one(
        self, filter: Mapping[str, Any], replacement: Mapping[str, Any]
    ) -> Any: ...

    def update_one(
        self, filter: Mapping[str, Any], update: Mapping[str, Any]
    ) -> Any: ...

    def bulk_write(
        self, requests: Sequence[ReplaceOne | UpdateOne], ordered: bool = True
    ) -> Any: ...


async def resolve(result: Any) -> Any:
    """Return ``result``, awaiting it first when it is awaitable."""
    if inspect.isawaitable(result):
        return await result
    return result


__all__ = ["Collection", "resolve"]
