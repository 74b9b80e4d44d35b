# SPDX-License-Identifier: MIT
"""Test configuration for lazy-schema.

Keeps Logfire local and provides in-memory stand-ins for a document
collection.
"""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any

import logfire
import pytest

from lazy_schema import Settings


def pytest_configure(config: pytest.Config) -> None:
    """Configure Logfire without network or console output."""

    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure ``LAZY_SCHEMA_*`` variables from the shell do not leak into tests."""

    for name in (
        "LAZY_SCHEMA_VERSION_FIELD",
        "LAZY_SCHEMA_ID_FIELD",
        "LAZY_SCHEMA_MISSING_VERSION",
        "LAZY_SCHEMA_UPDATE_CONCURRENCY",
        "LAZY_SCHEMA_BULK_WRITES",
        "LAZY_SCHEMA_LOG_LEVEL",
        "LAZY_SCHEMA_LOGFIRE_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def settings() -> Settings:
    """Return default engine settings."""

    return Settings()


class MemoryCollection:
    """Blocking collection keeping documents in a dict keyed by ``_id``."""

    def __init__(self, documents: list[dict[str, Any]] | None = None) -> None:
        self.documents: dict[Any, dict[str, Any]] = {}
        self.calls: list[str] = []
        for document in documents or []:
            self.documents[document["_id"]] = copy.deepcopy(document)

    def find(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self.documents.values()]

    def replace_one(self, filter: dict[str, Any], replacement: dict[str, Any]):
        self.calls.append("replace_one")
        key = filter["_id"]
        matched = int(key in self.documents)
        if matched:
            self.documents[key] = copy.deepcopy(dict(replacement))
        return SimpleNamespace(matched_count=matched)

    def update_one(self, filter: dict[str, Any], update: dict[str, Any]):
        self.calls.append("update_one")
        key = filter["_id"]
        matched = int(key in self.documents)
        if matched:
            for field, value in update["$set"].items():
                self.documents[key][field] = copy.deepcopy(value)
        return SimpleNamespace(matched_count=matched)

    def bulk_write(self, requests, ordered: bool = True):  # pragma: no cover
        raise AssertionError("MemoryCollection does not support bulk writes")


class AsyncMemoryCollection(MemoryCollection):
    """Asyncio flavour of :class:`MemoryCollection`."""

    async def replace_one(self, filter, replacement):  # type: ignore[override]
        return MemoryCollection.replace_one(self, filter, replacement)

    async def update_one(self, filter, update):  # type: ignore[override]
        return MemoryCollection.update_one(self, filter, update)


@pytest.fixture()
def memory_collection() -> type[MemoryCollection]:
    """Provide the blocking in-memory collection class."""

    return MemoryCollection


@pytest.fixture()
def async_memory_collection() -> type[AsyncMemoryCollection]:
    """Provide the asyncio in-memory collection class."""

    return AsyncMemoryCollection
