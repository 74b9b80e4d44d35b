# SPDX-License-Identifier: MIT
"""Lazy schema migration for documents stored in schemaless databases.

Exports:
    create_schema: Build a :class:`Schema` from an ordered revision chain.
    Schema: Callable migrating a document, or list of documents, to the
        chain's target version.
    Revision: One per-document or batch upgrade step.
    persist_by_id: Adapter replacing migrated documents in storage.
    persist_embedded_document: Adapter writing migrated embedded documents
        back into their base documents.
    Settings: Engine configuration.
"""

from .engine import PersistenceAdapter, Schema, create_schema
from .errors import (
    CardinalityError,
    ConfigurationError,
    LazySchemaError,
    PersistenceError,
    VersionMismatch,
)
from .io_utils import Collection, persist_by_id, persist_embedded_document
from .models import Revision
from .runtime import Settings, load_settings

__all__ = [
    "create_schema",
    "Schema",
    "PersistenceAdapter",
    "Revision",
    "Collection",
    "persist_by_id",
    "persist_embedded_document",
    "Settings",
    "load_settings",
    "LazySchemaError",
    "ConfigurationError",
    "VersionMismatch",
    "CardinalityError",
    "PersistenceError",
]
