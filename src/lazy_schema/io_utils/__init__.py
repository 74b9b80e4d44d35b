"""Input and output helpers for revision chains, documents and storage.

Exports:
    Collection: Storage capability written to by persistence adapters.
    persist_by_id: Adapter replacing stored documents by identifier.
    persist_embedded_document: Adapter writing an embedded field by identifier.
    load_revisions: Import a revision chain from ``module:attribute``.
    iter_documents: Iterate over documents in a JSONL file.
    atomic_write: Write files atomically.
"""

from __future__ import annotations

from .loader import iter_documents, load_revisions
from .persistence import (
    atomic_write,
    persist_by_id,
    persist_embedded_document,
)
from .storage import Collection

__all__ = [
    "Collection",
    "persist_by_id",
    "persist_embedded_document",
    "load_revisions",
    "iter_documents",
    "atomic_write",
]
