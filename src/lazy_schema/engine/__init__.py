"""Migration engine.

Exports:
    Schema: Callable migrating documents through a revision chain.
    create_schema: Build a :class:`Schema` from a revision chain.
    run_level: Apply one revision to the documents at its version.
"""

from .level_executor import run_level
from .schema import PersistenceAdapter, Schema, create_schema

__all__ = ["Schema", "PersistenceAdapter", "create_schema", "run_level"]
