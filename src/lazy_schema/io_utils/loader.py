# SPDX-License-Identifier: MIT
"""Loaders for revision chains and newline-delimited JSON documents."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Iterator

import logfire
from pydantic import TypeAdapter, ValidationError

from ..errors import ConfigurationError
from ..models import Revision

_DOCUMENT = TypeAdapter(dict[str, Any])

DOCUMENTS_READ = logfire.metric_counter("lazy_schema_documents_read")


def load_revisions(reference: str) -> list[Revision | dict[str, Any]]:
    """Return the revision chain named by ``reference``.

    Args:
        reference: ``"package.module:ATTRIBUTE"``. The attribute may be a list
            of revisions or a zero-argument callable returning one.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be
            imported, or does not name a list.
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(
            f"Revision reference must look like 'module:attribute', got {reference!r}"
        )
    with logfire.span("loader.load_revisions", attributes={"reference": reference}):
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise ConfigurationError(
                f"Cannot import revision module {module_name!r}: {exc}"
            ) from exc
        try:
            chain = getattr(module, attr)
        except AttributeError as exc:
            raise ConfigurationError(
                f"Module {module_name!r} has no attribute {attr!r}"
            ) from exc
        if callable(chain):
            chain = chain()
        if not isinstance(chain, (list, tuple)):
            raise ConfigurationError(
                f"{reference} must be a list of revisions, got {type(chain).__name__}"
            )
        logfire.debug("Loaded revision chain", reference=reference, length=len(chain))
        return list(chain)


def iter_documents(path: Path | str) -> Iterator[dict[str, Any]]:
    """Yield one document per non-blank line of the JSONL file at ``path``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        RuntimeError: If a line is not a JSON object.
    """
    path_obj = Path(path)
    with path_obj.open("r", encoding="utf-8") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                document = _DOCUMENT.validate_json(line)
            except ValidationError as exc:
                logfire.error(
                    "Invalid document entry",
                    file_path=str(path_obj),
                    line_number=line_number,
                    error=str(exc),
                )
                raise RuntimeError(
                    f"{path_obj}:{line_number} is not a JSON object"
                ) from exc
            DOCUMENTS_READ.add(1)
            yield document


__all__ = ["load_revisions", "iter_documents"]
