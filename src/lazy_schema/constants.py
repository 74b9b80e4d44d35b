"""Project-wide constants.

This module centralises small constants that are imported across the
package. Keep this file minimal and free of side effects.
"""

from __future__ import annotations

VERSION_FIELD = "_v"
"""Document field carrying the number of revisions already applied."""

ID_FIELD = "_id"
"""Document field holding the storage identifier."""

DEFAULT_UPDATE_CONCURRENCY = 32
"""Upper bound on concurrent per-document updater calls within one level."""

ENV_PREFIX = "LAZY_SCHEMA_"

__all__ = [
    "VERSION_FIELD",
    "ID_FIELD",
    "DEFAULT_UPDATE_CONCURRENCY",
    "ENV_PREFIX",
]
