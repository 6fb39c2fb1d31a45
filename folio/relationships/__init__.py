"""Relationship store clients.

``get_relationship_store`` is the FastAPI dependency; it hands out one
process-wide store built from settings. Tests override it.
"""

from __future__ import annotations

import threading
from typing import Optional

from ..core.config import Settings, settings
from .memory import InMemoryRelationshipStore
from .protocols import RelationshipStore, RelationshipStoreError
from .tuples import RelationshipTuple, object_ref, subject_ref

__all__ = [
    "InMemoryRelationshipStore",
    "RelationshipStore",
    "RelationshipStoreError",
    "RelationshipTuple",
    "build_relationship_store",
    "close_relationship_store",
    "get_relationship_store",
    "object_ref",
    "subject_ref",
]

_store: Optional[RelationshipStore] = None
_store_lock = threading.Lock()


def build_relationship_store(config: Settings) -> RelationshipStore:
    """Create the store selected by RELATIONSHIP_STORE."""
    if config.relationship_store == "memory":
        return InMemoryRelationshipStore()

    # Imported lazily so the memory backend never touches the SDK.
    from .openfga import OpenFgaRelationshipStore

    return OpenFgaRelationshipStore.from_settings(config)


def get_relationship_store() -> RelationshipStore:
    """Return the process-wide store, building it on first use."""
    global _store
    with _store_lock:
        if _store is None:
            _store = build_relationship_store(settings)
        return _store


def close_relationship_store() -> None:
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
            _store = None
