"""Local persistence for change list cursors, entity caches and search."""

from offline_sync.storage.entity_store import EntityStore, EntityStoreError
from offline_sync.storage.search_index import SearchIndex, SearchResult
from offline_sync.storage.version_store import (
    InMemoryVersionStore,
    JsonFileVersionStore,
    VersionStore,
    VersionStoreError,
)

__all__ = [
    "EntityStore",
    "EntityStoreError",
    "InMemoryVersionStore",
    "JsonFileVersionStore",
    "SearchIndex",
    "SearchResult",
    "VersionStore",
    "VersionStoreError",
]
