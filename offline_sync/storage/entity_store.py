"""Local cache of synchronized entities keyed by id."""

import asyncio
from pathlib import Path
from typing import Generic, Iterable, TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from offline_sync.storage.json_file import read_json, write_json_atomic

log = structlog.stdlib.get_logger()

EntityT = TypeVar("EntityT", bound=BaseModel)


class EntityStoreError(Exception):
    """Raised when the local entity cache cannot be loaded or saved."""


class EntityStore(Generic[EntityT]):
    """In-memory entity cache with optional JSON persistence.

    Entities are keyed by their ``id`` attribute. Every mutation is applied
    to a copy and persisted before it becomes visible, so a failed save
    leaves the cache as it was.
    """

    def __init__(
        self,
        entity_type: type[EntityT],
        name: str,
        path: str | Path | None = None,
    ) -> None:
        """
        Initialize entity store.

        Args:
            entity_type: Pydantic model class stored in this cache
            name: Entity type name used in log events (e.g. "topics")
            path: Optional JSON file to persist the cache to
        """
        self._entity_type = entity_type
        self._adapter = TypeAdapter(list[entity_type])
        self.name = name
        self._path = Path(path) if path is not None else None
        self._entities: dict[str, EntityT] = {}
        self._loaded = self._path is None
        self._lock = asyncio.Lock()

    async def upsert(self, entities: Iterable[EntityT]) -> int:
        """
        Insert or replace entities by id.

        Args:
            entities: Entities to write; an empty iterable is a no-op

        Returns:
            Number of entities written
        """
        entities = list(entities)
        if not entities:
            return 0

        async with self._lock:
            await self._ensure_loaded()
            updated = dict(self._entities)
            for entity in entities:
                updated[entity.id] = entity
            await self._save(updated)
            self._entities = updated

        log.debug("entities_upserted", entity_type=self.name, count=len(entities))
        return len(entities)

    async def delete(self, ids: Iterable[str]) -> int:
        """
        Remove entities by id. Unknown ids are ignored.

        Args:
            ids: Ids to delete; an empty iterable is a no-op

        Returns:
            Number of entities actually removed
        """
        ids = set(ids)
        if not ids:
            return 0

        async with self._lock:
            await self._ensure_loaded()
            updated = {key: value for key, value in self._entities.items() if key not in ids}
            removed = len(self._entities) - len(updated)
            if removed:
                await self._save(updated)
                self._entities = updated

        log.debug("entities_deleted", entity_type=self.name, requested=len(ids), removed=removed)
        return removed

    async def get(self, ids: Iterable[str]) -> list[EntityT]:
        """Return the cached entities for ``ids``, skipping unknown ones, in request order."""
        async with self._lock:
            await self._ensure_loaded()
            return [self._entities[i] for i in ids if i in self._entities]

    async def get_all(self) -> list[EntityT]:
        async with self._lock:
            await self._ensure_loaded()
            return list(self._entities.values())

    async def ids(self) -> set[str]:
        async with self._lock:
            await self._ensure_loaded()
            return set(self._entities)

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return

        try:
            payload = await asyncio.to_thread(read_json, self._path)
            entities = self._adapter.validate_python(payload or [])
        except (OSError, ValueError, ValidationError) as e:
            log.error("failed_to_load_entities", entity_type=self.name, error=str(e))
            raise EntityStoreError(f"Failed to load {self.name} cache: {e}") from e

        self._entities = {entity.id: entity for entity in entities}
        self._loaded = True
        log.info("entities_loaded", entity_type=self.name, count=len(self._entities))

    async def _save(self, entities: dict[str, EntityT]) -> None:
        if self._path is None:
            return

        payload = self._adapter.dump_python(list(entities.values()), mode="json")
        try:
            await asyncio.to_thread(write_json_atomic, self._path, payload)
        except OSError as e:
            log.error("failed_to_save_entities", entity_type=self.name, error=str(e))
            raise EntityStoreError(f"Failed to save {self.name} cache: {e}") from e
