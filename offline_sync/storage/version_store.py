"""Version store interface and implementations for change list cursors."""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

import structlog
from pydantic import ValidationError

from offline_sync.models.change_list import ChangeListVersions
from offline_sync.storage.json_file import read_json, write_json_atomic

log = structlog.stdlib.get_logger()

VersionUpdate = Callable[[ChangeListVersions], ChangeListVersions]


class VersionStoreError(Exception):
    """Raised when change list versions cannot be read or written."""


class VersionStore(ABC):
    """Abstract store for the ``ChangeListVersions`` record.

    Updates are pure ``old -> new`` transformations. Implementations apply
    them as a read-modify-write under a lock, so concurrent syncs of
    different entity types, each rewriting only its own field, never lose
    each other's updates.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    @abstractmethod
    async def _read(self) -> ChangeListVersions:
        """Load the current record, defaults if nothing was stored yet."""

    @abstractmethod
    async def _write(self, versions: ChangeListVersions) -> None:
        """Persist ``versions``; raise VersionStoreError on failure."""

    async def get_change_list_versions(self) -> ChangeListVersions:
        """Return the current record."""
        async with self._lock:
            return await self._read()

    async def update_change_list_versions(self, update: VersionUpdate) -> ChangeListVersions:
        """
        Atomically replace the record with ``update(current)``.

        Args:
            update: Pure transformation from the current record to the new one

        Returns:
            The record that was stored

        Raises:
            VersionStoreError: If the new record could not be persisted. The
                stored record is left unchanged in that case.
        """
        async with self._lock:
            current = await self._read()
            updated = update(current)
            await self._write(updated)

        log.debug(
            "change_list_versions_updated",
            topic_version=updated.topic_version,
            news_resource_version=updated.news_resource_version,
        )
        return updated


class InMemoryVersionStore(VersionStore):
    """Keeps the record in process memory."""

    def __init__(self, initial: ChangeListVersions | None = None) -> None:
        super().__init__()
        self._versions = initial or ChangeListVersions()

    async def _read(self) -> ChangeListVersions:
        return self._versions

    async def _write(self, versions: ChangeListVersions) -> None:
        self._versions = versions


class JsonFileVersionStore(VersionStore):
    """Persists the record as a JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self._path = Path(path)
        log.info("json_version_store_initialized", path=str(self._path))

    async def _read(self) -> ChangeListVersions:
        try:
            payload = await asyncio.to_thread(read_json, self._path)
        except (OSError, ValueError) as e:
            log.error("failed_to_read_change_list_versions", path=str(self._path), error=str(e))
            raise VersionStoreError(f"Failed to read change list versions: {e}") from e

        if payload is None:
            return ChangeListVersions()

        try:
            return ChangeListVersions.model_validate(payload)
        except ValidationError as e:
            log.error("invalid_change_list_versions", path=str(self._path), error=str(e))
            raise VersionStoreError(f"Stored change list versions are invalid: {e}") from e

    async def _write(self, versions: ChangeListVersions) -> None:
        try:
            await asyncio.to_thread(write_json_atomic, self._path, versions.model_dump())
        except OSError as e:
            log.error("failed_to_write_change_list_versions", path=str(self._path), error=str(e))
            raise VersionStoreError(f"Failed to write change list versions: {e}") from e
