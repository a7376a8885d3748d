"""Change list synchronization between the local caches and the remote source.

Each entity type keeps an integer cursor in ``ChangeListVersions``. A sync
fetches every change after that cursor, applies deletions, then updates,
and only then moves the cursor to the newest version it applied. Any
failure before the cursor write leaves the cursor where it was, so the next
sync replays the same batch instead of skipping it.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

import structlog

from offline_sync.models.change_list import ChangeListVersions, NetworkChangeList

log = structlog.stdlib.get_logger()

T = TypeVar("T")

VersionReader = Callable[[ChangeListVersions], int]
ChangeListFetcher = Callable[[int], Awaitable[list[NetworkChangeList]]]
VersionUpdater = Callable[[ChangeListVersions, int], ChangeListVersions]
ModelDeleter = Callable[[list[str]], Awaitable[None]]
ModelUpdater = Callable[[list[str]], Awaitable[None]]


class Synchronizer(ABC):
    """Gives syncables access to the shared change list version record."""

    @abstractmethod
    async def get_change_list_versions(self) -> ChangeListVersions:
        """Current cursors for all entity types."""

    @abstractmethod
    async def update_change_list_versions(
        self, update: Callable[[ChangeListVersions], ChangeListVersions]
    ) -> None:
        """Atomically replace the version record with ``update(current)``."""

    async def sync(self, syncable: "Syncable") -> bool:
        """Shorthand for ``syncable.sync_with(self)``."""
        return await syncable.sync_with(self)


class Syncable(ABC):
    """Something whose local data can be brought up to date with the remote source."""

    name: str = "unknown"

    @abstractmethod
    async def sync_with(self, synchronizer: Synchronizer) -> bool:
        """
        Synchronize local data with the remote source.

        Returns:
            True if the sync completed, False if it failed and should be retried
        """


@dataclass(frozen=True)
class CatchResult(Generic[T]):
    """Outcome of ``run_catching``: either a value or the exception raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None


async def run_catching(block: Callable[[], Awaitable[T]]) -> CatchResult[T]:
    """
    Await ``block`` and capture any exception as a failed result.

    ``asyncio.CancelledError`` is not an ``Exception`` and is never captured:
    it always reaches the caller so structured cancellation keeps working.
    """
    try:
        return CatchResult(value=await block())
    except Exception as e:
        log.info(
            "run_catching_failed",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return CatchResult(error=e)


async def change_list_sync(
    synchronizer: Synchronizer,
    version_reader: VersionReader,
    change_list_fetcher: ChangeListFetcher,
    version_updater: VersionUpdater,
    model_deleter: ModelDeleter,
    model_updater: ModelUpdater,
    entity_type: str = "unknown",
) -> bool:
    """
    Bring one entity type up to date using its change list cursor.

    Steps run strictly in order: read cursor, fetch changes, delete, update,
    advance cursor. Callers must not run two syncs of the same entity type
    at once.

    Args:
        synchronizer: Access to the shared version record
        version_reader: Extracts this entity type's cursor from the record
        change_list_fetcher: Fetches changes strictly after a cursor
        version_updater: Returns a copy of the record with this entity
            type's cursor set to the given value
        model_deleter: Deletes local entities by id; called even when empty
        model_updater: Fetches and upserts entities by id; called even when empty
        entity_type: Name used in log events

    Returns:
        True on success (including "nothing to do"), False on any failure

    Raises:
        asyncio.CancelledError: Always propagated, never turned into False
    """

    async def sync_block() -> bool:
        current_version = version_reader(await synchronizer.get_change_list_versions())
        changes = await change_list_fetcher(current_version)

        if not changes:
            log.debug("change_list_empty", entity_type=entity_type, version=current_version)
            return True

        deleted = [change.id for change in changes if change.is_delete]
        updated = [change.id for change in changes if not change.is_delete]

        log.info(
            "applying_change_list",
            entity_type=entity_type,
            from_version=current_version,
            deleted=len(deleted),
            updated=len(updated),
        )

        await model_deleter(deleted)
        await model_updater(updated)

        latest_version = _latest_version(changes, current_version, entity_type)
        await synchronizer.update_change_list_versions(
            lambda versions: version_updater(versions, latest_version)
        )

        log.info(
            "change_list_applied",
            entity_type=entity_type,
            from_version=current_version,
            to_version=latest_version,
        )
        return True

    result = await run_catching(sync_block)
    if not result.is_success:
        log.warning(
            "change_list_sync_failed",
            entity_type=entity_type,
            error=str(result.error),
        )
    return result.is_success


def _latest_version(
    changes: list[NetworkChangeList], current_version: int, entity_type: str
) -> int:
    """
    Newest version in a fetched batch.

    For a batch sorted ascending this is the last entry. The max is taken
    instead so an out-of-order batch cannot move the cursor backwards, and
    the cursor never drops below its current value.
    """
    latest = max(change.change_list_version for change in changes)

    if latest != changes[-1].change_list_version:
        log.warning(
            "change_list_out_of_order",
            entity_type=entity_type,
            last_version=changes[-1].change_list_version,
            max_version=latest,
        )

    if latest < current_version:
        log.warning(
            "change_list_version_behind_cursor",
            entity_type=entity_type,
            current_version=current_version,
            latest_version=latest,
        )
        return current_version

    return latest


class SyncCancelledError(Exception):
    """Carries a cancellation raised inside one entity type's sync out of a task group.

    A bare ``asyncio.CancelledError`` from a child task would not stop its
    siblings; raising this instead makes the group tear them down, after
    which the orchestrator re-raises ``asyncio.CancelledError``.
    """

    def __init__(self, entity_type: str):
        super().__init__(f"Sync of {entity_type} was cancelled")
        self.entity_type = entity_type


async def sync_or_raise_cancelled(synchronizer: Synchronizer, syncable: Syncable) -> bool:
    """
    Run ``synchronizer.sync(syncable)`` as a task group child.

    A syncable that raises an ordinary exception instead of returning False
    is reported as failed, so its siblings keep running and keep their own
    results. Cancellation coming from outside (the group or the caller
    cancelling this task) is re-raised untouched. Cancellation raised by the
    sync itself is converted into ``SyncCancelledError`` so the whole group
    is cancelled.
    """
    try:
        return await synchronizer.sync(syncable)
    except Exception as e:
        log.error(
            "entity_sync_crashed",
            entity_type=syncable.name,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return False
    except asyncio.CancelledError:
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        raise SyncCancelledError(syncable.name) from None
