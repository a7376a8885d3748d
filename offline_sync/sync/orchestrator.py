"""Orchestration of change list syncs across all entity types."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Callable, Sequence

import structlog

from offline_sync.models.change_list import ChangeListVersions
from offline_sync.storage.search_index import SearchIndex
from offline_sync.storage.version_store import VersionStore
from offline_sync.sync.models import SyncRunReport, SyncState
from offline_sync.sync.repositories import NewsRepository, TopicsRepository
from offline_sync.sync.synchronizer import (
    Syncable,
    SyncCancelledError,
    Synchronizer,
    sync_or_raise_cancelled,
)

log = structlog.stdlib.get_logger()


class SyncSubscriber:
    """Hook awaited before every run, e.g. to subscribe to push sync notifications."""

    async def subscribe(self) -> None:
        log.debug("sync_subscriber_noop")


class SearchContentsRepository:
    """Rebuilds the full-text search index from the local caches."""

    def __init__(self, topics: TopicsRepository, news: NewsRepository, index: SearchIndex):
        self._topics = topics
        self._news = news
        self.index = index

    async def populate(self) -> None:
        self.index.populate(await self._topics.get_all(), await self._news.get_all())


class SyncOrchestrator(Synchronizer):
    """
    Runs every registered syncable concurrently and aggregates the results.

    A run succeeds only if every entity type synced. Entity types succeed
    or fail independently: a failing one leaves its own cursor untouched
    while the others still advance theirs, and the caller retries the whole
    run later.
    """

    def __init__(
        self,
        version_store: VersionStore,
        syncables: Sequence[Syncable],
        search_contents: SearchContentsRepository | None = None,
        subscriber: SyncSubscriber | None = None,
    ):
        """
        Initialize sync orchestrator.

        Args:
            version_store: Store holding the shared ChangeListVersions record
            syncables: One syncable per entity type; names must be unique
            search_contents: Optional search index rebuilt after a successful run
            subscriber: Optional hook awaited before each run
        """
        names = [syncable.name for syncable in syncables]
        if len(set(names)) != len(names):
            raise ValueError(f"Syncable names must be unique, got {names}")

        self._version_store = version_store
        self._syncables = list(syncables)
        self._search_contents = search_contents
        self._subscriber = subscriber or SyncSubscriber()
        self._state = SyncState.IDLE

        log.info("sync_orchestrator_initialized", entity_types=names)

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def entity_types(self) -> list[str]:
        return [syncable.name for syncable in self._syncables]

    async def get_change_list_versions(self) -> ChangeListVersions:
        return await self._version_store.get_change_list_versions()

    async def update_change_list_versions(
        self, update: Callable[[ChangeListVersions], ChangeListVersions]
    ) -> None:
        await self._version_store.update_change_list_versions(update)

    async def run(self) -> SyncRunReport:
        """
        Perform one orchestration run.

        This method:
        1. Awaits the subscriber hook
        2. Syncs all entity types concurrently and waits for all of them
        3. Rebuilds the search index if every entity type succeeded

        Returns:
            SyncRunReport in state SUCCESS or RETRY

        Raises:
            asyncio.CancelledError: If the run is cancelled, or if any
                entity type's sync raised a cancellation. In-flight syncs
                are cancelled in both cases.
        """
        start_time = datetime.now(timezone.utc)
        report = SyncRunReport(
            run_id=uuid.uuid4().hex[:12],
            state=SyncState.RUNNING,
            start_time=start_time,
        )
        self._state = SyncState.RUNNING

        with structlog.contextvars.bound_contextvars(run_id=report.run_id):
            log.info("sync_started", entity_types=self.entity_types)

            try:
                await self._subscribe()
                report.results = await self._sync_all()
            except asyncio.CancelledError:
                self._state = SyncState.IDLE
                log.warning("sync_cancelled")
                raise

            synced = all(report.results.values())
            if synced and self._search_contents is not None:
                report.search_index_rebuilt = await self._rebuild_search_index()
                synced = report.search_index_rebuilt

            end_time = datetime.now(timezone.utc)
            report.state = SyncState.SUCCESS if synced else SyncState.RETRY
            report.end_time = end_time
            report.duration_seconds = (end_time - start_time).total_seconds()
            self._state = report.state

            log.info(
                "sync_finished",
                success=report.success,
                results=report.results,
                failed_entity_types=report.failed_entity_types,
                duration_seconds=report.duration_seconds,
            )

        return report

    async def _subscribe(self) -> None:
        try:
            await self._subscriber.subscribe()
        except Exception as e:
            log.warning("sync_subscribe_failed", error=str(e))

    async def _sync_all(self) -> dict[str, bool]:
        tasks: dict[str, asyncio.Task[bool]] = {}
        try:
            async with asyncio.TaskGroup() as group:
                for syncable in self._syncables:
                    tasks[syncable.name] = group.create_task(
                        sync_or_raise_cancelled(self, syncable),
                        name=f"sync-{syncable.name}",
                    )
        except ExceptionGroup as group_error:
            # Children report crashes as False, so only cancellations get here
            log.warning(
                "entity_sync_cancelled",
                entity_types=[
                    e.entity_type
                    for e in group_error.exceptions
                    if isinstance(e, SyncCancelledError)
                ],
            )
            raise asyncio.CancelledError("entity sync cancelled") from group_error

        return {name: task.result() for name, task in tasks.items()}

    async def _rebuild_search_index(self) -> bool:
        try:
            await self._search_contents.populate()
        except Exception as e:
            log.error("search_index_rebuild_failed", error=str(e))
            return False
        return True
