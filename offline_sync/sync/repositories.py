"""Offline-first repositories: local caches kept current through change lists."""

import structlog

from offline_sync.models.entities import NewsResource, Topic
from offline_sync.network.data_source import NetworkDataSource
from offline_sync.storage.entity_store import EntityStore
from offline_sync.sync.synchronizer import Syncable, Synchronizer, change_list_sync

log = structlog.stdlib.get_logger()

DEFAULT_NEWS_BATCH_SIZE = 40


class TopicsRepository(Syncable):
    """Topics read from the local cache and synced from the network."""

    name = "topics"

    def __init__(self, network: NetworkDataSource, store: EntityStore[Topic]):
        self._network = network
        self._store = store

    async def get_all(self) -> list[Topic]:
        return await self._store.get_all()

    async def get(self, ids: list[str]) -> list[Topic]:
        return await self._store.get(ids)

    async def sync_with(self, synchronizer: Synchronizer) -> bool:
        return await change_list_sync(
            synchronizer,
            version_reader=lambda versions: versions.topic_version,
            change_list_fetcher=lambda version: self._network.get_topic_change_list(
                after=version
            ),
            version_updater=lambda versions, version: versions.model_copy(
                update={"topic_version": version}
            ),
            model_deleter=self._delete,
            model_updater=self._update,
            entity_type=self.name,
        )

    async def _delete(self, ids: list[str]) -> None:
        await self._store.delete(ids)

    async def _update(self, ids: list[str]) -> None:
        if not ids:
            return
        topics = await self._network.get_topics(ids=ids)
        await self._store.upsert(topics)


class NewsRepository(Syncable):
    """News resources read from the local cache and synced from the network.

    Bodies of changed news resources are fetched in batches so one sync of a
    large backlog does not turn into a single oversized request.
    """

    name = "news_resources"

    def __init__(
        self,
        network: NetworkDataSource,
        store: EntityStore[NewsResource],
        batch_size: int = DEFAULT_NEWS_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._network = network
        self._store = store
        self._batch_size = batch_size

    async def get_all(self) -> list[NewsResource]:
        return await self._store.get_all()

    async def get(self, ids: list[str]) -> list[NewsResource]:
        return await self._store.get(ids)

    async def get_for_topic(self, topic_id: str) -> list[NewsResource]:
        return [news for news in await self._store.get_all() if topic_id in news.topics]

    async def sync_with(self, synchronizer: Synchronizer) -> bool:
        return await change_list_sync(
            synchronizer,
            version_reader=lambda versions: versions.news_resource_version,
            change_list_fetcher=lambda version: self._network.get_news_resource_change_list(
                after=version
            ),
            version_updater=lambda versions, version: versions.model_copy(
                update={"news_resource_version": version}
            ),
            model_deleter=self._delete,
            model_updater=self._update,
            entity_type=self.name,
        )

    async def _delete(self, ids: list[str]) -> None:
        await self._store.delete(ids)

    async def _update(self, ids: list[str]) -> None:
        for start in range(0, len(ids), self._batch_size):
            batch = ids[start : start + self._batch_size]
            news = await self._network.get_news_resources(ids=batch)
            await self._store.upsert(news)
            log.debug("news_batch_upserted", requested=len(batch), received=len(news))
