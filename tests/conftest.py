"""Shared fixtures for sync tests."""

import asyncio

import pytest

from offline_sync.models.change_list import NetworkChangeList
from offline_sync.models.entities import NewsResource, Topic
from offline_sync.network.data_source import NetworkDataSource, NetworkError
from offline_sync.storage.entity_store import EntityStore
from offline_sync.storage.search_index import SearchIndex
from offline_sync.storage.version_store import InMemoryVersionStore
from offline_sync.sync.orchestrator import SearchContentsRepository, SyncOrchestrator
from offline_sync.sync.repositories import NewsRepository, TopicsRepository


class FakeNetworkDataSource(NetworkDataSource):
    """In-memory backend with a change log per entity type and failure switches."""

    def __init__(self) -> None:
        self.topics: dict[str, Topic] = {}
        self.news: dict[str, NewsResource] = {}
        self.topic_changes: list[NetworkChangeList] = []
        self.news_changes: list[NetworkChangeList] = []
        self.fail_topic_fetch = False
        self.fail_news_fetch = False
        self.cancel_news_fetch = False
        self.block_news_fetch: asyncio.Event | None = None
        self.news_fetch_started = asyncio.Event()
        self.news_requests: list[list[str] | None] = []

    def publish_topic(self, topic: Topic) -> None:
        self.topics[topic.id] = topic
        self.topic_changes.append(self._next_change(self.topic_changes, topic.id, False))

    def delete_topic(self, topic_id: str) -> None:
        self.topics.pop(topic_id, None)
        self.topic_changes.append(self._next_change(self.topic_changes, topic_id, True))

    def publish_news(self, news: NewsResource) -> None:
        self.news[news.id] = news
        self.news_changes.append(self._next_change(self.news_changes, news.id, False))

    def delete_news(self, news_id: str) -> None:
        self.news.pop(news_id, None)
        self.news_changes.append(self._next_change(self.news_changes, news_id, True))

    async def get_topics(self, ids: list[str] | None = None) -> list[Topic]:
        if self.fail_topic_fetch:
            raise NetworkError("topics endpoint unavailable")
        wanted = self.topics if ids is None else ids
        return [self.topics[i] for i in wanted if i in self.topics]

    async def get_news_resources(self, ids: list[str] | None = None) -> list[NewsResource]:
        self.news_requests.append(ids)
        self.news_fetch_started.set()
        if self.block_news_fetch is not None:
            await self.block_news_fetch.wait()
        if self.cancel_news_fetch:
            raise asyncio.CancelledError()
        if self.fail_news_fetch:
            raise NetworkError("newsresources endpoint unavailable")
        wanted = self.news if ids is None else ids
        return [self.news[i] for i in wanted if i in self.news]

    async def get_topic_change_list(self, after: int | None = None) -> list[NetworkChangeList]:
        return [c for c in self.topic_changes if after is None or c.change_list_version > after]

    async def get_news_resource_change_list(
        self, after: int | None = None
    ) -> list[NetworkChangeList]:
        return [c for c in self.news_changes if after is None or c.change_list_version > after]

    @staticmethod
    def _next_change(
        changes: list[NetworkChangeList], entity_id: str, is_delete: bool
    ) -> NetworkChangeList:
        version = changes[-1].change_list_version + 1 if changes else 1
        return NetworkChangeList(id=entity_id, change_list_version=version, is_delete=is_delete)


class SyncHarness:
    """Orchestrator wired to in-memory stores and a fake backend."""

    def __init__(self, news_batch_size: int = 40) -> None:
        self.network = FakeNetworkDataSource()
        self.version_store = InMemoryVersionStore()
        self.topic_store: EntityStore[Topic] = EntityStore(Topic, name="topics")
        self.news_store: EntityStore[NewsResource] = EntityStore(
            NewsResource, name="news_resources"
        )
        self.topics = TopicsRepository(self.network, self.topic_store)
        self.news = NewsRepository(self.network, self.news_store, batch_size=news_batch_size)
        self.search_index = SearchIndex()
        self.orchestrator = SyncOrchestrator(
            self.version_store,
            syncables=[self.topics, self.news],
            search_contents=SearchContentsRepository(self.topics, self.news, self.search_index),
        )


@pytest.fixture
def harness() -> SyncHarness:
    return SyncHarness()


@pytest.fixture
def make_harness():
    """Factory for harnesses with non-default settings."""
    return SyncHarness
