"""Centralized provider module for building sync collaborators from configuration.

Everything is constructed explicitly and passed down; there is no global
registry. Swap implementations here without changing other code.

Default implementations:
- Network: DemoNetworkDataSource (bundled JSON assets, no backend required)
- Versions and caches: JSON files under storage.data_directory
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from offline_sync.models.config import AppConfig, RemoteConfig, StorageConfig
from offline_sync.models.entities import NewsResource, Topic
from offline_sync.network.data_source import NetworkDataSource
from offline_sync.network.demo import DemoNetworkDataSource
from offline_sync.network.http_client import HttpNetworkDataSource
from offline_sync.storage.entity_store import EntityStore
from offline_sync.storage.search_index import SearchIndex
from offline_sync.storage.version_store import (
    InMemoryVersionStore,
    JsonFileVersionStore,
    VersionStore,
)
from offline_sync.sync.manager import SyncManager
from offline_sync.sync.orchestrator import SearchContentsRepository, SyncOrchestrator
from offline_sync.sync.repositories import NewsRepository, TopicsRepository

log = structlog.stdlib.get_logger()

VERSIONS_FILE = "change_list_versions.json"
TOPICS_FILE = "topics.json"
NEWS_FILE = "news_resources.json"


@dataclass
class SyncComponents:
    """Everything a scheduled sync needs, wired together."""

    network: NetworkDataSource
    version_store: VersionStore
    topics: TopicsRepository
    news: NewsRepository
    search_index: SearchIndex
    orchestrator: SyncOrchestrator
    manager: SyncManager


def get_network_data_source(config: RemoteConfig) -> NetworkDataSource:
    """Get the configured network data source.

    Args:
        config: Remote section of the application config

    Returns:
        DemoNetworkDataSource in demo mode, HttpNetworkDataSource otherwise
    """
    if config.demo:
        log.info("using_demo_network_data_source", assets_dir=config.assets_dir)
        return DemoNetworkDataSource(assets_dir=config.assets_dir)

    log.info("using_http_network_data_source", base_url=str(config.base_url))
    return HttpNetworkDataSource(
        base_url=str(config.base_url),
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
        base_delay=config.retry_base_delay,
        max_delay=config.retry_max_delay,
    )


def get_version_store(config: StorageConfig) -> VersionStore:
    """Get the configured change list version store."""
    if not config.persist:
        return InMemoryVersionStore()
    return JsonFileVersionStore(Path(config.data_directory) / VERSIONS_FILE)


def get_entity_store(
    config: StorageConfig, entity_type: type, name: str, file_name: str
) -> EntityStore:
    """Get a local entity cache, file-backed when persistence is enabled."""
    path = Path(config.data_directory) / file_name if config.persist else None
    return EntityStore(entity_type, name=name, path=path)


def build_sync_components(config: AppConfig) -> SyncComponents:
    """Wire network, storage, repositories, orchestrator and manager from config.

    Args:
        config: Loaded application configuration

    Returns:
        SyncComponents ready to run
    """
    network = get_network_data_source(config.remote)
    version_store = get_version_store(config.storage)

    topics = TopicsRepository(
        network, get_entity_store(config.storage, Topic, "topics", TOPICS_FILE)
    )
    news = NewsRepository(
        network,
        get_entity_store(config.storage, NewsResource, "news_resources", NEWS_FILE),
        batch_size=config.sync.news_batch_size,
    )

    search_index = SearchIndex()
    orchestrator = SyncOrchestrator(
        version_store,
        syncables=[topics, news],
        search_contents=SearchContentsRepository(topics, news, search_index),
    )
    manager = SyncManager(
        orchestrator,
        max_attempts=config.sync.max_attempts,
        base_delay=config.sync.base_delay,
        max_delay=config.sync.max_delay,
    )

    log.info(
        "sync_components_built",
        demo=config.remote.demo,
        persist=config.storage.persist,
        data_directory=config.storage.data_directory,
    )

    return SyncComponents(
        network=network,
        version_store=version_store,
        topics=topics,
        news=news,
        search_index=search_index,
        orchestrator=orchestrator,
        manager=manager,
    )
