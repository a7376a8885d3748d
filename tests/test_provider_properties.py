"""Tests for the provider module.

Feature: offline-sync
"""

import pytest
import structlog
from hypothesis import given, settings
from hypothesis import strategies as st

from offline_sync.models import AppConfig, RemoteConfig, StorageConfig
from offline_sync.network.demo import DemoNetworkDataSource
from offline_sync.network.http_client import HttpNetworkDataSource
from offline_sync.providers import (
    VERSIONS_FILE,
    build_sync_components,
    get_network_data_source,
    get_version_store,
)
from offline_sync.storage.version_store import InMemoryVersionStore, JsonFileVersionStore
from offline_sync.sync.models import SyncState

log = structlog.stdlib.get_logger()


@settings(deadline=None, max_examples=20)
@given(st.booleans())
def test_network_data_source_follows_demo_flag(demo: bool):
    """The demo flag alone decides which data source is built."""
    config = RemoteConfig(demo=demo, base_url="https://news.example.com/api")

    source = get_network_data_source(config)

    expected = DemoNetworkDataSource if demo else HttpNetworkDataSource
    assert isinstance(source, expected)


def test_version_store_follows_persist_flag(tmp_path):
    assert isinstance(
        get_version_store(StorageConfig(data_directory=str(tmp_path), persist=False)),
        InMemoryVersionStore,
    )
    assert isinstance(
        get_version_store(StorageConfig(data_directory=str(tmp_path), persist=True)),
        JsonFileVersionStore,
    )


@pytest.mark.asyncio
async def test_demo_components_sync_end_to_end(tmp_path):
    """A fully wired demo setup syncs the bundled assets and persists cursors."""
    config = AppConfig(
        storage={"data_directory": str(tmp_path), "persist": True},
        sync={"news_batch_size": 2, "base_delay": 0.0, "max_delay": 0.0},
    )
    components = build_sync_components(config)

    report = await components.manager.sync()

    assert report.state is SyncState.SUCCESS
    assert report.attempt == 1
    topics = await components.topics.get_all()
    news = await components.news.get_all()
    versions = await components.version_store.get_change_list_versions()
    assert versions.topic_version == len(topics) > 0
    assert versions.news_resource_version == len(news) > 0
    assert (tmp_path / VERSIONS_FILE).exists()
    assert not components.search_index.search(topics[0].name).is_empty

    # A second wiring over the same directory resumes from the stored cursors
    resumed = build_sync_components(config)
    assert await resumed.version_store.get_change_list_versions() == versions
    report = await resumed.manager.sync()
    assert report.success
    assert len(await resumed.topics.get_all()) == len(topics)


def test_http_source_uses_configured_retry_settings(monkeypatch):
    built = {}

    class RecordingHttpSource:
        def __init__(self, **kwargs):
            built.update(kwargs)

    monkeypatch.setattr("offline_sync.providers.HttpNetworkDataSource", RecordingHttpSource)
    config = RemoteConfig(
        demo=False,
        base_url="https://news.example.com/api",
        timeout_seconds=12.0,
        max_retries=5,
        retry_base_delay=0.5,
        retry_max_delay=8.0,
    )

    get_network_data_source(config)

    assert built["timeout"] == 12.0
    assert built["max_retries"] == 5
    assert built["base_delay"] == 0.5
    assert built["max_delay"] == 8.0
