"""Offline data source backed by bundled JSON assets."""

import asyncio
import json
from pathlib import Path
from typing import Callable, TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from offline_sync.models.change_list import NetworkChangeList
from offline_sync.models.entities import NewsResource, Topic
from offline_sync.network.data_source import NetworkDataSource, NetworkError

log = structlog.stdlib.get_logger()

TOPICS_ASSET = "topics.json"
NEWS_ASSET = "news.json"
DEFAULT_ASSETS_DIR = Path(__file__).parent / "assets"

ModelT = TypeVar("ModelT", bound=BaseModel)


def map_to_change_list(
    items: list[ModelT], id_getter: Callable[[ModelT], str]
) -> list[NetworkChangeList]:
    """One non-delete change per item; versions follow list position, starting at 1."""
    return [
        NetworkChangeList(id=id_getter(item), change_list_version=index + 1, is_delete=False)
        for index, item in enumerate(items)
    ]


class DemoNetworkDataSource(NetworkDataSource):
    """Serves topics and news resources from JSON files on disk.

    Useful for running the app and its sync without a backend. Change lists
    are derived from asset order, so re-syncing against unchanged assets is
    a no-op.
    """

    def __init__(self, assets_dir: str | Path | None = None):
        """
        Initialize demo data source.

        Args:
            assets_dir: Directory holding topics.json and news.json.
                Defaults to the assets shipped with the package.
        """
        self._assets_dir = Path(assets_dir) if assets_dir else DEFAULT_ASSETS_DIR
        log.info("demo_network_data_source_initialized", assets_dir=str(self._assets_dir))

    async def get_topics(self, ids: list[str] | None = None) -> list[Topic]:
        topics = await self._load(TOPICS_ASSET, TypeAdapter(list[Topic]))
        return self._filter_ids(topics, ids)

    async def get_news_resources(self, ids: list[str] | None = None) -> list[NewsResource]:
        news = await self._load(NEWS_ASSET, TypeAdapter(list[NewsResource]))
        return self._filter_ids(news, ids)

    async def get_topic_change_list(self, after: int | None = None) -> list[NetworkChangeList]:
        changes = map_to_change_list(await self.get_topics(), lambda topic: topic.id)
        return self._after(changes, after)

    async def get_news_resource_change_list(
        self, after: int | None = None
    ) -> list[NetworkChangeList]:
        changes = map_to_change_list(await self.get_news_resources(), lambda news: news.id)
        return self._after(changes, after)

    async def _load(self, asset: str, adapter: TypeAdapter) -> list:
        path = self._assets_dir / asset
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
            return adapter.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            log.error("failed_to_load_demo_asset", asset=str(path), error=str(e))
            raise NetworkError(f"Failed to load demo asset {path}: {e}") from e

    @staticmethod
    def _filter_ids(items: list[ModelT], ids: list[str] | None) -> list[ModelT]:
        if ids is None:
            return items
        wanted = set(ids)
        return [item for item in items if item.id in wanted]

    @staticmethod
    def _after(changes: list[NetworkChangeList], after: int | None) -> list[NetworkChangeList]:
        if after is None:
            return changes
        return [change for change in changes if change.change_list_version > after]
