"""Data models for the offline sync service."""

from offline_sync.models.change_list import ChangeListVersions, NetworkChangeList
from offline_sync.models.config import (
    AppConfig,
    LoggingConfig,
    RemoteConfig,
    StorageConfig,
    SyncConfig,
)
from offline_sync.models.entities import NewsResource, Topic

__all__ = [
    "ChangeListVersions",
    "NetworkChangeList",
    "Topic",
    "NewsResource",
    "AppConfig",
    "LoggingConfig",
    "RemoteConfig",
    "StorageConfig",
    "SyncConfig",
]
