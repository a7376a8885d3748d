"""Remote data sources for entities and change lists."""

from offline_sync.network.data_source import (
    NetworkDataSource,
    NetworkError,
    TransientNetworkError,
)
from offline_sync.network.demo import DemoNetworkDataSource
from offline_sync.network.http_client import HttpNetworkDataSource

__all__ = [
    "DemoNetworkDataSource",
    "HttpNetworkDataSource",
    "NetworkDataSource",
    "NetworkError",
    "TransientNetworkError",
]
