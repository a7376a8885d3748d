"""Interface to the remote news backend."""

from abc import ABC, abstractmethod

from offline_sync.models.change_list import NetworkChangeList
from offline_sync.models.entities import NewsResource, Topic


class NetworkError(Exception):
    """Raised when the remote backend cannot be reached or answers with an error."""


class TransientNetworkError(NetworkError):
    """A failure worth retrying: transport errors, timeouts, throttling and 5xx responses."""


class NetworkDataSource(ABC):
    """Remote source of entities and their change lists.

    Change lists must be sorted ascending by ``change_list_version`` and
    contain only changes strictly after ``after``.
    """

    @abstractmethod
    async def get_topics(self, ids: list[str] | None = None) -> list[Topic]:
        """Fetch topics by id, or all topics when ``ids`` is None."""

    @abstractmethod
    async def get_news_resources(self, ids: list[str] | None = None) -> list[NewsResource]:
        """Fetch news resources by id, or all of them when ``ids`` is None."""

    @abstractmethod
    async def get_topic_change_list(self, after: int | None = None) -> list[NetworkChangeList]:
        """Topic changes with a version greater than ``after``."""

    @abstractmethod
    async def get_news_resource_change_list(
        self, after: int | None = None
    ) -> list[NetworkChangeList]:
        """News resource changes with a version greater than ``after``."""

    async def aclose(self) -> None:
        """Release any underlying connections."""
