"""HTTP implementation of the network data source."""

from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from offline_sync.models.change_list import NetworkChangeList
from offline_sync.models.entities import NewsResource, Topic
from offline_sync.network.data_source import (
    NetworkDataSource,
    NetworkError,
    TransientNetworkError,
)
from offline_sync.utils.retry import exponential_backoff_retry

log = structlog.stdlib.get_logger()

_TOPICS = TypeAdapter(list[Topic])
_NEWS_RESOURCES = TypeAdapter(list[NewsResource])
_CHANGE_LISTS = TypeAdapter(list[NetworkChangeList])

# Client errors that may succeed when repeated later
_RETRYABLE_CLIENT_STATUSES = {408, 429}


class HttpNetworkDataSource(NetworkDataSource):
    """
    Talks to the news backend over HTTP.

    Entity endpoints wrap their payload in ``{"data": [...]}``; change list
    endpoints return a bare JSON list.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize HTTP data source.

        Args:
            base_url: Backend base URL
            timeout: HTTP request timeout in seconds
            max_retries: Retries per request on network errors
            base_delay: Initial retry delay in seconds
            max_delay: Maximum retry delay in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._base_url = base_url.rstrip("/") + "/"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._get = exponential_backoff_retry(
            max_retries=max_retries,
            base_delay=base_delay,
            max_delay=max_delay,
            exceptions=(TransientNetworkError,),
        )(self._get_once)

        log.info("http_network_data_source_initialized", base_url=self._base_url)

    async def get_topics(self, ids: list[str] | None = None) -> list[Topic]:
        payload = await self._get("topics", params=self._id_params(ids))
        return self._parse(_TOPICS, self._unwrap(payload), "topics")

    async def get_news_resources(self, ids: list[str] | None = None) -> list[NewsResource]:
        payload = await self._get("newsresources", params=self._id_params(ids))
        return self._parse(_NEWS_RESOURCES, self._unwrap(payload), "newsresources")

    async def get_topic_change_list(self, after: int | None = None) -> list[NetworkChangeList]:
        payload = await self._get("changelists/topics", params=self._after_params(after))
        return self._parse(_CHANGE_LISTS, payload, "changelists/topics")

    async def get_news_resource_change_list(
        self, after: int | None = None
    ) -> list[NetworkChangeList]:
        payload = await self._get("changelists/newsresources", params=self._after_params(after))
        return self._parse(_CHANGE_LISTS, payload, "changelists/newsresources")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_once(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """
        Perform one GET request and decode its JSON body.

        Raises:
            TransientNetworkError: On transport failures, 5xx, 408 and 429
                responses, or invalid JSON. These are retried.
            NetworkError: On other 4xx responses, which are not retried
        """
        log.debug("http_request", endpoint=endpoint, params=params)

        try:
            response = await self._client.get(endpoint, params=params)
        except httpx.RequestError as e:
            raise TransientNetworkError(f"Network error calling {endpoint}: {e}") from e

        status = response.status_code
        if status >= 400:
            log.error("http_request_failed", endpoint=endpoint, status_code=status)
            message = f"Backend error {status} calling {endpoint}"
            if status >= 500 or status in _RETRYABLE_CLIENT_STATUSES:
                raise TransientNetworkError(message)
            raise NetworkError(message)

        try:
            return response.json()
        except ValueError as e:
            raise TransientNetworkError(f"Invalid JSON from {endpoint}: {e}") from e

    @staticmethod
    def _id_params(ids: list[str] | None) -> dict[str, Any] | None:
        return None if ids is None else {"id": ids}

    @staticmethod
    def _after_params(after: int | None) -> dict[str, Any] | None:
        return None if after is None else {"after": after}

    @staticmethod
    def _unwrap(payload: Any) -> Any:
        if not isinstance(payload, dict) or "data" not in payload:
            raise NetworkError("Response is missing the 'data' envelope")
        return payload["data"]

    @staticmethod
    def _parse(adapter: TypeAdapter, payload: Any, endpoint: str) -> list:
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            log.error("invalid_response_payload", endpoint=endpoint, error=str(e))
            raise NetworkError(f"Invalid payload from {endpoint}: {e}") from e
