"""Full-text search index over the local topic and news caches."""

import re
from collections import defaultdict

import structlog
from pydantic import BaseModel, Field

from offline_sync.models.entities import NewsResource, Topic

log = structlog.stdlib.get_logger()

_TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str) -> set[str]:
    """Lowercased word tokens of ``text``."""
    return {token.casefold() for token in _TOKEN_PATTERN.findall(text)}


class SearchResult(BaseModel):
    """Ids matching a search query."""

    topic_ids: set[str] = Field(default_factory=set, description="Matching topic ids")
    news_resource_ids: set[str] = Field(
        default_factory=set, description="Matching news resource ids"
    )

    @property
    def is_empty(self) -> bool:
        return not (self.topic_ids or self.news_resource_ids)


class SearchIndex:
    """Token -> ids inverted index, rebuilt wholesale after a successful sync."""

    def __init__(self) -> None:
        self._topic_index: dict[str, set[str]] = {}
        self._news_index: dict[str, set[str]] = {}

    def populate(self, topics: list[Topic], news_resources: list[NewsResource]) -> None:
        """
        Rebuild the index from the full contents of the local caches.

        Args:
            topics: All cached topics
            news_resources: All cached news resources
        """
        topic_index: dict[str, set[str]] = defaultdict(set)
        for topic in topics:
            text = " ".join([topic.name, topic.short_description, topic.long_description])
            for token in tokenize(text):
                topic_index[token].add(topic.id)

        news_index: dict[str, set[str]] = defaultdict(set)
        for news in news_resources:
            for token in tokenize(f"{news.title} {news.content}"):
                news_index[token].add(news.id)

        # Swap in complete indexes so a search never sees a half-built one
        self._topic_index = dict(topic_index)
        self._news_index = dict(news_index)

        log.info(
            "search_index_populated",
            topics=len(topics),
            news_resources=len(news_resources),
            tokens=len(self._topic_index) + len(self._news_index),
        )

    def search(self, query: str) -> SearchResult:
        """Return ids of entities containing every token of ``query``."""
        tokens = tokenize(query)
        if not tokens:
            return SearchResult()

        return SearchResult(
            topic_ids=self._match(self._topic_index, tokens),
            news_resource_ids=self._match(self._news_index, tokens),
        )

    @staticmethod
    def _match(index: dict[str, set[str]], tokens: set[str]) -> set[str]:
        matches: set[str] | None = None
        for token in tokens:
            ids = index.get(token, set())
            matches = set(ids) if matches is None else matches & ids
            if not matches:
                return set()
        return matches or set()
