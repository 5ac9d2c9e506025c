"""Search engine: load required shards, match, rank."""

from __future__ import annotations

import logging

from apiref_search.domain.enums import MatchKind
from apiref_search.domain.keys import normalize_key
from apiref_search.domain.value_objects import (
    IndexStatus,
    Match,
    RankedGroup,
    SearchOutcome,
    SearchQuery,
)
from apiref_search.infrastructure.shards.buckets import BucketScheme
from apiref_search.infrastructure.shards.loader import DEFAULT_LOAD_TIMEOUT, ShardLoader
from apiref_search.infrastructure.shards.parser import ShardParser
from apiref_search.infrastructure.shards.sources import ShardSource

from .indexes import Index
from .matcher import QueryMatcher
from .ranker import ResultRanker

logger = logging.getLogger(__name__)


class SearchEngine:
    def __init__(
        self,
        source: ShardSource,
        scheme: BucketScheme,
        parser: ShardParser | None = None,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
        preload: bool = False,
    ) -> None:
        self._source = source
        self._scheme = scheme
        self._parser = parser or ShardParser()
        self._load_timeout = load_timeout
        self._preload = preload
        self._matcher = QueryMatcher()
        self._ranker = ResultRanker()
        self._index = Index()
        self._loader = self._new_loader(self._index)
        self._preloaded = False

    def _new_loader(self, index: Index) -> ShardLoader:
        return ShardLoader(
            self._source,
            self._scheme,
            self._parser,
            index,
            load_timeout=self._load_timeout,
        )

    @property
    def index(self) -> Index:
        return self._index

    def required_buckets(self, normalized_query: str) -> set[str]:
        bucket = self._scheme.bucket_for(normalized_query)
        return {bucket} if bucket is not None else set()

    async def search(self, query: SearchQuery) -> SearchOutcome:
        normalized = normalize_key(query.query)
        if not normalized:
            return SearchOutcome(query=query.query)

        await self._ensure_preloaded()
        loader = self._loader
        failed = await loader.ensure_loaded(self.required_buckets(normalized))

        matches = self._matcher.match(loader.index, query.query)
        groups = self._ranker.rank(matches, query.query, limit=query.limit)
        if failed:
            logger.info(
                "Partial result for %r: unavailable buckets %s",
                query.query,
                ", ".join(sorted(failed)),
            )
        return SearchOutcome(
            query=query.query,
            groups=tuple(groups),
            partial=bool(failed),
            failed_buckets=frozenset(failed),
        )

    async def lookup(self, name: str) -> list[RankedGroup]:
        """Groups whose key equals the normalized name."""
        normalized = normalize_key(name)
        if not normalized:
            return []

        await self._ensure_preloaded()
        loader = self._loader
        await loader.ensure_loaded(self.required_buckets(normalized))
        matches = [
            Match(entry, bucket, MatchKind.PREFIX)
            for bucket, entry in loader.index.lookup(normalized)
        ]
        return self._ranker.rank(matches, name)

    async def preload(self) -> set[str]:
        failed = await self._loader.preload()
        self._preloaded = True
        return failed

    async def _ensure_preloaded(self) -> None:
        if self._preload and not self._preloaded:
            await self.preload()

    def status(self) -> IndexStatus:
        return IndexStatus(
            loaded={shard.bucket_key: len(shard) for shard in self._index.shards()},
            failed={bucket: exc.reason for bucket, exc in self._index.failures.items()},
            known_buckets=self._scheme.buckets,
        )

    def reset(self) -> None:
        """Drop every loaded shard and failure; the next query reloads from the source."""
        logger.info(
            "Resetting index (%d shards, %d entries)",
            len(self._index.loaded_buckets),
            self._index.size,
        )
        self._index = Index()
        self._loader = self._new_loader(self._index)
        self._preloaded = False

    async def aclose(self) -> None:
        await self._source.aclose()
