"""Lazy, concurrent shard loading into the index."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from apiref_search.domain.entities import Shard
from apiref_search.domain.exceptions import (
    ShardFetchFailure,
    ShardLoadException,
    ShardParseFailure,
)
from apiref_search.infrastructure.search.indexes import Index

from .buckets import BucketScheme
from .parser import ShardParser
from .sources import ShardSource

logger = logging.getLogger(__name__)

DEFAULT_LOAD_TIMEOUT = 10.0


class ShardLoader:
    """Makes shards resident in an Index on demand.

    Each bucket is fetched at most once per index: resident and failed
    buckets are skipped, and concurrent requests for a bucket share one task.
    Failures are recorded in the index and never raised.
    """

    def __init__(
        self,
        source: ShardSource,
        scheme: BucketScheme,
        parser: ShardParser,
        index: Index,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
    ) -> None:
        self._source = source
        self._scheme = scheme
        self._parser = parser
        self._index = index
        self._load_timeout = load_timeout
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def index(self) -> Index:
        return self._index

    async def ensure_loaded(self, bucket_keys: Iterable[str]) -> set[str]:
        """Load the given buckets; return the requested ones that are unavailable."""
        requested = set(bucket_keys)
        pending: list[asyncio.Task[None]] = []
        for bucket in sorted(requested):
            if self._index.is_resident(bucket) or self._index.has_failed(bucket):
                continue
            task = self._tasks.get(bucket)
            if task is None:
                task = asyncio.get_running_loop().create_task(self._load(bucket))
                self._tasks[bucket] = task
            pending.append(task)

        if pending:
            # A cancelled caller must not cancel loads other queries share.
            await asyncio.shield(asyncio.gather(*pending))

        return {bucket for bucket in requested if self._index.has_failed(bucket)}

    async def preload(self) -> set[str]:
        """Load every bucket the scheme knows about."""
        return await self.ensure_loaded(self._scheme.buckets)

    async def _load(self, bucket_key: str) -> None:
        try:
            shard = await self._fetch_and_parse(bucket_key)
        except ShardLoadException as exc:
            logger.warning("Shard %s unavailable: %s", bucket_key, exc.reason)
            self._index.mark_failed(exc)
        else:
            self._index.add(shard)
            logger.info("Loaded shard %s: %d entries", bucket_key, len(shard))
        finally:
            self._tasks.pop(bucket_key, None)

    async def _fetch_and_parse(self, bucket_key: str) -> Shard:
        try:
            asset_name = self._scheme.asset_name(bucket_key)
        except KeyError:
            raise ShardFetchFailure(bucket_key, "no asset for bucket") from None

        try:
            content = await asyncio.wait_for(
                self._source.fetch(bucket_key, asset_name), timeout=self._load_timeout
            )
        except asyncio.TimeoutError:
            raise ShardFetchFailure(
                bucket_key, f"timed out after {self._load_timeout:g}s"
            ) from None
        except ShardLoadException:
            raise
        except Exception as exc:
            logger.exception("Unexpected error fetching shard %s", bucket_key)
            raise ShardFetchFailure(bucket_key, f"{type(exc).__name__}: {exc}") from exc

        try:
            return self._parser.parse(bucket_key, content)
        except ShardLoadException:
            raise
        except Exception as exc:
            logger.exception("Unexpected error parsing shard %s", bucket_key)
            raise ShardParseFailure(bucket_key, f"{type(exc).__name__}: {exc}") from exc
