"""In-memory index over loaded shards."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from apiref_search.domain.entities import EntryRecord, Shard
from apiref_search.domain.exceptions import ShardLoadException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class HashIndex(Generic[T]):
    """Exact lookup keeping every item that shares a key."""

    def __init__(self) -> None:
        self._data: dict[str, list[T]] = {}

    def load(self, items: list[T] | tuple[T, ...], key_fn: Callable[[T], str]) -> None:
        data: dict[str, list[T]] = {}
        for item in items:
            data.setdefault(key_fn(item), []).append(item)
        self._data = data

    def get(self, key: str) -> list[T]:
        return list(self._data.get(key, ()))


class Index:
    """Append-only mapping of bucket key to shard, plus failed buckets.

    Shards are never replaced or edited once added; a corpus update means
    building a new Index.
    """

    def __init__(self) -> None:
        self._shards: dict[str, Shard] = {}
        self._by_key: dict[str, HashIndex[EntryRecord]] = {}
        self._failures: dict[str, ShardLoadException] = {}

    def add(self, shard: Shard) -> None:
        bucket = shard.bucket_key
        if bucket in self._shards:
            raise ValueError(f"Shard '{bucket}' is already loaded")
        by_key = HashIndex[EntryRecord]()
        by_key.load(shard.entries, lambda entry: entry.key)
        self._by_key[bucket] = by_key
        self._shards[bucket] = shard

    def mark_failed(self, error: ShardLoadException) -> None:
        if error.bucket_key in self._shards:
            logger.debug("Ignoring failure for resident shard %s", error.bucket_key)
            return
        self._failures.setdefault(error.bucket_key, error)

    def is_resident(self, bucket_key: str) -> bool:
        return bucket_key in self._shards

    def has_failed(self, bucket_key: str) -> bool:
        return bucket_key in self._failures

    def shards(self) -> list[Shard]:
        """Snapshot of resident shards ordered by bucket key."""
        return [self._shards[bucket] for bucket in sorted(self._shards)]

    def lookup(self, key: str) -> list[tuple[str, EntryRecord]]:
        """Every entry with exactly this normalized key, in bucket then shard order."""
        results: list[tuple[str, EntryRecord]] = []
        for bucket in sorted(self._by_key):
            results.extend((bucket, entry) for entry in self._by_key[bucket].get(key))
        return results

    @property
    def loaded_buckets(self) -> tuple[str, ...]:
        return tuple(sorted(self._shards))

    @property
    def failures(self) -> dict[str, ShardLoadException]:
        return dict(self._failures)

    @property
    def size(self) -> int:
        return sum(len(shard) for shard in self._shards.values())
