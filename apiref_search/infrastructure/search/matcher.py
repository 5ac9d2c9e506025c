"""Query matching over resident shards."""

from __future__ import annotations

from apiref_search.domain.enums import MatchKind
from apiref_search.domain.keys import leading_segment, normalize_key
from apiref_search.domain.value_objects import Match

from .indexes import Index


class QueryMatcher:
    """Prefix and substring matching of normalized keys.

    A key matches as PREFIX when it starts with the query and the query's
    leading segment falls in the entry's bucket; any other key containing the
    query matches as SUBSTRING. Shards are scanned in full since their entries
    are not assumed sorted.
    """

    def match(self, index: Index, query: str) -> list[Match]:
        normalized = normalize_key(query)
        if not normalized:
            return []
        segment = leading_segment(query)

        results: list[Match] = []
        for shard in index.shards():
            prefix_bucket = bool(shard.bucket_key) and segment.startswith(shard.bucket_key)
            for entry in shard.entries:
                if prefix_bucket and entry.key.startswith(normalized):
                    results.append(Match(entry, shard.bucket_key, MatchKind.PREFIX))
                elif normalized in entry.key:
                    results.append(Match(entry, shard.bucket_key, MatchKind.SUBSTRING))
        return results
