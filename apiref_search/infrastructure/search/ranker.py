"""Grouping of matches by identity and ordering for display."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from apiref_search.domain.entities import EntryRecord, TargetRef
from apiref_search.domain.enums import MatchKind
from apiref_search.domain.value_objects import Match, RankedGroup


@dataclass
class _GroupBuilder:
    entry: EntryRecord
    match_kind: MatchKind
    targets: list[TargetRef] = field(default_factory=list)

    def add(self, match: Match) -> None:
        self.targets.extend(match.entry.targets)
        if match.kind.rank < self.match_kind.rank:
            self.match_kind = match.kind

    def build(self) -> RankedGroup:
        return RankedGroup(
            entry=self.entry,
            targets=tuple(self.targets),
            match_kind=self.match_kind,
        )


class ResultRanker:
    def group(self, matches: Iterable[Match]) -> list[RankedGroup]:
        """Merge matches sharing ``(key, display_name)``.

        Targets are concatenated shard by shard in bucket order, each shard
        contributing in its own entry order.
        """
        builders: dict[tuple[str, str], _GroupBuilder] = {}
        for match in sorted(matches, key=lambda m: m.bucket_key):
            identity = match.entry.identity
            builder = builders.get(identity)
            if builder is None:
                builder = _GroupBuilder(entry=match.entry, match_kind=match.kind)
                builders[identity] = builder
            builder.add(match)
        return [builder.build() for builder in builders.values()]

    def rank(
        self,
        matches: Iterable[Match],
        query: str,
        limit: int | None = None,
    ) -> list[RankedGroup]:
        """Group, then order: prefix first, shorter key, exact display name, name, key."""
        exact = query.strip()
        groups = self.group(matches)
        groups.sort(key=lambda g: _sort_key(g, exact))
        if limit is not None:
            groups = groups[: max(limit, 0)]
        return groups


def _sort_key(group: RankedGroup, exact: str) -> tuple[int, int, int, str, str]:
    # (key, display_name) is unique per group, so the last two fields make the order total.
    return (
        group.match_kind.rank,
        len(group.key),
        0 if group.display_name == exact else 1,
        group.display_name,
        group.key,
    )
