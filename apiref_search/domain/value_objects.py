"""Search query, match and result value objects."""

from __future__ import annotations

from dataclasses import dataclass, field

from .entities import EntryRecord, TargetRef
from .enums import EntryKind, MatchKind


@dataclass(frozen=True)
class SearchQuery:
    query: str
    limit: int | None = 10


@dataclass(frozen=True)
class Match:
    entry: EntryRecord
    bucket_key: str
    kind: MatchKind


@dataclass(frozen=True)
class RankedGroup:
    """Entries sharing ``(key, display_name)`` with their merged targets."""

    entry: EntryRecord
    targets: tuple[TargetRef, ...]
    match_kind: MatchKind

    @property
    def key(self) -> str:
        return self.entry.key

    @property
    def display_name(self) -> str:
        return self.entry.display_name

    @property
    def kind(self) -> EntryKind:
        return self.entry.kind


@dataclass(frozen=True)
class SearchOutcome:
    query: str
    groups: tuple[RankedGroup, ...] = ()
    partial: bool = False
    failed_buckets: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class PresentationRow:
    """One row handed to the renderer: ``(display_name, scope_label, targets)``."""

    display_name: str
    scope_label: str
    targets: tuple[TargetRef, ...]
    kind: EntryKind = EntryKind.OTHER

    @classmethod
    def from_group(cls, group: RankedGroup) -> PresentationRow:
        # Shared scope only when every target agrees; otherwise each target carries its own.
        scopes = {t.scope_label for t in group.targets}
        scope = scopes.pop() if len(scopes) == 1 else ""
        return cls(
            display_name=group.display_name,
            scope_label=scope,
            targets=group.targets,
            kind=group.kind,
        )


@dataclass(frozen=True)
class IndexStatus:
    loaded: dict[str, int] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)
    known_buckets: tuple[str, ...] = ()

    @property
    def entry_count(self) -> int:
        return sum(self.loaded.values())
