"""Domain entities of the search index: targets, entries and shards."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import EntryKind


@dataclass(frozen=True)
class TargetRef:
    """One concrete definition or overload a search entry points at."""

    location_id: str
    anchor: str = ""
    scope_label: str = ""
    kind_hint: str | None = None

    @property
    def href(self) -> str:
        """Location and anchor joined for display; empty anchor means top of page."""
        if self.anchor:
            return f"{self.location_id}#{self.anchor}"
        return self.location_id


@dataclass(frozen=True)
class EntryRecord:
    key: str
    display_name: str
    targets: tuple[TargetRef, ...]
    kind: EntryKind = EntryKind.OTHER

    @property
    def identity(self) -> tuple[str, str]:
        return (self.key, self.display_name)


@dataclass(frozen=True)
class Shard:
    """Entries of one bucket, in the order the generator emitted them."""

    bucket_key: str
    entries: tuple[EntryRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.entries)
