"""Entry kind, match kind and session state enumerations."""

from __future__ import annotations

from enum import Enum


class EntryKind(Enum):
    TYPE = "type"
    FUNCTION = "function"
    MEMBER = "member"
    NAMESPACE = "namespace"
    FILE = "file"
    GROUP = "group"
    PAGE = "page"
    OTHER = "other"

    def get_display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_string(cls, kind_str: str | None) -> EntryKind:
        if not kind_str:
            return cls.OTHER
        return _STRING_MAPPING.get(kind_str.lower(), cls.OTHER)


class MatchKind(Enum):
    """How a key matched the query. Lower rank sorts first."""

    PREFIX = 0
    SUBSTRING = 1

    @property
    def rank(self) -> int:
        return self.value


class SessionState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    PRESENTING = "presenting"


_DISPLAY_NAMES = {
    EntryKind.TYPE: "Type",
    EntryKind.FUNCTION: "Function",
    EntryKind.MEMBER: "Member",
    EntryKind.NAMESPACE: "Namespace",
    EntryKind.FILE: "File",
    EntryKind.GROUP: "Group",
    EntryKind.PAGE: "Page",
    EntryKind.OTHER: "Symbol",
}

_STRING_MAPPING: dict[str, EntryKind] = {
    "type": EntryKind.TYPE,
    "class": EntryKind.TYPE,
    "struct": EntryKind.TYPE,
    "union": EntryKind.TYPE,
    "function": EntryKind.FUNCTION,
    "method": EntryKind.FUNCTION,
    "member": EntryKind.MEMBER,
    "variable": EntryKind.MEMBER,
    "enumvalue": EntryKind.MEMBER,
    "namespace": EntryKind.NAMESPACE,
    "file": EntryKind.FILE,
    "group": EntryKind.GROUP,
    "module": EntryKind.GROUP,
    "page": EntryKind.PAGE,
    "other": EntryKind.OTHER,
}
