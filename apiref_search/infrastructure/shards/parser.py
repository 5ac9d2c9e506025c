"""Shard parsing: JSON shards and Doxygen ``searchData`` shards.

Both formats fail closed: any structural problem raises ShardParseFailure and
no entries of the offending shard are kept.
"""

from __future__ import annotations

import json
import logging
import posixpath
from typing import Any

from bs4 import BeautifulSoup

from apiref_search.domain.entities import EntryRecord, Shard, TargetRef
from apiref_search.domain.enums import EntryKind
from apiref_search.domain.exceptions import ShardParseFailure
from apiref_search.domain.keys import decode_doxygen_id, normalize_key

from .searchdata_reader import BOM, read_search_data

logger = logging.getLogger(__name__)

FORMAT_AUTO = "auto"
FORMAT_JSON = "json"
FORMAT_SEARCHDATA = "searchdata"
FORMATS = (FORMAT_AUTO, FORMAT_JSON, FORMAT_SEARCHDATA)

# Doxygen page-name prefixes of compound pages
_TYPE_PAGE_PREFIXES = ("class", "struct", "union", "interface", "protocol", "exception")


class _Invalid(Exception):
    """Structural problem inside one shard; converted to ShardParseFailure."""


def html_to_text(markup: str) -> str:
    """Entities and inline markup to plain text."""
    if "&" not in markup and "<" not in markup:
        return markup
    return BeautifulSoup(markup, "html.parser").get_text()


class ShardParser:
    def __init__(self, fmt: str = FORMAT_AUTO) -> None:
        if fmt not in FORMATS:
            raise ValueError(f"Unknown shard format: {fmt}")
        self._format = fmt

    def parse(self, bucket_key: str, content: str) -> Shard:
        content = content.lstrip(BOM)
        fmt = self._format
        if fmt == FORMAT_AUTO:
            fmt = FORMAT_JSON if content.lstrip().startswith("{") else FORMAT_SEARCHDATA

        try:
            if fmt == FORMAT_JSON:
                entries = self._parse_json(bucket_key, content)
            else:
                entries = self._parse_searchdata(content)
        except (_Invalid, ValueError) as exc:
            raise ShardParseFailure(bucket_key, str(exc)) from exc
        except RecursionError as exc:
            raise ShardParseFailure(bucket_key, "nesting too deep") from exc

        logger.debug("Parsed shard %s (%s): %d entries", bucket_key, fmt, len(entries))
        return Shard(bucket_key=bucket_key, entries=tuple(entries))

    # JSON

    def _parse_json(self, bucket_key: str, content: str) -> list[EntryRecord]:
        data = json.loads(content)
        if not isinstance(data, dict):
            raise _Invalid("shard is not a JSON object")

        declared = data.get("bucket", data.get("bucketKey"))
        if declared is not None and declared != bucket_key:
            raise _Invalid(f"shard declares bucket {declared!r}")

        entries = data.get("entries")
        if not isinstance(entries, list):
            raise _Invalid("'entries' must be a list")
        return [self._parse_json_entry(e, i) for i, e in enumerate(entries)]

    def _parse_json_entry(self, data: Any, position: int) -> EntryRecord:
        if not isinstance(data, dict):
            raise _Invalid(f"entry {position} is not an object")

        key = data.get("key")
        display_name = data.get("display_name", data.get("displayName"))
        targets = data.get("targets")
        if not isinstance(key, str) or not isinstance(display_name, str):
            raise _Invalid(f"entry {position} needs string 'key' and 'display_name'")
        if not isinstance(targets, list) or not targets:
            raise _Invalid(f"entry {position} has no targets")

        kind = data.get("kind")
        if kind is not None and not isinstance(kind, str):
            raise _Invalid(f"entry {position} has a non-string 'kind'")

        return EntryRecord(
            key=normalize_key(key),
            display_name=display_name,
            targets=tuple(self._parse_json_target(t, position) for t in targets),
            kind=EntryKind.from_string(kind),
        )

    @staticmethod
    def _parse_json_target(data: Any, position: int) -> TargetRef:
        if not isinstance(data, dict):
            raise _Invalid(f"entry {position} has a non-object target")

        location_id = data.get("location_id", data.get("locationId"))
        anchor = data.get("anchor", "")
        scope_label = data.get("scope_label", data.get("scopeLabel", ""))
        kind_hint = data.get("kind_hint", data.get("kindHint"))

        if not isinstance(location_id, str) or not location_id:
            raise _Invalid(f"entry {position} has a target without 'location_id'")
        if not isinstance(anchor, str) or not isinstance(scope_label, str):
            raise _Invalid(f"entry {position} has a malformed target")
        if kind_hint is not None and not isinstance(kind_hint, str):
            raise _Invalid(f"entry {position} has a non-string 'kind_hint'")

        return TargetRef(
            location_id=location_id,
            anchor=anchor,
            scope_label=scope_label,
            kind_hint=kind_hint,
        )

    # Doxygen searchData

    def _parse_searchdata(self, content: str) -> list[EntryRecord]:
        rows = read_search_data(content)
        entries: list[EntryRecord] = []
        for position, row in enumerate(rows):
            # ['id', ['Name', target, ...], ['Other name', target, ...]]
            if not isinstance(row, list) or len(row) < 2 or not isinstance(row[0], str):
                raise _Invalid(f"row {position} is not ['id', [name, targets...]]")
            key = normalize_key(decode_doxygen_id(row[0]))
            for group in row[1:]:
                entries.append(self._parse_searchdata_group(key, group, position))
        return entries

    def _parse_searchdata_group(self, key: str, group: Any, position: int) -> EntryRecord:
        if not isinstance(group, list) or len(group) < 2 or not isinstance(group[0], str):
            raise _Invalid(f"row {position} has a malformed name group")

        display_name = html_to_text(group[0])
        targets: list[TargetRef] = []
        kinds: list[EntryKind] = []
        for raw in group[1:]:
            target, kind = self._parse_searchdata_target(display_name, raw, position)
            targets.append(target)
            kinds.append(kind)

        return EntryRecord(
            key=key,
            display_name=display_name,
            targets=tuple(targets),
            kind=kinds[0],
        )

    @staticmethod
    def _parse_searchdata_target(
        display_name: str, raw: Any, position: int
    ) -> tuple[TargetRef, EntryKind]:
        # ['../d3/daa/classfoo.html#a9ab0', 1, 'ns::Foo::radius(void) const']
        if not isinstance(raw, list) or len(raw) < 2:
            raise _Invalid(f"row {position} has a malformed target")
        url, has_scope = raw[0], raw[1]
        scope = raw[2] if len(raw) > 2 else ""
        if not isinstance(url, str) or not url or not isinstance(has_scope, int):
            raise _Invalid(f"row {position} has a malformed target")
        if not isinstance(scope, str):
            raise _Invalid(f"row {position} has a non-string scope")

        location_id, _, anchor = url.partition("#")
        scope_label, kind_hint = split_scope(display_name, html_to_text(scope) if has_scope else "")
        kind = infer_kind(location_id, anchor, kind_hint)
        return (
            TargetRef(
                location_id=location_id,
                anchor=anchor,
                scope_label=scope_label,
                kind_hint=kind_hint,
            ),
            kind,
        )


def split_scope(display_name: str, scope: str) -> tuple[str, str | None]:
    """Split ``ns::Cls::name(int a) const`` into ``ns::Cls`` and ``(int a) const``."""
    if not scope:
        return "", None

    name_at = scope.rfind(display_name) if display_name else -1
    paren = scope.find("(", name_at + len(display_name) if name_at >= 0 else 0)
    if paren < 0:
        return scope, None

    qualified = scope[:paren]
    kind_hint = scope[paren:]
    if qualified == display_name:
        qualified = ""
    elif qualified.endswith("::" + display_name):
        qualified = qualified[: -len(display_name) - 2]
    return qualified, kind_hint


def infer_kind(location_id: str, anchor: str, kind_hint: str | None) -> EntryKind:
    """Entry kind from the Doxygen page naming convention."""
    page = posixpath.basename(location_id)
    if anchor:
        return EntryKind.FUNCTION if kind_hint else EntryKind.MEMBER
    if page.startswith(_TYPE_PAGE_PREFIXES):
        return EntryKind.TYPE
    if page.startswith("namespace"):
        return EntryKind.NAMESPACE
    if page.startswith("group__"):
        return EntryKind.GROUP
    if "_8" in page:
        return EntryKind.FILE
    return EntryKind.PAGE
