"""Bucket schemes: the generator's rule mapping queries to shard assets."""

from __future__ import annotations

import json
import logging
import re
from typing import Protocol

logger = logging.getLogger(__name__)

_SECTION_CONTENT_RE = re.compile(
    r"indexSectionsWithContent\s*=\s*\{(?P<body>.*?)\}", re.DOTALL
)
_SECTION_NAMES_RE = re.compile(r"indexSectionNames\s*=\s*\{(?P<body>.*?)\}", re.DOTALL)
_SECTION_ITEM_RE = re.compile(r"(\d+)\s*:\s*\"((?:[^\"\\]|\\.)*)\"")


class BucketScheme(Protocol):
    def bucket_for(self, normalized_query: str) -> str | None: ...
    def asset_name(self, bucket_key: str) -> str: ...

    @property
    def buckets(self) -> tuple[str, ...]: ...


class PatternBucketScheme:
    """Leading character as bucket, asset named from a format pattern.

    The bucket set is unknown up front, so every leading character is tried.
    """

    def __init__(self, pattern: str = "{bucket}.json") -> None:
        if "{bucket}" not in pattern:
            raise ValueError(f"Asset pattern must contain '{{bucket}}': {pattern}")
        self._pattern = pattern

    def bucket_for(self, normalized_query: str) -> str | None:
        return normalized_query[0] if normalized_query else None

    def asset_name(self, bucket_key: str) -> str:
        return self._pattern.format(bucket=bucket_key)

    @property
    def buckets(self) -> tuple[str, ...]:
        return ()


class ManifestBucketScheme:
    """Bucket set and asset names published by the generator."""

    def __init__(self, assets: dict[str, str]) -> None:
        self._assets = dict(assets)

    @classmethod
    def from_json(cls, content: str) -> ManifestBucketScheme:
        """Parse ``{"buckets": {"r": "r.json", ...}}``."""
        data = json.loads(content)
        buckets = data.get("buckets") if isinstance(data, dict) else None
        if not isinstance(buckets, dict) or not all(
            isinstance(k, str) and k and isinstance(v, str) and v for k, v in buckets.items()
        ):
            raise ValueError("Manifest must map bucket keys to asset names under 'buckets'")
        return cls(buckets)

    @classmethod
    def from_searchdata(cls, content: str, section: str = "all") -> ManifestBucketScheme:
        """Parse Doxygen's ``searchdata.js``.

        ``indexSectionsWithContent`` lists the leading characters present in
        each section; the character at position *i* of section ``all`` is
        served by ``all_<i in hex>.js``.
        """
        content_match = _SECTION_CONTENT_RE.search(content)
        if content_match is None:
            raise ValueError("searchdata.js has no indexSectionsWithContent table")
        contents = {
            int(num): json.loads(f'"{chars}"')
            for num, chars in _SECTION_ITEM_RE.findall(content_match.group("body"))
        }

        names: dict[int, str] = {}
        names_match = _SECTION_NAMES_RE.search(content)
        if names_match is not None:
            names = {int(num): name for num, name in _SECTION_ITEM_RE.findall(names_match.group("body"))}
        elif section == "all":
            names = {0: "all"}

        section_id = next((num for num, name in names.items() if name == section), None)
        if section_id is None or section_id not in contents:
            raise ValueError(f"searchdata.js has no section '{section}'")

        assets = {
            char: f"{section}_{position:x}.js"
            for position, char in enumerate(contents[section_id])
        }
        logger.debug("Section %s: %d buckets", section, len(assets))
        return cls(assets)

    def bucket_for(self, normalized_query: str) -> str | None:
        if not normalized_query:
            return None
        bucket = normalized_query[0]
        return bucket if bucket in self._assets else None

    def asset_name(self, bucket_key: str) -> str:
        try:
            return self._assets[bucket_key]
        except KeyError:
            raise KeyError(f"Unknown bucket: {bucket_key}") from None

    @property
    def buckets(self) -> tuple[str, ...]:
        return tuple(sorted(self._assets))
