"""Search key normalization shared by shard parsing and query matching."""

from __future__ import annotations

import re

# Punctuation that only encodes scope/template syntax and never takes part in matching.
_STRIPPED_RE = re.compile(r"[\s:<>,&*()\[\]]+")

# Boundaries that end the leading segment of a raw query (``ns::name``, ``obj.member``, ...).
_SEPARATOR_RE = re.compile(r"::|[.\s<(]")

_DOXYGEN_ESCAPE_RE = re.compile(r"_([0-9a-fA-F]{2})")


def normalize_key(text: str) -> str:
    """Case-fold and drop encoding punctuation.

    >>> normalize_key("range_type< float >")
    'range_typefloat'
    """
    return _STRIPPED_RE.sub("", text.casefold())


def leading_segment(text: str) -> str:
    """Normalized part of a raw query up to its first separator.

    Separators before the first name are skipped: ``(radius`` gives ``radius``.
    """
    for part in _SEPARATOR_RE.split(text):
        segment = normalize_key(part)
        if segment:
            return segment
    return ""


def decode_doxygen_id(encoded: str) -> str:
    """Undo Doxygen's ``_XX`` hex escaping of non-alphanumeric characters."""
    return _DOXYGEN_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), encoded)
