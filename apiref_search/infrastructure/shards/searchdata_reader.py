"""Reader for Doxygen ``searchData`` JavaScript array literals."""

from __future__ import annotations

from typing import Any

BOM = "\ufeff"

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

# Token kinds
PUNCT = "punct"
STRING = "string"
NUMBER = "number"


def extract_array(content: str) -> str:
    """Return the ``[...]`` literal assigned in ``var searchData=[...];``."""
    content = content.lstrip(BOM)
    start = content.find("[")
    end = content.rfind("]")
    if start < 0 or end < start:
        raise ValueError("No array literal found")
    return content[start : end + 1]


def tokenize(content: str) -> list[tuple[str, Any]]:
    """Tokenize an array literal made of brackets, commas, quoted strings and numbers."""
    tokens: list[tuple[str, Any]] = []
    i = 0
    length = len(content)

    while i < length:
        char = content[i]

        if char.isspace():
            i += 1
        elif char in "[],":
            tokens.append((PUNCT, char))
            i += 1
        elif char in "'\"":
            value, i = _read_string(content, i)
            tokens.append((STRING, value))
        elif char == "-" or char.isdigit():
            start = i
            i += 1
            while i < length and (content[i].isdigit() or content[i] == "."):
                i += 1
            text = content[start:i]
            try:
                tokens.append((NUMBER, float(text) if "." in text else int(text)))
            except ValueError:
                raise ValueError(f"Bad number {text!r} at offset {start}") from None
        else:
            raise ValueError(f"Unexpected character {char!r} at offset {i}")

    return tokens


def _read_string(content: str, start: int) -> tuple[str, int]:
    quote = content[start]
    current: list[str] = []
    i = start + 1
    length = len(content)

    while i < length:
        char = content[i]
        if char == quote:
            return "".join(current), i + 1
        if char == "\\":
            if i + 1 >= length:
                break
            nxt = content[i + 1]
            if nxt == "u":
                current.append(chr(int(content[i + 2 : i + 6], 16)))
                i += 6
                continue
            if nxt == "x":
                current.append(chr(int(content[i + 2 : i + 4], 16)))
                i += 4
                continue
            current.append(_SIMPLE_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        current.append(char)
        i += 1

    raise ValueError(f"Unterminated string starting at offset {start}")


def parse_array(tokens: list[tuple[str, Any]]) -> list[Any]:
    """Build nested lists from tokens; the whole input must be one array."""
    value, pos = _parse_value(tokens, 0)
    if pos != len(tokens):
        raise ValueError("Trailing tokens after array literal")
    if not isinstance(value, list):
        raise ValueError("Top-level value is not an array")
    return value


def _parse_value(tokens: list[tuple[str, Any]], pos: int) -> tuple[Any, int]:
    if pos >= len(tokens):
        raise ValueError("Unexpected end of input")
    kind, value = tokens[pos]
    if kind != PUNCT:
        return value, pos + 1
    if value != "[":
        raise ValueError(f"Unexpected {value!r}")

    items: list[Any] = []
    pos += 1
    while True:
        if pos >= len(tokens):
            raise ValueError("Unterminated array")
        if tokens[pos] == (PUNCT, "]"):
            return items, pos + 1
        item, pos = _parse_value(tokens, pos)
        items.append(item)
        if pos < len(tokens) and tokens[pos] == (PUNCT, ","):
            pos += 1
        elif pos < len(tokens) and tokens[pos] != (PUNCT, "]"):
            raise ValueError("Expected ',' or ']'")


def read_search_data(content: str) -> list[Any]:
    return parse_array(tokenize(extract_array(content)))
