"""Renderers receiving presentations from the query session controller."""

from __future__ import annotations

from typing import Callable, Protocol

from apiref_search.domain.value_objects import PresentationRow

from .formatter import MarkdownFormatter


class Renderer(Protocol):
    def present(self, rows: list[PresentationRow], partial: bool) -> None: ...
    def clear(self) -> None: ...


class MarkdownRenderer:
    """Writes each presentation as Markdown through ``echo``."""

    def __init__(
        self,
        echo: Callable[[str], None],
        formatter: MarkdownFormatter | None = None,
    ) -> None:
        self._echo = echo
        self._formatter = formatter or MarkdownFormatter()
        self.last_output: str | None = None

    def present(self, rows: list[PresentationRow], partial: bool) -> None:
        self.last_output = self._formatter.format_rows(rows, partial)
        self._echo(self.last_output)

    def clear(self) -> None:
        self.last_output = None
