"""Console front end: stdin lines as input events, Markdown on stdout."""

from __future__ import annotations

import asyncio
from typing import IO, Callable

from apiref_search.controller import QuerySessionController
from apiref_search.domain.services import SymbolSearchService
from apiref_search.infrastructure.search.engine import SearchEngine

from .formatter import MarkdownFormatter
from .renderer import MarkdownRenderer


async def run_console(
    engine: SearchEngine,
    stream: IO[str],
    echo: Callable[[str], None],
    debounce_ms: int,
    limit: int | None,
) -> None:
    """Treat every line read from ``stream`` as the new content of the search box.

    Reading happens off the loop, so a slow query is superseded by the next
    line exactly as a keystroke would supersede it. An empty line clears.
    """
    controller = QuerySessionController(
        engine, MarkdownRenderer(echo), debounce_ms=debounce_ms, limit=limit
    )
    try:
        while True:
            line = await asyncio.to_thread(stream.readline)
            if not line:
                break
            controller.submit(line.rstrip("\r\n"))
        await controller.settle()
    finally:
        await controller.close()
        await engine.aclose()


async def run_query(
    service: SymbolSearchService,
    engine: SearchEngine,
    query: str,
    limit: int | None = None,
) -> str:
    """Run one query and return it formatted."""
    formatter = MarkdownFormatter()
    try:
        outcome = await service.search(query, limit)
        return formatter.format_query(query) + formatter.format_search_results(outcome)
    finally:
        await engine.aclose()
