"""Domain service: SymbolSearchService."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import EntryNotFoundException, InvalidSearchQueryException
from .value_objects import IndexStatus, RankedGroup, SearchOutcome, SearchQuery

if TYPE_CHECKING:
    from apiref_search.infrastructure.search.engine import SearchEngine

logger = logging.getLogger(__name__)

MIN_LIMIT = 1
MAX_LIMIT = 50
DEFAULT_LIMIT = 10


class SymbolSearchService:
    def __init__(
        self,
        engine: SearchEngine,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> None:
        self._engine = engine
        self._max_limit = max(MIN_LIMIT, max_limit)
        self._default_limit = max(MIN_LIMIT, min(default_limit, self._max_limit))

    def effective_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._default_limit
        return max(MIN_LIMIT, min(limit, self._max_limit))

    async def search(self, query: str, limit: int | None = None) -> SearchOutcome:
        if not query or not query.strip():
            raise InvalidSearchQueryException("Search query cannot be empty")

        search_query = SearchQuery(query=query.strip(), limit=self.effective_limit(limit))
        return await self._engine.search(search_query)

    async def lookup(self, name: str) -> list[RankedGroup]:
        if not name or not name.strip():
            raise InvalidSearchQueryException("Name cannot be empty")

        groups = await self._engine.lookup(name.strip())
        if not groups:
            raise EntryNotFoundException(f"Symbol '{name.strip()}' not found")
        return groups

    def status(self) -> IndexStatus:
        return self._engine.status()
