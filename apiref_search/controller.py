"""Keystroke-driven query session on top of the search engine."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from apiref_search.domain.enums import SessionState
from apiref_search.domain.exceptions import QueryCancelled
from apiref_search.domain.session import (
    CancelMatch,
    ClearRenderer,
    InputChanged,
    MatchCompleted,
    Present,
    SessionAction,
    SessionEvent,
    SessionSnapshot,
    StartMatch,
    transition,
)
from apiref_search.domain.value_objects import PresentationRow, SearchQuery

if TYPE_CHECKING:
    from apiref_search.infrastructure.search.engine import SearchEngine
    from apiref_search.presentation.renderer import Renderer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 150


class QuerySessionController:
    """Runs the session state machine on the current event loop.

    ``submit`` never blocks: it schedules the match as a task. A newer input
    cancels the running task, and a result that arrives for an older
    generation is dropped, so only the latest query is ever presented.
    """

    def __init__(
        self,
        engine: SearchEngine,
        renderer: Renderer,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        limit: int | None = 10,
    ) -> None:
        self._engine = engine
        self._renderer = renderer
        self._debounce = max(debounce_ms, 0) / 1000
        self._limit = limit
        self._snapshot = SessionSnapshot()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SessionState:
        return self._snapshot.state

    def submit(self, text: str) -> None:
        """Feed one input event. Must be called from inside the running loop."""
        self._dispatch(InputChanged(text))

    async def settle(self) -> None:
        """Wait until no match is in flight."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})

    def _dispatch(self, event: SessionEvent) -> None:
        self._snapshot, actions = transition(self._snapshot, event)
        for action in actions:
            self._apply(action)

    def _apply(self, action: SessionAction) -> None:
        if isinstance(action, CancelMatch):
            if self._task is not None and not self._task.done():
                logger.debug("Cancelling superseded query generation %d", action.generation)
                self._task.cancel()
        elif isinstance(action, StartMatch):
            self._task = asyncio.get_running_loop().create_task(
                self._run(action.generation, action.text)
            )
        elif isinstance(action, Present):
            rows = [PresentationRow.from_group(g) for g in action.outcome.groups]
            self._renderer.present(rows, action.outcome.partial)
        elif isinstance(action, ClearRenderer):
            self._renderer.clear()

    async def _run(self, generation: int, text: str) -> None:
        try:
            if self._debounce:
                await asyncio.sleep(self._debounce)
            self._ensure_current(generation)
            outcome = await self._engine.search(SearchQuery(query=text, limit=self._limit))
            self._ensure_current(generation)
        except QueryCancelled as exc:
            logger.debug("Dropping result: %s", exc)
            return
        self._dispatch(MatchCompleted(generation, outcome))

    def _ensure_current(self, generation: int) -> None:
        if generation != self._snapshot.generation:
            raise QueryCancelled(generation)
