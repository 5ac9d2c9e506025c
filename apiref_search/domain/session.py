"""Query session state machine.

The controller's state is an explicit SessionSnapshot; ``transition`` maps a
snapshot and an event to the next snapshot plus the actions the driver must
perform. Nothing here touches I/O, so it can be tested without an event loop.

    IDLE --input--> PENDING --completed--> PRESENTING
      ^               |  ^                    |
      +---- clear ----+  +------ input -------+
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from .enums import SessionState
from .value_objects import SearchOutcome


@dataclass(frozen=True)
class SessionSnapshot:
    state: SessionState = SessionState.IDLE
    text: str = ""
    generation: int = 0


@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class MatchCompleted:
    generation: int
    outcome: SearchOutcome


@dataclass(frozen=True)
class StartMatch:
    generation: int
    text: str


@dataclass(frozen=True)
class CancelMatch:
    generation: int


@dataclass(frozen=True)
class Present:
    generation: int
    outcome: SearchOutcome


@dataclass(frozen=True)
class ClearRenderer:
    pass


SessionEvent = Union[InputChanged, MatchCompleted]
SessionAction = Union[StartMatch, CancelMatch, Present, ClearRenderer]


def transition(
    snapshot: SessionSnapshot, event: SessionEvent
) -> tuple[SessionSnapshot, list[SessionAction]]:
    if isinstance(event, InputChanged):
        return _on_input(snapshot, event)
    if isinstance(event, MatchCompleted):
        return _on_completed(snapshot, event)
    raise TypeError(f"Unknown session event: {event!r}")


def _on_input(
    snapshot: SessionSnapshot, event: InputChanged
) -> tuple[SessionSnapshot, list[SessionAction]]:
    actions: list[SessionAction] = []
    if snapshot.state is SessionState.PENDING:
        actions.append(CancelMatch(snapshot.generation))

    # Every input bumps the generation so late completions are recognisable as stale.
    generation = snapshot.generation + 1
    if not event.text.strip():
        actions.append(ClearRenderer())
        return SessionSnapshot(SessionState.IDLE, "", generation), actions

    actions.append(StartMatch(generation, event.text))
    return SessionSnapshot(SessionState.PENDING, event.text, generation), actions


def _on_completed(
    snapshot: SessionSnapshot, event: MatchCompleted
) -> tuple[SessionSnapshot, list[SessionAction]]:
    if snapshot.state is not SessionState.PENDING or event.generation != snapshot.generation:
        return snapshot, []
    return (
        replace(snapshot, state=SessionState.PRESENTING),
        [Present(event.generation, event.outcome)],
    )
