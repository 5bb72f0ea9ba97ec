"""
FitEstimate — Adaptation Log
Caller-owned, append-only store for AdaptationEvents. Engines receive one per
user/request so concurrent adaptation cycles never share state.
"""

from datetime import datetime, timezone
from typing import Callable, Iterator, Protocol

from fitness_types import AdaptationEvent

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AdaptationLog(Protocol):
    def append(self, event: AdaptationEvent) -> None: ...

    def events(self) -> list[AdaptationEvent]: ...


class InMemoryAdaptationLog:
    """List-backed log. Callers drain it into durable storage if needed."""

    def __init__(self):
        self._events: list[AdaptationEvent] = []

    def append(self, event: AdaptationEvent) -> None:
        self._events.append(event)

    def events(self) -> list[AdaptationEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[AdaptationEvent]:
        return iter(list(self._events))
