"""
Synchronous planning event bus.
"""
from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from cube_planner.core.events.event_sink import EventSink
    from cube_planner.core.events.events import PlanningEvent


class EventBus:
    """
    Fans planning events out to sinks in registration order.

    The bus keeps a per-type count of emitted events. Closing it closes every
    sink exposing close(); usable as a context manager.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks or ())
        self._counts: Counter[str] = Counter()
        self._closed = False

    def register(self, sink: EventSink) -> None:
        if self._closed:
            raise RuntimeError("Cannot register a sink on a closed event bus")
        self._sinks.append(sink)

    def emit(self, event: PlanningEvent) -> None:
        self._counts[event.event_type] += 1
        for sink in self._sinks:
            sink.on_event(event)

    def emitted(self, event_type: str) -> int:
        """Number of events of ``event_type`` emitted so far."""
        return self._counts[event_type]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()

    def __enter__(self) -> EventBus:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
