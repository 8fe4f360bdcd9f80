from __future__ import annotations

from typing import TYPE_CHECKING

from cube_planner.core.events.event_bus import EventBus

if TYPE_CHECKING:
    from cube_planner.core.events.event_sink import EventSink
    from cube_planner.core.events.events import PlanningEvent


class NullEventBus(EventBus):
    """EventBus without sinks; events are counted and dropped."""

    def __init__(self) -> None:
        super().__init__(sinks=())

    def register(self, sink: EventSink) -> None:
        return

    def emit(self, event: PlanningEvent) -> None:
        self._counts[event.event_type] += 1
