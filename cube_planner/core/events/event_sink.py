"""
Planning event sink interface.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cube_planner.core.events.events import PlanningEvent


class EventSink(Protocol):
    def on_event(self, event: PlanningEvent) -> None:
        """Consume one planning event."""
