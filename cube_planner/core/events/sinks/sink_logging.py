"""
Logging sink for planning events.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cube_planner.core.events.events import PlanningEvent


class LoggingEventSink:
    """
    Logs every planning event with its fields as structured ``extra``.

    Rejections are logged at WARNING, everything else at INFO.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: PlanningEvent) -> None:
        level = logging.WARNING if event.event_type == "plan_rejected" else logging.INFO
        self._logger.log(level, event.event_type, extra={"event": event.to_record()})
