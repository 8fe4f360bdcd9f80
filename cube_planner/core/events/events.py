"""
Planning event models.

These events are immutable facts about compilations. They are consumed by
loggers and recorders; the compiler never reads them back.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class PlanCompiledEvent:
    job_uuid: str
    mode: str
    cube_name: str
    segment_name: str

    step_count: int
    async_step_count: int

    event_type = "plan_compiled"

    def to_record(self) -> dict[str, Any]:
        return {"event_type": self.event_type, **asdict(self)}


@dataclass(frozen=True, slots=True)
class PlanRejectedEvent:
    job_uuid: str | None
    mode: str
    cube_name: str | None

    error_type: str
    message: str

    event_type = "plan_rejected"

    def to_record(self) -> dict[str, Any]:
        return {"event_type": self.event_type, **asdict(self)}


PlanningEvent = Union[PlanCompiledEvent, PlanRejectedEvent]
