"""
Planning model definitions.

This module contains the immutable structures a compiled plan is made of:
parameters, steps and the plan itself.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Literal

from cube_planner.core.domain.step_state_machine import (
    STEP_INITIAL_STATE,
    is_valid_transition,
)

ExecutionMode = Literal["sync", "async"]
PlanMode = Literal["build", "merge"]


class StepCategory(str, Enum):
    """Identifies the external executor family that runs a step."""

    # Shell / SQL script execution
    SHELL_SCRIPT = "shell_script"

    # Administrative jobs without a distributed reduce phase
    BUILD_DICTIONARY = "build_dictionary"
    CREATE_TABLE = "create_table"
    BULK_LOAD = "bulk_load"

    # Distributed compute jobs
    FACT_DISTINCT_COLUMNS = "fact_distinct_columns"
    BASE_CUBOID = "base_cuboid"
    ND_CUBOID = "nd_cuboid"
    RANGE_KEY_DISTRIBUTION = "range_key_distribution"
    MERGE_CUBOID = "merge_cuboid"
    CONVERT_TO_BULK_FILES = "convert_to_bulk_files"

    @property
    def is_distributed(self) -> bool:
        return self in DISTRIBUTED_CATEGORIES


DISTRIBUTED_CATEGORIES: frozenset[StepCategory] = frozenset(
    {
        StepCategory.FACT_DISTINCT_COLUMNS,
        StepCategory.BASE_CUBOID,
        StepCategory.ND_CUBOID,
        StepCategory.RANGE_KEY_DISTRIBUTION,
        StepCategory.MERGE_CUBOID,
        StepCategory.CONVERT_TO_BULK_FILES,
    }
)

LOCAL_CATEGORIES: frozenset[StepCategory] = frozenset(StepCategory) - DISTRIBUTED_CATEGORIES


@dataclass(frozen=True, slots=True)
class StepParam:
    """
    One named step parameter.
    """

    name: str
    value: str | int


@dataclass(frozen=True, slots=True)
class Step:
    """
    One executable unit of a plan.

    Asynchronous steps dispatch a long-running distributed job; the
    execution engine must poll them to completion before advancing.
    """

    sequence_id: int
    name: str
    params: tuple[StepParam, ...]
    execution_mode: ExecutionMode
    category: StepCategory
    status: str = STEP_INITIAL_STATE

    @property
    def run_async(self) -> bool:
        return self.execution_mode == "async"

    def param(self, name: str) -> str | int | None:
        """Return the first parameter called ``name``, if any."""
        for param in self.params:
            if param.name == name:
                return param.value
        return None

    def param_names(self) -> list[str]:
        return [param.name for param in self.params]

    def with_status(self, next_status: str) -> Step:
        """Return a copy of this step in ``next_status``."""
        if not is_valid_transition(self.status, next_status):
            raise ValueError(
                f"Invalid step transition {self.status} -> {next_status} "
                f"for step {self.sequence_id} ({self.name})"
            )
        return replace(self, status=next_status)


@dataclass(frozen=True, slots=True)
class Plan:
    """
    Ordered, append-only step sequence for one request.
    """

    job_uuid: str
    mode: PlanMode
    cube_name: str
    segment_name: str
    working_dir: str
    storage_table: str
    steps: tuple[Step, ...]

    def to_json_obj(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of the plan."""
        return {
            "job_uuid": self.job_uuid,
            "mode": self.mode,
            "cube_name": self.cube_name,
            "segment_name": self.segment_name,
            "working_dir": self.working_dir,
            "storage_table": self.storage_table,
            "steps": [
                {
                    "sequence_id": step.sequence_id,
                    "name": step.name,
                    "params": [[p.name, p.value] for p in step.params],
                    "execution_mode": step.execution_mode,
                    "category": step.category.value,
                    "status": step.status,
                }
                for step in self.steps
            ],
        }

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> Plan:
        """Rebuild a plan from the output of ``to_json_obj``."""
        steps = tuple(
            Step(
                sequence_id=raw["sequence_id"],
                name=raw["name"],
                params=tuple(StepParam(name, value) for name, value in raw["params"]),
                execution_mode=raw["execution_mode"],
                category=StepCategory(raw["category"]),
                status=raw.get("status", STEP_INITIAL_STATE),
            )
            for raw in obj["steps"]
        )
        return cls(
            job_uuid=obj["job_uuid"],
            mode=obj["mode"],
            cube_name=obj["cube_name"],
            segment_name=obj["segment_name"],
            working_dir=obj["working_dir"],
            storage_table=obj["storage_table"],
            steps=steps,
        )


class StepSequence:
    """
    Append-only step accumulator.

    Sequence ids are contiguous from 0; the finished tuple is the only view
    callers ever get of the accumulated steps.
    """

    def __init__(self) -> None:
        self._steps: list[Step] = []

    @property
    def next_id(self) -> int:
        return len(self._steps)

    def append(self, step: Step) -> None:
        if step.sequence_id != self.next_id:
            raise RuntimeError(
                f"Step {step.name} has sequence id {step.sequence_id}, "
                f"expected {self.next_id}"
            )
        self._steps.append(step)

    def finish(self) -> tuple[Step, ...]:
        return tuple(self._steps)
