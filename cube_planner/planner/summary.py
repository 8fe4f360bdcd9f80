from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List

from cube_planner.planner.planner_models import StepCategory

if TYPE_CHECKING:
    from cube_planner.planner.planner_models import Plan


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StepSummary:
    sequence_id: int
    name: str
    execution_mode: str
    category: str
    output: str | None


@dataclass(frozen=True, slots=True)
class PlanSummary:
    job_uuid: str
    mode: str
    cube_name: str
    segment_name: str
    working_dir: str
    step_count: int
    async_step_count: int
    cuboid_stage_count: int
    category_counts: Dict[str, int]
    steps: List[StepSummary]
    warnings: List[str]


# ---------------------------------------------------------------------------
# Summary builder
# ---------------------------------------------------------------------------

def summarize_plan(plan: Plan) -> PlanSummary:
    warnings: list[str] = []
    steps: list[StepSummary] = []

    categories = Counter(step.category for step in plan.steps)

    cuboid_stage_count = (
        categories[StepCategory.BASE_CUBOID] + categories[StepCategory.ND_CUBOID]
    )

    if plan.mode == "build":
        if categories[StepCategory.SHELL_SCRIPT] == 0:
            warnings.append("No flat table step; distributed steps read the raw fact table")

        if cuboid_stage_count == 1:
            warnings.append("Only the base cuboid is materialized")

    if cuboid_stage_count > 10:
        warnings.append(
            f"High number of cuboid stages ({cuboid_stage_count}); build may be long"
        )

    for step in plan.steps:
        output = step.param("output")
        steps.append(
            StepSummary(
                sequence_id=step.sequence_id,
                name=step.name,
                execution_mode=step.execution_mode,
                category=step.category.value,
                output=str(output) if output is not None else None,
            )
        )

    return PlanSummary(
        job_uuid=plan.job_uuid,
        mode=plan.mode,
        cube_name=plan.cube_name,
        segment_name=plan.segment_name,
        working_dir=plan.working_dir,
        step_count=len(plan.steps),
        async_step_count=sum(1 for step in plan.steps if step.run_async),
        cuboid_stage_count=cuboid_stage_count,
        category_counts={category.value: count for category, count in categories.items()},
        steps=steps,
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def print_plan_summary(summary: PlanSummary) -> None:
    print(f"Job: {summary.job_uuid} ({summary.mode})")
    print(f"Cube: {summary.cube_name} / segment {summary.segment_name}")
    print(f"Working dir: {summary.working_dir}")
    print(f"Steps: {summary.step_count} ({summary.async_step_count} async)")
    print(f"Cuboid stages: {summary.cuboid_stage_count}")
    for category, count in summary.category_counts.items():
        print(f"  {category}: {count}")
    print()

    if summary.warnings:
        print("Warnings:")
        for w in summary.warnings:
            print(f"  - {w}")
        print()

    print("Steps:")
    for s in summary.steps:
        line = f"  {s.sequence_id:>2}. [{s.execution_mode:>5}] {s.name} ({s.category})"
        if s.output is not None:
            line += f" -> {s.output}"
        print(line)
