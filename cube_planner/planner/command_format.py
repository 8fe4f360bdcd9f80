"""
Command line rendering for execution engines that run steps as processes.

Plans keep parameters as ordered name/value pairs; this adapter is the only
place they are flattened into command text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cube_planner.planner.planner_models import StepCategory

if TYPE_CHECKING:
    from cube_planner.core.config.engine_config import EngineConfig
    from cube_planner.planner.planner_models import Plan, Step


def render_command(step: Step, *, shell_command: str = "hive -e") -> str:
    """
    Render ``step`` as command text.

    Shell steps become ``<shell_command> "<script>"`` with one statement per
    line; every other step becomes `` -name value`` pairs in parameter order.
    """

    if step.category is StepCategory.SHELL_SCRIPT:
        script = "".join(f"{param.value}\n" for param in step.params)
        return f'{shell_command} "{script}"'

    return "".join(f" -{param.name} {param.value}" for param in step.params)


def render_plan_commands(plan: Plan, engine_config: EngineConfig) -> list[str]:
    """Render every step of ``plan``, running shell steps through the configured shell."""
    return [
        render_command(step, shell_command=engine_config.shell_command)
        for step in plan.steps
    ]
