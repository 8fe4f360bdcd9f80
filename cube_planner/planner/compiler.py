from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from cube_planner.core.domain.errors import PlanError
from cube_planner.core.events.events import PlanCompiledEvent, PlanRejectedEvent
from cube_planner.core.events.sinks.null_event_bus import NullEventBus
from cube_planner.planner.build_plan import assemble_build_steps
from cube_planner.planner.context import resolve_plan_context
from cube_planner.planner.flat_table import HiveFlatTableGenerator
from cube_planner.planner.merge_plan import assemble_merge_steps
from cube_planner.planner.paths import resolve_job_working_dir
from cube_planner.planner.planner_models import Plan

if TYPE_CHECKING:
    from cube_planner.core.config.engine_config import EngineConfig
    from cube_planner.core.domain.types import BuildRequest, MergeRequest
    from cube_planner.core.events.event_bus import EventBus
    from cube_planner.core.ports.flat_table import FlatTableGenerator
    from cube_planner.core.ports.metadata_store import CubeMetadataStore
    from cube_planner.planner.context import WorkingDirResolver

LOGGER = logging.getLogger(__name__)


class PlanCompiler:
    """
    Compiles build and merge requests into step plans.

    The compiler holds no per-request state: one instance may compile any
    number of requests, and independent instances may run concurrently.
    """

    def __init__(
        self,
        *,
        metadata: CubeMetadataStore,
        engine_config: EngineConfig,
        flat_table_generator: FlatTableGenerator | None = None,
        working_dir_resolver: WorkingDirResolver = resolve_job_working_dir,
        event_bus: EventBus | None = None,
    ) -> None:
        self._metadata = metadata
        self._engine_config = engine_config
        self._flat_table_generator = flat_table_generator or HiveFlatTableGenerator()
        self._working_dir_resolver = working_dir_resolver
        self._event_bus = event_bus if event_bus is not None else NullEventBus()

    def compile(self, request: BuildRequest | MergeRequest) -> Plan:
        """
        Build a complete plan for ``request``.

        Either a whole plan is returned or a PlanError is raised; no partial
        plan is ever produced.
        """
        try:
            plan = self._compile(request)
        except PlanError as exc:
            LOGGER.warning(
                "Plan compilation rejected",
                extra={
                    "mode": request.mode,
                    "cube_name": request.cube_name,
                    "job_uuid": request.job_uuid,
                    "error": str(exc),
                },
            )
            self._event_bus.emit(
                PlanRejectedEvent(
                    job_uuid=request.job_uuid,
                    mode=request.mode,
                    cube_name=request.cube_name,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            )
            raise

        self._event_bus.emit(
            PlanCompiledEvent(
                job_uuid=plan.job_uuid,
                mode=plan.mode,
                cube_name=plan.cube_name,
                segment_name=plan.segment_name,
                step_count=len(plan.steps),
                async_step_count=sum(1 for step in plan.steps if step.run_async),
            )
        )

        LOGGER.info(
            "Plan compiled",
            extra={
                "mode": plan.mode,
                "cube_name": plan.cube_name,
                "segment_name": plan.segment_name,
                "job_uuid": plan.job_uuid,
                "step_count": len(plan.steps),
            },
        )
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(json.dumps(plan.to_json_obj(), indent=2))

        return plan

    def _compile(self, request: BuildRequest | MergeRequest) -> Plan:
        ctx = resolve_plan_context(
            request,
            metadata=self._metadata,
            engine_config=self._engine_config,
            working_dir_resolver=self._working_dir_resolver,
        )

        if ctx.mode == "build":
            steps = assemble_build_steps(
                ctx,
                flat_table_generator=self._flat_table_generator,
            )
        else:
            steps = assemble_merge_steps(ctx)

        return Plan(
            job_uuid=ctx.job_uuid,
            mode=ctx.mode,
            cube_name=ctx.cube_name,
            segment_name=ctx.segment_name,
            working_dir=ctx.working_dir,
            storage_table=ctx.storage_table,
            steps=steps,
        )


def compile_plan(
    request: BuildRequest | MergeRequest,
    *,
    metadata: CubeMetadataStore,
    engine_config: EngineConfig,
    flat_table_generator: FlatTableGenerator | None = None,
) -> Plan:
    """Compile ``request`` with a one-off PlanCompiler."""
    compiler = PlanCompiler(
        metadata=metadata,
        engine_config=engine_config,
        flat_table_generator=flat_table_generator,
    )
    return compiler.compile(request)
