"""
Request resolution.

Turns a plan request into a validated, read-only PlanContext. Nothing
downstream of this module sees an unvalidated request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from cube_planner.core.domain.errors import InvalidRequest, SegmentNotFound
from cube_planner.planner.paths import resolve_job_working_dir

if TYPE_CHECKING:
    from cube_planner.core.config.engine_config import EngineConfig
    from cube_planner.core.domain.types import (
        BuildRequest,
        CubeDescriptor,
        CubeInstance,
        MergeRequest,
        Segment,
    )
    from cube_planner.core.ports.metadata_store import CubeMetadataStore
    from cube_planner.planner.planner_models import PlanMode

LOGGER = logging.getLogger(__name__)

WorkingDirResolver = Callable[[str, "EngineConfig"], str]


@dataclass(frozen=True, slots=True)
class PlanContext:
    """
    Immutable, validated input shared by every planning component.
    """

    mode: PlanMode
    cube: CubeInstance
    segment: Segment
    job_uuid: str
    working_dir: str
    engine_config: EngineConfig

    # MERGE only: the segments being consolidated and their build roots
    ancestors: tuple[Segment, ...] = ()
    ancestor_roots: tuple[str, ...] = ()

    # BUILD without a flat table: where the raw fact table lives
    fact_table_location: str | None = None

    @property
    def cube_name(self) -> str:
        return self.cube.name

    @property
    def segment_name(self) -> str:
        return self.segment.name

    @property
    def descriptor(self) -> CubeDescriptor:
        return self.cube.descriptor

    @property
    def storage_table(self) -> str:
        # Presence is checked during resolution
        return self.segment.storage_location_identifier or ""

    @property
    def uses_flat_table(self) -> bool:
        return self.mode == "build" and self.engine_config.flat_table_by_hive


def _require_identifier(value: str | None, what: str) -> str:
    if value is None or not value.strip():
        raise InvalidRequest(f"{what} is null or empty!")
    return value


def resolve_plan_context(
    request: BuildRequest | MergeRequest,
    *,
    metadata: CubeMetadataStore,
    engine_config: EngineConfig,
    working_dir_resolver: WorkingDirResolver = resolve_job_working_dir,
) -> PlanContext:
    """
    Validate ``request`` and resolve everything it refers to.

    Raises InvalidRequest for malformed requests and lets NotFound from the
    metadata store propagate unchanged.
    """

    cube_name = _require_identifier(request.cube_name, "Cube name")
    job_uuid = _require_identifier(request.job_uuid, "Job UUID")
    segment_name = _require_identifier(request.segment_name, "Cube segment name")

    cube = metadata.get_cube(cube_name)

    # only a NEW segment can be built or merged into
    segment = cube.get_segment(segment_name, "NEW")
    if segment is None:
        raise SegmentNotFound(
            f"No NEW segment named {segment_name} on cube {cube_name}"
        )

    if not segment.storage_location_identifier:
        raise InvalidRequest(
            f"Segment {segment_name} of cube {cube_name} has no storage location identifier"
        )

    if cube.descriptor.dimension_count <= 0:
        raise InvalidRequest(f"Cube {cube_name} has no row key dimensions")

    working_dir = request.working_dir or working_dir_resolver(job_uuid, engine_config)

    if request.mode == "merge":
        ancestors = tuple(cube.merging_segments())

        if len(ancestors) < 2:
            raise InvalidRequest(
                f"Merging segments count should be at least 2, got {len(ancestors)} "
                f"for cube {cube_name}"
            )

        for ancestor in ancestors:
            if not ancestor.last_build_job_id:
                raise InvalidRequest(
                    f"Ancestor segment {ancestor.name} has no prior build job"
                )

        ancestor_roots = tuple(
            working_dir_resolver(ancestor.last_build_job_id or "", engine_config)
            for ancestor in ancestors
        )

        LOGGER.debug(
            "Resolved merge context",
            extra={
                "cube_name": cube_name,
                "segment_name": segment_name,
                "ancestors": [a.name for a in ancestors],
            },
        )

        return PlanContext(
            mode="merge",
            cube=cube,
            segment=segment,
            job_uuid=job_uuid,
            working_dir=working_dir,
            engine_config=engine_config,
            ancestors=ancestors,
            ancestor_roots=ancestor_roots,
        )

    fact_table_location: str | None = None
    if not engine_config.flat_table_by_hive:
        fact_table_location = metadata.get_table_location(cube.descriptor.fact_table)

    return PlanContext(
        mode="build",
        cube=cube,
        segment=segment,
        job_uuid=job_uuid,
        working_dir=working_dir,
        engine_config=engine_config,
        fact_table_location=fact_table_location,
    )
