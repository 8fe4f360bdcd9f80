"""
Fresh segment build sequencing.

Step order:
  1) flat table (only when the engine stages through one)
  2) fact distinct columns
  3) dictionary
  4) base cuboid
  5) one N-D cuboid step per remaining lattice stage
  6) key range sampling, storage table creation, bulk file conversion, bulk load
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cube_planner.core.domain.errors import DescriptorGenerationFailure
from cube_planner.planner.lattice import iter_stage_transitions, plan_cuboid_stages
from cube_planner.planner.paths import all_cuboids_path, flat_table_path
from cube_planner.planner.planner_models import Step, StepSequence
from cube_planner.planner.step_builder import StepBuilder

if TYPE_CHECKING:
    from cube_planner.core.ports.flat_table import FlatTableGenerator, FlatTableScripts
    from cube_planner.planner.context import PlanContext


def generate_flat_table_scripts(
    ctx: PlanContext,
    generator: FlatTableGenerator,
) -> FlatTableScripts:
    """Run ``generator`` for the context's segment, surfacing failures as DescriptorGenerationFailure."""
    try:
        return generator.generate(
            descriptor=ctx.descriptor,
            segment=ctx.segment,
            job_uuid=ctx.job_uuid,
            location=flat_table_path(ctx.working_dir, ctx.cube_name),
            engine_config=ctx.engine_config,
        )
    except DescriptorGenerationFailure:
        raise
    except Exception as exc:
        raise DescriptorGenerationFailure(
            f"Flat table generation failed for cube {ctx.cube_name}: {exc}"
        ) from exc


def assemble_build_steps(
    ctx: PlanContext,
    *,
    flat_table_generator: FlatTableGenerator,
) -> tuple[Step, ...]:
    """
    Return the complete step sequence building ``ctx.segment``.

    All validation (lattice bounds, script generation) happens before the
    first step is built.
    """

    descriptor = ctx.descriptor

    stages = plan_cuboid_stages(
        root=ctx.working_dir,
        cube_name=ctx.cube_name,
        total_dimensions=descriptor.dimension_count,
        build_levels=descriptor.effective_build_levels,
    )

    scripts = None
    if ctx.uses_flat_table:
        scripts = generate_flat_table_scripts(ctx, flat_table_generator)

    builder = StepBuilder(ctx)
    sequence = StepSequence()

    if scripts is not None:
        sequence.append(builder.flat_table(sequence.next_id, scripts))

    sequence.append(builder.fact_distinct_columns(sequence.next_id))
    sequence.append(builder.build_dictionary(sequence.next_id))
    sequence.append(builder.base_cuboid(sequence.next_id, stages[0]))

    for source, target in iter_stage_transitions(stages):
        sequence.append(builder.nd_cuboid(sequence.next_id, source, target))

    cuboids = all_cuboids_path(ctx.working_dir, ctx.cube_name)

    sequence.append(builder.range_key_distribution(sequence.next_id, cuboids))
    sequence.append(builder.create_storage_table(sequence.next_id))
    sequence.append(builder.convert_to_bulk_files(sequence.next_id, cuboids))
    sequence.append(builder.bulk_load(sequence.next_id))

    return sequence.finish()
