"""
Segment merge sequencing.

Step order:
  1) merge the ancestors' cuboid outputs
  2) key range sampling over the merged output
  3) storage table creation
  4) bulk file conversion
  5) bulk load
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cube_planner.planner.lattice import format_paths, merge_source_paths
from cube_planner.planner.paths import merged_cuboid_path
from cube_planner.planner.planner_models import Step, StepSequence
from cube_planner.planner.step_builder import StepBuilder

if TYPE_CHECKING:
    from cube_planner.planner.context import PlanContext


def assemble_merge_steps(ctx: PlanContext) -> tuple[Step, ...]:
    """Return the complete step sequence merging ``ctx.ancestors`` into ``ctx.segment``."""

    source_paths = merge_source_paths(
        ancestor_roots=ctx.ancestor_roots,
        cube_name=ctx.cube_name,
    )
    merged = merged_cuboid_path(ctx.working_dir, ctx.cube_name)

    builder = StepBuilder(ctx)
    sequence = StepSequence()

    sequence.append(builder.merge_cuboid(sequence.next_id, format_paths(source_paths)))
    sequence.append(builder.range_key_distribution(sequence.next_id, merged))
    sequence.append(builder.create_storage_table(sequence.next_id))
    sequence.append(builder.convert_to_bulk_files(sequence.next_id, merged))
    sequence.append(builder.bulk_load(sequence.next_id))

    return sequence.finish()
