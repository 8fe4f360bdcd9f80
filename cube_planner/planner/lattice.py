"""
Cuboid lattice stage topology.

The full lattice of dimension subsets has 2^D members. Builds materialize a
chain of L+1 levels instead: the base cuboid over all D dimensions, then one
level per removed dimension down to D-L dimensions. Each level is computed
from the level directly above it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from cube_planner.core.domain.errors import InvalidRequest
from cube_planner.planner.paths import all_cuboids_path, cuboid_path


@dataclass(frozen=True, slots=True)
class StagePath:
    """
    One materialized lattice level.
    """

    stage_index: int
    dimension_count: int
    path: str

    @property
    def is_base(self) -> bool:
        return self.stage_index == 0


def plan_cuboid_stages(
    *,
    root: str,
    cube_name: str,
    total_dimensions: int,
    build_levels: int,
) -> tuple[StagePath, ...]:
    """
    Return the ordered lattice stages of a build.

    Stage 0 is the base cuboid (``total_dimensions`` dimensions); stage i
    groups ``total_dimensions - i`` dimensions. The result has exactly
    ``build_levels + 1`` entries.
    """

    if total_dimensions <= 0:
        raise InvalidRequest(
            f"Cube {cube_name} has no row key dimensions ({total_dimensions})"
        )

    if build_levels < 0 or build_levels > total_dimensions:
        raise InvalidRequest(
            f"build_levels must be within [0, {total_dimensions}] "
            f"for cube {cube_name}, got {build_levels}"
        )

    stages: list[StagePath] = []

    for index in range(build_levels + 1):
        dimension_count = total_dimensions - index
        stages.append(
            StagePath(
                stage_index=index,
                dimension_count=dimension_count,
                path=cuboid_path(root, cube_name, dimension_count, total_dimensions),
            )
        )

    return tuple(stages)


def iter_stage_transitions(
    stages: Sequence[StagePath],
) -> Iterator[tuple[StagePath, StagePath]]:
    """
    Yield (source, target) pairs for every stage after the base cuboid.

    The source of stage i is always stage i-1.
    """
    for previous, current in zip(stages, stages[1:]):
        yield previous, current


def merge_source_paths(*, ancestor_roots: Sequence[str], cube_name: str) -> tuple[str, ...]:
    """
    Return one wildcarded cuboid glob per ancestor build, in ancestor order.
    """
    if len(ancestor_roots) < 2:
        raise InvalidRequest(
            f"Merging requires at least 2 ancestor segments, got {len(ancestor_roots)}"
        )
    return tuple(all_cuboids_path(root, cube_name) for root in ancestor_roots)


def format_paths(paths: Sequence[str]) -> str:
    """Join paths into the comma separated input expression of a job."""
    return ",".join(paths)
