"""
Canonical intermediate storage paths.

Every path a plan refers to is derived here from (working-directory root,
cube name, stage tag). Other modules never concatenate paths themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cube_planner.core.domain.errors import InvalidRequest

if TYPE_CHECKING:
    from cube_planner.core.config.engine_config import EngineConfig

BASE_CUBOID_TAG = "base_cuboid"
CUBOID_DIR = "cuboid"
FLAT_TABLE_TAG = "flat_table"
FACT_DISTINCT_COLUMNS_TAG = "fact_distinct_columns"
ROWKEY_STATS_TAG = "rowkey_stats"
ROWKEY_STATS_PARTITION = "part-r-00000"
MERGED_CUBOID_TAG = "merged_cuboid"
BULK_FILE_TAG = "hfile"


def _require(value: str, what: str) -> None:
    if not value:
        raise InvalidRequest(f"{what} must be non-empty")


def resolve_job_working_dir(job_uuid: str, engine_config: EngineConfig) -> str:
    """Return the working-directory root of job ``job_uuid``."""
    _require(job_uuid, "job uuid")
    return (
        f"{engine_config.hdfs_working_directory}/"
        f"{engine_config.working_dir_prefix}{job_uuid}"
    )


def cube_path(root: str, cube_name: str, tag: str) -> str:
    """Return ``{root}/{cube_name}/{tag}``."""
    _require(root, "working directory")
    _require(cube_name, "cube name")
    _require(tag, "stage tag")
    return f"{root.rstrip('/')}/{cube_name}/{tag}"


def cuboid_tag(dimension_count: int, total_dimensions: int) -> str:
    """Tag of the cuboid stage grouping ``dimension_count`` dimensions."""
    if dimension_count == total_dimensions:
        return BASE_CUBOID_TAG
    return f"{dimension_count}d_cuboid"


def cuboid_path(root: str, cube_name: str, dimension_count: int, total_dimensions: int) -> str:
    return cube_path(root, cube_name, f"{CUBOID_DIR}/{cuboid_tag(dimension_count, total_dimensions)}")


def all_cuboids_path(root: str, cube_name: str) -> str:
    """Wildcard matching the output of every cuboid stage."""
    return cube_path(root, cube_name, f"{CUBOID_DIR}/*")


def flat_table_path(root: str, cube_name: str) -> str:
    return cube_path(root, cube_name, FLAT_TABLE_TAG)


def fact_distinct_columns_path(root: str, cube_name: str) -> str:
    return cube_path(root, cube_name, FACT_DISTINCT_COLUMNS_TAG)


def rowkey_stats_path(root: str, cube_name: str) -> str:
    return cube_path(root, cube_name, ROWKEY_STATS_TAG)


def rowkey_stats_partition_path(root: str, cube_name: str) -> str:
    """The single partition file holding the sampled key ranges."""
    return cube_path(root, cube_name, f"{ROWKEY_STATS_TAG}/{ROWKEY_STATS_PARTITION}")


def merged_cuboid_path(root: str, cube_name: str) -> str:
    return cube_path(root, cube_name, MERGED_CUBOID_TAG)


def bulk_file_path(root: str, cube_name: str) -> str:
    return cube_path(root, cube_name, BULK_FILE_TAG)
