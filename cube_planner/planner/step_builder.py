"""
Step construction.

Each method builds one fully-formed Step. Parameters are accumulated in a
fixed order so that the same context always yields identical steps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from cube_planner.planner import paths
from cube_planner.planner.planner_models import Step, StepCategory, StepParam

if TYPE_CHECKING:
    from cube_planner.core.ports.flat_table import FlatTableScripts
    from cube_planner.planner.context import PlanContext
    from cube_planner.planner.lattice import StagePath

STEP_NAME_CREATE_FLAT_TABLE = "Create Intermediate Flat Table"
STEP_NAME_FACT_DISTINCT_COLUMNS = "Extract Fact Table Distinct Columns"
STEP_NAME_BUILD_DICTIONARY = "Build Dimension Dictionary"
STEP_NAME_BUILD_BASE_CUBOID = "Build Base Cuboid Data"
STEP_NAME_BUILD_N_D_CUBOID = "Build N-Dimension Cuboid Data"
STEP_NAME_GET_CUBOID_KEY_DISTRIBUTION = "Calculate Storage Table Key Ranges"
STEP_NAME_CREATE_STORAGE_TABLE = "Create Storage Table"
STEP_NAME_CONVERT_CUBOID_TO_BULK_FILES = "Convert Cuboid Data to Bulk Load Files"
STEP_NAME_BULK_LOAD = "Bulk Load Files into Storage Table"
STEP_NAME_MERGE_CUBOID = "Merge Cuboid Data"

RAW_INPUT_FORMAT = "TextInputFormat"


def nd_cuboid_step_name(dimension_count: int) -> str:
    return f"{STEP_NAME_BUILD_N_D_CUBOID} : {dimension_count}-Dimension"


class StepBuilder:
    """Builds the steps of one plan from a resolved PlanContext."""

    def __init__(self, ctx: PlanContext) -> None:
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Parameter helpers
    # ------------------------------------------------------------------

    def _job_name(self, role: str, sequence_id: int) -> str:
        prefix = self._ctx.engine_config.job_name_prefix
        return f"{prefix}_{role}_{self._ctx.cube_name}_Step_{sequence_id}"

    def _distributed_params(self, *, raw_input: bool = False) -> list[StepParam]:
        """Leading parameters shared by every distributed job."""
        params: list[StepParam] = []

        job_conf = self._ctx.engine_config.job_conf_path(self._ctx.descriptor.capacity)
        if job_conf is not None:
            params.append(StepParam("conf", job_conf))

        if raw_input:
            params.append(StepParam("inputformat", RAW_INPUT_FORMAT))

        return params

    def _path(self, path_fn: Callable[[str, str], str]) -> str:
        return path_fn(self._ctx.working_dir, self._ctx.cube_name)

    def source_input(self) -> str:
        """Input of the first scans: the flat table, or the raw fact table."""
        if self._ctx.uses_flat_table:
            return self._path(paths.flat_table_path)
        return self._ctx.fact_table_location or ""

    # ------------------------------------------------------------------
    # Build steps
    # ------------------------------------------------------------------

    def flat_table(self, sequence_id: int, scripts: FlatTableScripts) -> Step:
        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_CREATE_FLAT_TABLE,
            params=(
                StepParam("drop_table", scripts.drop_table),
                StepParam("create_table", scripts.create_table),
                StepParam("insert_data", scripts.insert_data),
            ),
            execution_mode="sync",
            category=StepCategory.SHELL_SCRIPT,
        )

    def fact_distinct_columns(self, sequence_id: int) -> Step:
        params = self._distributed_params(raw_input=not self._ctx.uses_flat_table)
        params += [
            StepParam("cubename", self._ctx.cube_name),
            StepParam("input", self.source_input()),
            StepParam("output", self._path(paths.fact_distinct_columns_path)),
            StepParam("jobname", self._job_name("Fact_Distinct_Columns", sequence_id)),
        ]

        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_FACT_DISTINCT_COLUMNS,
            params=tuple(params),
            execution_mode="async",
            category=StepCategory.FACT_DISTINCT_COLUMNS,
        )

    def build_dictionary(self, sequence_id: int) -> Step:
        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_BUILD_DICTIONARY,
            params=(
                StepParam("cubename", self._ctx.cube_name),
                StepParam("segmentname", self._ctx.segment_name),
                StepParam("input", self._path(paths.fact_distinct_columns_path)),
            ),
            execution_mode="sync",
            category=StepCategory.BUILD_DICTIONARY,
        )

    def base_cuboid(self, sequence_id: int, stage: StagePath) -> Step:
        params = self._distributed_params(raw_input=not self._ctx.uses_flat_table)
        params += [
            StepParam("cubename", self._ctx.cube_name),
            StepParam("segmentname", self._ctx.segment_name),
            StepParam("input", self.source_input()),
            StepParam("output", stage.path),
            StepParam("jobname", self._job_name("Base_Cuboid_Builder", sequence_id)),
            StepParam("level", stage.dimension_count),
        ]

        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_BUILD_BASE_CUBOID,
            params=tuple(params),
            execution_mode="async",
            category=StepCategory.BASE_CUBOID,
        )

    def nd_cuboid(self, sequence_id: int, source: StagePath, target: StagePath) -> Step:
        params = self._distributed_params()
        params += [
            StepParam("cubename", self._ctx.cube_name),
            StepParam("segmentname", self._ctx.segment_name),
            StepParam("input", source.path),
            StepParam("output", target.path),
            StepParam("jobname", self._job_name("ND-Cuboid_Builder", sequence_id)),
            StepParam("level", target.dimension_count),
        ]

        return Step(
            sequence_id=sequence_id,
            name=nd_cuboid_step_name(target.dimension_count),
            params=tuple(params),
            execution_mode="async",
            category=StepCategory.ND_CUBOID,
        )

    # ------------------------------------------------------------------
    # Merge steps
    # ------------------------------------------------------------------

    def merge_cuboid(self, sequence_id: int, input_paths: str) -> Step:
        params = self._distributed_params()
        params += [
            StepParam("cubename", self._ctx.cube_name),
            StepParam("segmentname", self._ctx.segment_name),
            StepParam("input", input_paths),
            StepParam("output", self._path(paths.merged_cuboid_path)),
            StepParam("jobname", self._job_name("Merge_Cuboid", sequence_id)),
        ]

        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_MERGE_CUBOID,
            params=tuple(params),
            execution_mode="async",
            category=StepCategory.MERGE_CUBOID,
        )

    # ------------------------------------------------------------------
    # Storage steps (shared by build and merge)
    # ------------------------------------------------------------------

    def range_key_distribution(self, sequence_id: int, input_path: str) -> Step:
        params = self._distributed_params()
        params += [
            StepParam("input", input_path),
            StepParam("output", self._path(paths.rowkey_stats_path)),
            StepParam("jobname", self._job_name("Region_Splits_Calculator", sequence_id)),
            StepParam("cubename", self._ctx.cube_name),
        ]

        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_GET_CUBOID_KEY_DISTRIBUTION,
            params=tuple(params),
            execution_mode="async",
            category=StepCategory.RANGE_KEY_DISTRIBUTION,
        )

    def create_storage_table(self, sequence_id: int) -> Step:
        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_CREATE_STORAGE_TABLE,
            params=(
                StepParam("cubename", self._ctx.cube_name),
                StepParam("input", self._path(paths.rowkey_stats_partition_path)),
                StepParam("tablename", self._ctx.storage_table),
            ),
            execution_mode="sync",
            category=StepCategory.CREATE_TABLE,
        )

    def convert_to_bulk_files(self, sequence_id: int, input_path: str) -> Step:
        params = self._distributed_params()
        params += [
            StepParam("cubename", self._ctx.cube_name),
            StepParam("input", input_path),
            StepParam("output", self._path(paths.bulk_file_path)),
            StepParam("tablename", self._ctx.storage_table),
            StepParam("jobname", self._job_name("Bulk_File_Generator", sequence_id)),
        ]

        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_CONVERT_CUBOID_TO_BULK_FILES,
            params=tuple(params),
            execution_mode="async",
            category=StepCategory.CONVERT_TO_BULK_FILES,
        )

    def bulk_load(self, sequence_id: int) -> Step:
        return Step(
            sequence_id=sequence_id,
            name=STEP_NAME_BULK_LOAD,
            params=(
                StepParam("input", self._path(paths.bulk_file_path)),
                StepParam("tablename", self._ctx.storage_table),
                StepParam("cubename", self._ctx.cube_name),
            ),
            execution_mode="sync",
            category=StepCategory.BULK_LOAD,
        )
