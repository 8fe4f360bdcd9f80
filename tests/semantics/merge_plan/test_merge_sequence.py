"""
Semantic test: segment merge plan.

Invariant:
Merging the cube's MERGING segments into a NEW segment emits exactly five
steps. The merge step reads one wildcarded cuboid glob per ancestor, in
date-range order, and every later step works on the merged output.
"""

# pylint: disable=missing-function-docstring
from __future__ import annotations

import pytest

from cube_planner.core.domain.errors import InvalidRequest
from cube_planner.core.domain.types import MergeRequest, Segment
from cube_planner.planner.compiler import compile_plan
from cube_planner.planner.planner_models import StepCategory

WORKING_DIR = "/kylin/jobs/job-merge-1"


def _request() -> MergeRequest:
    return MergeRequest(cube_name="sales", segment_name="seg1", job_uuid="merge-1")


def test_merge_emits_five_steps(metadata, engine_config) -> None:
    plan = compile_plan(_request(), metadata=metadata, engine_config=engine_config)

    assert plan.mode == "merge"
    assert [s.sequence_id for s in plan.steps] == [0, 1, 2, 3, 4]
    assert [s.category for s in plan.steps] == [
        StepCategory.MERGE_CUBOID,
        StepCategory.RANGE_KEY_DISTRIBUTION,
        StepCategory.CREATE_TABLE,
        StepCategory.CONVERT_TO_BULK_FILES,
        StepCategory.BULK_LOAD,
    ]
    assert [s.execution_mode for s in plan.steps] == ["async", "async", "sync", "async", "sync"]


def test_merge_input_joins_ancestor_globs_in_date_order(metadata, engine_config) -> None:
    plan = compile_plan(_request(), metadata=metadata, engine_config=engine_config)
    merge = plan.steps[0]

    assert merge.param("input") == (
        "/kylin/jobs/job-a-uuid/sales/cuboid/*,"
        "/kylin/jobs/job-b-uuid/sales/cuboid/*"
    )
    assert merge.param("output") == f"{WORKING_DIR}/sales/merged_cuboid"
    assert merge.param("jobname") == "Cube_Merge_Cuboid_sales_Step_0"


def test_post_merge_steps_read_merged_output(metadata, engine_config) -> None:
    plan = compile_plan(_request(), metadata=metadata, engine_config=engine_config)
    merged = f"{WORKING_DIR}/sales/merged_cuboid"

    assert plan.steps[1].param("input") == merged
    assert plan.steps[2].param("input") == f"{WORKING_DIR}/sales/rowkey_stats/part-r-00000"
    assert plan.steps[3].param("input") == merged
    assert plan.steps[4].param("input") == f"{WORKING_DIR}/sales/hfile"
    assert plan.storage_table == "KYLIN_SALES_SEG1"


def test_merge_ignores_flat_table_setting(metadata, engine_config, raw_engine_config) -> None:
    with_flat = compile_plan(_request(), metadata=metadata, engine_config=engine_config)
    without_flat = compile_plan(_request(), metadata=metadata, engine_config=raw_engine_config)

    assert with_flat.steps == without_flat.steps


def test_merge_with_single_ancestor_rejected(cube_factory, store_factory, engine_config) -> None:
    segments = (
        Segment(name="seg1", status="NEW", storage_location_identifier="KYLIN_SALES_SEG1"),
        Segment(name="seg_a", status="MERGING", last_build_job_id="a-uuid"),
        Segment(name="seg_b", status="READY", last_build_job_id="b-uuid"),
    )
    metadata = store_factory(cube_factory(segments=segments))

    with pytest.raises(InvalidRequest):
        compile_plan(_request(), metadata=metadata, engine_config=engine_config)


def test_merge_ancestor_without_build_job_rejected(cube_factory, store_factory, engine_config) -> None:
    segments = (
        Segment(name="seg1", status="NEW", storage_location_identifier="KYLIN_SALES_SEG1"),
        Segment(name="seg_a", status="MERGING", last_build_job_id="a-uuid"),
        Segment(name="seg_b", status="MERGING"),
    )
    metadata = store_factory(cube_factory(segments=segments))

    with pytest.raises(InvalidRequest):
        compile_plan(_request(), metadata=metadata, engine_config=engine_config)


def test_merge_steps_respect_execution_families(metadata, engine_config) -> None:
    plan = compile_plan(_request(), metadata=metadata, engine_config=engine_config)
    for step in plan.steps:
        assert step.run_async == step.category.is_distributed
