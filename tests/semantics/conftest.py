"""Shared cube metadata fixtures for the semantic test suite."""

# pylint: disable=missing-function-docstring,redefined-outer-name
from __future__ import annotations

from typing import Any, Callable

import pytest

from cube_planner.core.config.engine_config import EngineConfig
from cube_planner.core.domain.types import (
    CubeDescriptor,
    CubeInstance,
    LookupDesc,
    MeasureDesc,
    RowKeyColumn,
    Segment,
)
from cube_planner.core.ports.metadata_store import InMemoryMetadataStore

JOB_UUID = "0f1e2d3c-aaaa"
WORKING_DIR = "/kylin/jobs/job-0f1e2d3c-aaaa"
FACT_TABLE = "DEFAULT.SALES_FACT"
FACT_TABLE_LOCATION = "/warehouse/default/sales_fact"

ROWKEY_POOL = (
    RowKeyColumn(table=FACT_TABLE, column="PART_DT", data_type="date"),
    RowKeyColumn(table="DEFAULT.DIM_SITE", column="SITE_NAME"),
    RowKeyColumn(table=FACT_TABLE, column="SELLER_ID", data_type="bigint"),
    RowKeyColumn(table=FACT_TABLE, column="LSTG_FORMAT_NAME"),
    RowKeyColumn(table="DEFAULT.DIM_SITE", column="REGION"),
)


def make_segments() -> tuple[Segment, ...]:
    return (
        Segment(
            name="seg1",
            status="NEW",
            storage_location_identifier="KYLIN_SALES_SEG1",
            date_range_start="2024-01-01",
            date_range_end="2024-02-01",
        ),
        # declared out of date order on purpose
        Segment(
            name="seg_b",
            status="MERGING",
            storage_location_identifier="KYLIN_SALES_B",
            last_build_job_id="b-uuid",
            date_range_start="2023-12-01",
            date_range_end="2024-01-01",
        ),
        Segment(
            name="seg_a",
            status="MERGING",
            storage_location_identifier="KYLIN_SALES_A",
            last_build_job_id="a-uuid",
            date_range_start="2023-11-01",
            date_range_end="2023-12-01",
        ),
        Segment(
            name="seg_ready",
            status="READY",
            storage_location_identifier="KYLIN_SALES_READY",
            last_build_job_id="r-uuid",
        ),
    )


def make_descriptor(
    *,
    dimensions: int = 3,
    build_levels: int | None = None,
    **overrides: Any,
) -> CubeDescriptor:
    data: dict[str, Any] = {
        "name": "sales",
        "fact_table": FACT_TABLE,
        "lookups": (
            LookupDesc(
                table="DEFAULT.DIM_SITE",
                join_type="inner",
                primary_key=("SITE_ID",),
                foreign_key=("SITE_ID",),
            ),
        ),
        "rowkey_columns": ROWKEY_POOL[:dimensions],
        "measures": (
            MeasureDesc(name="GMV", function="SUM", table=FACT_TABLE, column="PRICE", data_type="decimal(19,4)"),
            MeasureDesc(name="TRANS_CNT", function="COUNT", table=FACT_TABLE, column="1", data_type="bigint"),
        ),
        "build_levels": build_levels,
        "partition_date_column": "PART_DT",
    }
    data.update(overrides)
    return CubeDescriptor(**data)


def make_cube(
    *,
    dimensions: int = 3,
    build_levels: int | None = None,
    segments: tuple[Segment, ...] | None = None,
    **descriptor_overrides: Any,
) -> CubeInstance:
    return CubeInstance(
        name="sales",
        descriptor=make_descriptor(
            dimensions=dimensions,
            build_levels=build_levels,
            **descriptor_overrides,
        ),
        segments=make_segments() if segments is None else segments,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(hdfs_working_directory="/kylin/jobs/")


@pytest.fixture
def raw_engine_config() -> EngineConfig:
    """Engine configured to read the raw fact table (no flat table)."""
    return EngineConfig(hdfs_working_directory="/kylin/jobs", flat_table_by_hive=False)


@pytest.fixture
def cube_factory() -> Callable[..., CubeInstance]:
    return make_cube


@pytest.fixture
def descriptor_factory() -> Callable[..., CubeDescriptor]:
    return make_descriptor


@pytest.fixture
def store_factory() -> Callable[..., InMemoryMetadataStore]:
    def _factory(*cubes: CubeInstance) -> InMemoryMetadataStore:
        return InMemoryMetadataStore(
            cubes=list(cubes) or [make_cube()],
            table_locations={FACT_TABLE.lower(): FACT_TABLE_LOCATION},
        )

    return _factory


@pytest.fixture
def metadata(store_factory) -> InMemoryMetadataStore:
    return store_factory()
