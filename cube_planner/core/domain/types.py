"""Core cube metadata and plan request models.

This module defines the canonical Pydantic models describing cubes,
segments and the requests handed to the plan compiler. Metadata models are
frozen: the compiler reads them as snapshots and never mutates them.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# ---------------------------------------------------------------------------
# Cube descriptor models
# ---------------------------------------------------------------------------


JoinType = Literal["inner", "left"]
Capacity = Literal["SMALL", "MEDIUM", "LARGE"]


def flat_column_name(table: str, column: str) -> str:
    """Return the flattened-table column name for ``table.column``."""
    return f"{table}_{column}".replace(".", "_").upper()


class RowKeyColumn(BaseModel):
    table: str = Field(..., min_length=1)
    column: str = Field(..., min_length=1)
    data_type: str = Field(default="string", min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def flat_name(self) -> str:
        return flat_column_name(self.table, self.column)


class LookupDesc(BaseModel):
    """
    A lookup (dimension) table joined onto the fact table.

    primary_key[i] of the lookup joins foreign_key[i] of the fact table.
    """

    table: str = Field(..., min_length=1)
    join_type: JoinType = "inner"
    primary_key: tuple[str, ...] = Field(..., min_length=1)
    foreign_key: tuple[str, ...] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)


class MeasureDesc(BaseModel):
    name: str = Field(..., min_length=1)
    function: str = Field(..., min_length=1)  # e.g. "SUM", "COUNT"
    table: str = Field(..., min_length=1)
    column: str = Field(..., min_length=1)
    data_type: str = Field(default="double", min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def flat_name(self) -> str:
        return flat_column_name(self.table, self.column)


class CubeDescriptor(BaseModel):
    """
    Immutable cube configuration.

    Notes:
    - rowkey_columns is ordered; its length is the dimension count D.
    - build_levels (L) is the number of materialized reduction stages below
      the base cuboid. None means every level down to zero dimensions.
    - Dimension and level counts are checked by the planner, not here, so a
      misconfigured descriptor fails compilation with InvalidRequest.
    """

    name: str = Field(..., min_length=1)
    fact_table: str = Field(..., min_length=1)
    lookups: tuple[LookupDesc, ...] = ()
    rowkey_columns: tuple[RowKeyColumn, ...] = ()
    measures: tuple[MeasureDesc, ...] = ()
    build_levels: int | None = None
    capacity: Capacity = "MEDIUM"
    partition_date_column: str | None = Field(default=None, min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def dimension_count(self) -> int:
        return len(self.rowkey_columns)

    @property
    def effective_build_levels(self) -> int:
        if self.build_levels is None:
            return self.dimension_count
        return self.build_levels


# ---------------------------------------------------------------------------
# Segment models
# ---------------------------------------------------------------------------


SegmentStatus = Literal["NEW", "READY", "READY_PENDING", "MERGING"]


class Segment(BaseModel):
    """
    A contiguous data partition of a cube.

    storage_location_identifier is the physical table holding the segment's
    data. Once assigned it never changes for the life of the segment.
    """

    name: str = Field(..., min_length=1)
    status: SegmentStatus
    storage_location_identifier: str | None = Field(default=None, min_length=1)
    last_build_job_id: str | None = Field(default=None, min_length=1)
    date_range_start: str | None = Field(default=None, min_length=1)
    date_range_end: str | None = Field(default=None, min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    def with_storage_location(self, identifier: str) -> Segment:
        """Return a copy carrying ``identifier`` as its storage location."""
        if not identifier:
            raise ValueError("storage location identifier must be non-empty")
        current = self.storage_location_identifier
        if current is not None and current != identifier:
            raise ValueError(
                f"segment {self.name} already stored in {current}; "
                f"refusing to reassign to {identifier}"
            )
        return self.model_copy(update={"storage_location_identifier": identifier})


class CubeInstance(BaseModel):
    name: str = Field(..., min_length=1)
    descriptor: CubeDescriptor
    segments: tuple[Segment, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    def get_segment(self, name: str, status: SegmentStatus) -> Segment | None:
        for segment in self.segments:
            if segment.name == name and segment.status == status:
                return segment
        return None

    def merging_segments(self) -> list[Segment]:
        """Segments currently being merged, ordered by date range start."""
        merging = [s for s in self.segments if s.status == "MERGING"]
        return sorted(merging, key=lambda s: (s.date_range_start or "", s.name))


# ---------------------------------------------------------------------------
# Plan requests (discriminated union)
# ---------------------------------------------------------------------------


class PlanRequestBase(BaseModel):
    """
    Fields shared by every plan request.

    Identifiers are deliberately unconstrained here: emptiness is reported
    as InvalidRequest when the request is resolved.
    """

    cube_name: str | None = None
    segment_name: str | None = None
    job_uuid: str | None = Field(
        default=None,
        description="Job correlation identifier threaded through every step path.",
    )
    working_dir: str | None = Field(
        default=None,
        description="Explicit working-directory root; resolved from the engine config when absent.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class BuildRequest(PlanRequestBase):
    """Build a NEW segment from raw data."""

    mode: Literal["build"] = "build"


class MergeRequest(PlanRequestBase):
    """Merge the cube's MERGING segments into the NEW segment ``segment_name``."""

    mode: Literal["merge"] = "merge"


PlanRequest = Annotated[
    BuildRequest | MergeRequest,
    Field(discriminator="mode"),
]

_PLAN_REQUEST_ADAPTER: TypeAdapter[BuildRequest | MergeRequest] = TypeAdapter(PlanRequest)


def parse_plan_request(obj: dict[str, Any]) -> BuildRequest | MergeRequest:
    """Validate a JSON-compatible object into a BuildRequest or MergeRequest."""
    return _PLAN_REQUEST_ADAPTER.validate_python(obj)

