"""
Flat table descriptor generator interface.

A generator turns a cube descriptor and a segment into the drop/create/insert
scripts that materialize the denormalized intermediate table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cube_planner.core.config.engine_config import EngineConfig
    from cube_planner.core.domain.types import CubeDescriptor, Segment


@dataclass(frozen=True, slots=True)
class FlatTableScripts:
    """
    Generated script text for one intermediate flat table.
    """

    table_name: str
    drop_table: str
    create_table: str
    insert_data: str


class FlatTableGenerator(Protocol):
    def generate(
        self,
        *,
        descriptor: CubeDescriptor,
        segment: Segment,
        job_uuid: str,
        location: str,
        engine_config: EngineConfig,
    ) -> FlatTableScripts:
        """
        Generate the scripts for the flat table stored at ``location``.
        """
