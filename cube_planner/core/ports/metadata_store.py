"""
Cube metadata store definitions.

This module defines the protocol through which the compiler reads cube,
segment and table metadata, plus an in-memory implementation loaded from
JSON snapshots.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Protocol

from cube_planner.core.domain.errors import NotFound
from cube_planner.core.domain.types import CubeInstance


class CubeMetadataStore(Protocol):
    """
    Protocol describing read access to cube metadata.

    Implementations raise NotFound for unknown names.
    """

    def get_cube(self, cube_name: str) -> CubeInstance:
        """
        Return the cube instance (descriptor and segments) named ``cube_name``.
        """

    def get_table_location(self, table_name: str) -> str:
        """
        Return the storage location of the raw table ``table_name``.
        """


class InMemoryMetadataStore(CubeMetadataStore):
    """
    CubeMetadataStore backed by in-memory snapshots.

    Semantics:
    - Cubes are keyed by instance name
    - Table names are matched case-insensitively
    - Returned objects are frozen; callers cannot mutate the store through them
    """

    def __init__(
        self,
        *,
        cubes: list[CubeInstance],
        table_locations: Mapping[str, str] | None = None,
    ) -> None:
        self._cubes = {cube.name: cube for cube in cubes}
        self._table_locations = {
            name.upper(): location
            for name, location in (table_locations or {}).items()
        }

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> InMemoryMetadataStore:
        """
        Build a store from ``{"cubes": [...], "tables": {name: location}}``.
        """
        cubes = [CubeInstance.model_validate(raw) for raw in obj.get("cubes", [])]
        return cls(cubes=cubes, table_locations=obj.get("tables", {}))

    @classmethod
    def from_json_file(cls, path: Path) -> InMemoryMetadataStore:
        if not path.exists():
            raise FileNotFoundError(path)
        return cls.from_json_obj(json.loads(path.read_text(encoding="utf-8")))

    # ------------------------------------------------------------------

    def get_cube(self, cube_name: str) -> CubeInstance:
        try:
            return self._cubes[cube_name]
        except KeyError:
            raise NotFound(f"Cube not found: {cube_name}") from None

    def get_table_location(self, table_name: str) -> str:
        try:
            return self._table_locations[table_name.upper()]
        except KeyError:
            raise NotFound(f"Table not found: {table_name}") from None
