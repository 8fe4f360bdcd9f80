"""
HiveQL flat table generation.

The flat table joins the fact table with every lookup table and keeps only
the columns the cube needs, so that later stages scan a single
denormalized source.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cube_planner.core.domain.errors import DescriptorGenerationFailure
from cube_planner.core.ports.flat_table import FlatTableGenerator, FlatTableScripts

if TYPE_CHECKING:
    from cube_planner.core.config.engine_config import EngineConfig
    from cube_planner.core.domain.types import CubeDescriptor, Segment

FACT_TABLE_ALIAS = "FACT_TABLE"
LOOKUP_ALIAS_PREFIX = "LOOKUP_"
FIELD_DELIMITER = "\\177"


def intermediate_table_name(cube_name: str, segment_name: str, job_uuid: str) -> str:
    """Name of the flat table of one build job (``-`` is not valid in table names)."""
    return f"cube_intermediate_{cube_name}_{segment_name}_{job_uuid}".replace("-", "_")


class HiveFlatTableGenerator(FlatTableGenerator):
    """
    FlatTableGenerator emitting HiveQL.

    Semantics:
    - Row key columns come first, in row key order, followed by measure sources
    - A column used by several row keys or measures appears once
    - Segments carrying a date range are filtered on the partition column
    """

    def generate(
        self,
        *,
        descriptor: CubeDescriptor,
        segment: Segment,
        job_uuid: str,
        location: str,
        engine_config: EngineConfig,
    ) -> FlatTableScripts:
        table_name = (
            f"{engine_config.flat_table_database}."
            f"{intermediate_table_name(descriptor.name, segment.name, job_uuid)}"
        )

        aliases = self._table_aliases(descriptor)
        columns = self._flat_columns(descriptor, aliases)

        if not columns:
            raise DescriptorGenerationFailure(
                f"Cube {descriptor.name} yields no flat table columns"
            )

        drop_table = f"DROP TABLE IF EXISTS {table_name};"

        column_defs = "\n,".join(f"{name} {data_type}" for name, _, data_type in columns)
        create_table = (
            f"CREATE EXTERNAL TABLE IF NOT EXISTS {table_name}\n"
            f"(\n{column_defs}\n)\n"
            f"ROW FORMAT DELIMITED FIELDS TERMINATED BY '{FIELD_DELIMITER}'\n"
            "STORED AS SEQUENCEFILE\n"
            f"LOCATION '{location}';"
        )

        settings = "".join(
            f"SET {key}={value};\n"
            for key, value in sorted(engine_config.flat_table_settings.items())
        )
        select_list = "\n,".join(source for _, source, _ in columns)
        insert_data = (
            f"{settings}"
            f"INSERT OVERWRITE TABLE {table_name} SELECT\n"
            f"{select_list}\n"
            f"{self._from_clause(descriptor, aliases)}"
            f"{self._where_clause(descriptor, segment)}"
            ";"
        )

        return FlatTableScripts(
            table_name=table_name,
            drop_table=drop_table,
            create_table=create_table,
            insert_data=insert_data,
        )

    # ------------------------------------------------------------------

    @staticmethod
    def _table_aliases(descriptor: CubeDescriptor) -> dict[str, str]:
        aliases = {descriptor.fact_table.upper(): FACT_TABLE_ALIAS}
        for index, lookup in enumerate(descriptor.lookups, start=1):
            key = lookup.table.upper()
            if key in aliases:
                raise DescriptorGenerationFailure(
                    f"Table {lookup.table} is joined more than once in cube {descriptor.name}"
                )
            aliases[key] = f"{LOOKUP_ALIAS_PREFIX}{index}"
        return aliases

    @staticmethod
    def _flat_columns(
        descriptor: CubeDescriptor,
        aliases: dict[str, str],
    ) -> list[tuple[str, str, str]]:
        """Return (flat name, select expression, data type) per column."""

        sources = [(c.table, c.column, c.flat_name, c.data_type) for c in descriptor.rowkey_columns]
        sources += [
            (m.table, m.column, m.flat_name, m.data_type)
            for m in descriptor.measures
            # constant arguments such as COUNT(1) need no source column
            if not m.column.isdigit()
        ]

        columns: list[tuple[str, str, str]] = []
        seen: set[str] = set()

        for table, column, flat_name, data_type in sources:
            alias = aliases.get(table.upper())
            if alias is None:
                raise DescriptorGenerationFailure(
                    f"Column {table}.{column} references a table that is neither "
                    f"the fact table nor a lookup of cube {descriptor.name}"
                )
            if flat_name in seen:
                continue
            seen.add(flat_name)
            columns.append((flat_name, f"{alias}.{column}", data_type))

        return columns

    @staticmethod
    def _from_clause(descriptor: CubeDescriptor, aliases: dict[str, str]) -> str:
        clause = f"FROM {descriptor.fact_table} as {FACT_TABLE_ALIAS}\n"

        for lookup in descriptor.lookups:
            if len(lookup.primary_key) != len(lookup.foreign_key):
                raise DescriptorGenerationFailure(
                    f"Lookup {lookup.table} has {len(lookup.primary_key)} primary key "
                    f"columns but {len(lookup.foreign_key)} foreign key columns"
                )

            alias = aliases[lookup.table.upper()]
            conditions = " AND ".join(
                f"{FACT_TABLE_ALIAS}.{fk} = {alias}.{pk}"
                for fk, pk in zip(lookup.foreign_key, lookup.primary_key, strict=True)
            )
            clause += f"{lookup.join_type.upper()} JOIN {lookup.table} as {alias}\nON {conditions}\n"

        return clause

    @staticmethod
    def _where_clause(descriptor: CubeDescriptor, segment: Segment) -> str:
        column = descriptor.partition_date_column
        if column is None or segment.date_range_end is None:
            return ""

        conditions = []
        if segment.date_range_start is not None:
            conditions.append(f"{FACT_TABLE_ALIAS}.{column} >= '{segment.date_range_start}'")
        conditions.append(f"{FACT_TABLE_ALIAS}.{column} < '{segment.date_range_end}'")

        return f"WHERE ({' AND '.join(conditions)})\n"
