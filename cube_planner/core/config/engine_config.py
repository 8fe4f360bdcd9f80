"""Engine configuration model consumed by the plan compiler."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cube_planner.core.domain.types import Capacity


class EngineConfig(BaseModel):
    """Structured engine configuration.

    JSON example:
        {
          "hdfs_working_directory": "/cube/jobs",
          "flat_table_by_hive": true,
          "job_conf_paths": {"LARGE": "/etc/cube/job_conf_large.xml"}
        }
    """

    hdfs_working_directory: str = Field(..., min_length=1)
    working_dir_prefix: str = "job-"

    # Stage raw data through a denormalized (flat) table before aggregation
    flat_table_by_hive: bool = True
    flat_table_database: str = Field(default="default", min_length=1)
    flat_table_settings: dict[str, str] = Field(default_factory=dict)

    # Cube capacity -> job configuration file passed to distributed steps
    job_conf_paths: dict[Capacity, str] = Field(default_factory=dict)

    job_name_prefix: str = Field(default="Cube", min_length=1)
    shell_command: str = Field(default="hive -e", min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json_obj(cls, engine_obj: dict[str, Any]) -> EngineConfig:
        """Create an EngineConfig instance from a JSON-compatible object."""
        return cls.model_validate(engine_obj)

    @field_validator("hdfs_working_directory")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.rstrip("/")
        if not stripped:
            raise ValueError("hdfs_working_directory must not be the filesystem root")
        return stripped

    def job_conf_path(self, capacity: Capacity) -> str | None:
        """Return the job configuration file for ``capacity``, if any."""
        path = self.job_conf_paths.get(capacity)
        if not path:
            return None
        return path
