"""
Semantic test: engine configuration.

Invariant:
EngineConfig is strict: unknown keys are rejected, the working directory
is normalized without a trailing slash and may not be the filesystem root.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from cube_planner.core.config.engine_config import EngineConfig


def test_defaults() -> None:
    config = EngineConfig.from_json_obj({"hdfs_working_directory": "/kylin/jobs/"})

    assert config.hdfs_working_directory == "/kylin/jobs"
    assert config.working_dir_prefix == "job-"
    assert config.flat_table_by_hive is True
    assert config.flat_table_database == "default"
    assert config.job_name_prefix == "Cube"
    assert config.shell_command == "hive -e"
    assert config.job_conf_path("MEDIUM") is None


def test_job_conf_per_capacity() -> None:
    config = EngineConfig.from_json_obj(
        {
            "hdfs_working_directory": "/kylin/jobs",
            "job_conf_paths": {"LARGE": "/etc/kylin/large.xml", "SMALL": ""},
        }
    )

    assert config.job_conf_path("LARGE") == "/etc/kylin/large.xml"
    assert config.job_conf_path("SMALL") is None


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"hdfs_working_directory": ""},
        {"hdfs_working_directory": "/"},
        {"hdfs_working_directory": "/kylin", "unexpected": True},
        {"hdfs_working_directory": "/kylin", "job_conf_paths": {"HUGE": "/x.xml"}},
    ],
)
def test_invalid_configs_rejected(data) -> None:
    with pytest.raises(PydanticValidationError):
        EngineConfig.from_json_obj(data)
