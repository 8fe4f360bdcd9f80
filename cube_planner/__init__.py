"""Public API for the cube_planner package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Config API
# ----------------------------------------------------------------------
from cube_planner.core.config.engine_config import EngineConfig

# ----------------------------------------------------------------------
# Domain Types
# ----------------------------------------------------------------------
from cube_planner.core.domain.errors import (
    DescriptorGenerationFailure,
    InvalidRequest,
    MetadataResolutionFailure,
    NotFound,
    PlanError,
    SegmentNotFound,
)
from cube_planner.core.domain.types import (
    BuildRequest,
    CubeDescriptor,
    CubeInstance,
    LookupDesc,
    MeasureDesc,
    MergeRequest,
    PlanRequest,
    RowKeyColumn,
    Segment,
    parse_plan_request,
)

# ----------------------------------------------------------------------
# Ports
# ----------------------------------------------------------------------
from cube_planner.core.ports.flat_table import FlatTableGenerator, FlatTableScripts
from cube_planner.core.ports.metadata_store import CubeMetadataStore, InMemoryMetadataStore

# ----------------------------------------------------------------------
# Compiler
# ----------------------------------------------------------------------
from cube_planner.planner.command_format import render_command, render_plan_commands
from cube_planner.planner.compiler import PlanCompiler, compile_plan
from cube_planner.planner.planner_models import Plan, Step, StepCategory, StepParam

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Compiler
    "PlanCompiler",
    "compile_plan",
    "render_command",
    "render_plan_commands",

    # Config
    "EngineConfig",

    # Requests and metadata
    "BuildRequest",
    "MergeRequest",
    "PlanRequest",
    "parse_plan_request",
    "CubeDescriptor",
    "CubeInstance",
    "LookupDesc",
    "MeasureDesc",
    "RowKeyColumn",
    "Segment",

    # Ports
    "CubeMetadataStore",
    "InMemoryMetadataStore",
    "FlatTableGenerator",
    "FlatTableScripts",

    # Plan
    "Plan",
    "Step",
    "StepCategory",
    "StepParam",

    # Errors
    "PlanError",
    "InvalidRequest",
    "MetadataResolutionFailure",
    "NotFound",
    "SegmentNotFound",
    "DescriptorGenerationFailure",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("cube-planner")
except PackageNotFoundError:
    __version__ = "0.0.0"
