"""Schema conformance tests for emitted plans.

Compiled plans are exchanged with execution engines as JSON. These tests
check that the JSON form of build and merge plans conforms to the plan
JSON Schema, that the schema rejects malformed plans, and that a plan
survives a JSON round trip unchanged.
"""

# pylint: disable=missing-function-docstring
# pylint: disable=redefined-outer-name,global-statement
from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest
from jsonschema import ValidationError as JsonSchemaValidationError
from jsonschema import validate as jsonschema_validate
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from cube_planner.core.domain.types import BuildRequest, MergeRequest
from cube_planner.planner.compiler import compile_plan
from cube_planner.planner.planner_models import Plan

SCHEMA_REGISTRY = Registry()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load_schema(name: str) -> dict:
    """
    Load JSON schema from the package schema directory.
    """
    global SCHEMA_REGISTRY

    root = Path(__file__).parent.parent.parent.parent
    schema_path = root / "cube_planner" / "core" / "schemas" / name

    with schema_path.open("r", encoding="utf-8") as f:
        schema = json.load(f)

    schema_id = schema.get("$id")
    if isinstance(schema_id, str) and schema_id:
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        SCHEMA_REGISTRY = SCHEMA_REGISTRY.with_resource(schema_id, resource)

    return schema


def assert_schema_ok(instance: dict, schema: dict) -> None:
    jsonschema_validate(instance=instance, schema=schema, registry=SCHEMA_REGISTRY)


def assert_schema_rejects(instance: dict, schema: dict) -> None:
    with pytest.raises(JsonSchemaValidationError):
        jsonschema_validate(instance=instance, schema=schema, registry=SCHEMA_REGISTRY)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module", autouse=True)
def _load_step_schema() -> None:
    load_schema("step.schema.json")


@pytest.fixture(scope="module")
def plan_schema() -> dict:
    return load_schema("plan.schema.json")


@pytest.fixture
def build_plan_obj(metadata, engine_config) -> dict:
    request = BuildRequest(cube_name="sales", segment_name="seg1", job_uuid="0f1e2d3c-aaaa")
    return compile_plan(request, metadata=metadata, engine_config=engine_config).to_json_obj()


@pytest.fixture
def merge_plan_obj(metadata, engine_config) -> dict:
    request = MergeRequest(cube_name="sales", segment_name="seg1", job_uuid="merge-1")
    return compile_plan(request, metadata=metadata, engine_config=engine_config).to_json_obj()


# ---------------------------------------------------------------------------
# Plan JSON
# ---------------------------------------------------------------------------

def test_build_plan_matches_schema(build_plan_obj, plan_schema):
    assert_schema_ok(build_plan_obj, plan_schema)


def test_merge_plan_matches_schema(merge_plan_obj, plan_schema):
    assert_schema_ok(merge_plan_obj, plan_schema)


def test_params_serialize_as_ordered_pairs(build_plan_obj):
    base = next(s for s in build_plan_obj["steps"] if s["category"] == "base_cuboid")

    assert [name for name, _ in base["params"]] == [
        "cubename",
        "segmentname",
        "input",
        "output",
        "jobname",
        "level",
    ]
    assert base["params"][-1] == ["level", 3]


def test_schema_rejects_unknown_category(build_plan_obj, plan_schema):
    bad = copy.deepcopy(build_plan_obj)
    bad["steps"][0]["category"] = "spark_job"
    assert_schema_rejects(bad, plan_schema)


def test_schema_rejects_unknown_mode(build_plan_obj, plan_schema):
    bad = copy.deepcopy(build_plan_obj)
    bad["mode"] = "refresh"
    assert_schema_rejects(bad, plan_schema)


def test_schema_rejects_additional_properties(build_plan_obj, plan_schema):
    bad = copy.deepcopy(build_plan_obj)
    bad["unexpected"] = 1
    assert_schema_rejects(bad, plan_schema)

    bad = copy.deepcopy(build_plan_obj)
    bad["steps"][0]["unexpected"] = 1
    assert_schema_rejects(bad, plan_schema)


def test_schema_rejects_empty_plan(build_plan_obj, plan_schema):
    bad = copy.deepcopy(build_plan_obj)
    bad["steps"] = []
    assert_schema_rejects(bad, plan_schema)


def test_plan_json_round_trip(build_plan_obj, merge_plan_obj):
    for obj in (build_plan_obj, merge_plan_obj):
        text = json.dumps(obj)
        rebuilt = Plan.from_json_obj(json.loads(text))
        assert rebuilt.to_json_obj() == obj
