from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from cube_planner.core.config.engine_config import EngineConfig
from cube_planner.core.domain.errors import PlanError
from cube_planner.core.domain.types import parse_plan_request
from cube_planner.core.events.event_bus import EventBus
from cube_planner.core.events.sinks.file_recorder import FileRecorderSink
from cube_planner.core.events.sinks.sink_logging import LoggingEventSink
from cube_planner.core.ports.metadata_store import InMemoryMetadataStore
from cube_planner.planner.command_format import render_plan_commands
from cube_planner.planner.compiler import PlanCompiler
from cube_planner.planner.summary import print_plan_summary, summarize_plan
from cube_planner.runtime.prometheus_metrics import PrometheusMetricsClient

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return json.loads(path.read_text(encoding="utf-8"))


def _build_event_bus(events_out: Path | None) -> EventBus:
    bus = EventBus(sinks=[LoggingEventSink(logging.getLogger("planning_events"))])
    if events_out is not None:
        bus.register(FileRecorderSink(events_out))
    return bus


def _push_metrics(metrics: PrometheusMetricsClient) -> None:
    """Best-effort push; a metrics failure never changes the exit status."""
    if not metrics.is_enabled():
        return
    try:
        metrics.push_all(job="cube_planner")
    except Exception:
        LOGGER.exception("Prometheus push failed")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Compile a cube build or merge request into an ordered step plan"
    )

    parser.add_argument(
        "--metadata",
        type=Path,
        required=True,
        help="Path to a cube metadata JSON snapshot ({\"cubes\": [...], \"tables\": {...}}).",
    )

    parser.add_argument(
        "--engine-config",
        type=Path,
        required=True,
        help="Path to the engine configuration JSON.",
    )

    parser.add_argument(
        "--request",
        type=Path,
        required=True,
        help="Path to the plan request JSON (mode, cube_name, segment_name, job_uuid).",
    )

    parser.add_argument(
        "--emit",
        type=Path,
        default=None,
        help="Write the compiled plan JSON to this path.",
    )

    parser.add_argument(
        "--events-out",
        type=Path,
        default=None,
        help="Append planning events as JSON lines to this path.",
    )

    parser.add_argument(
        "--print-commands",
        action="store_true",
        help="Print the rendered command text of every step.",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Root log level.",
    )

    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    # ------------------------------------------------------------------
    # Load inputs
    # ------------------------------------------------------------------

    metadata = InMemoryMetadataStore.from_json_file(args.metadata)
    engine_config = EngineConfig.from_json_obj(_load_json(args.engine_config))
    request = parse_plan_request(_load_json(args.request))

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------

    metrics = PrometheusMetricsClient()

    with _build_event_bus(args.events_out) as event_bus:
        compiler = PlanCompiler(
            metadata=metadata,
            engine_config=engine_config,
            event_bus=event_bus,
        )

        try:
            plan = compiler.compile(request)
        except PlanError as exc:
            print(f"Error: {type(exc).__name__}: {exc}", file=sys.stderr)
            metrics.record_rejection(
                cube_name=request.cube_name,
                mode=request.mode,
                error_type=type(exc).__name__,
            )
            _push_metrics(metrics)
            sys.exit(1)

    print_plan_summary(summarize_plan(plan))

    if args.print_commands:
        print()
        print("Commands:")
        for step, command in zip(plan.steps, render_plan_commands(plan, engine_config)):
            print(f"  {step.sequence_id:>2}. {command}")

    if args.emit is not None:
        args.emit.parent.mkdir(parents=True, exist_ok=True)
        args.emit.write_text(
            json.dumps(plan.to_json_obj(), indent=2),
            encoding="utf-8",
        )
        print()
        print(f"Emitted plan to: {args.emit}")

    # --- Prometheus (side-effect only) ---
    metrics.record_plan(plan)
    _push_metrics(metrics)


if __name__ == "__main__":
    main()
