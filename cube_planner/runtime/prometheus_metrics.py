from __future__ import annotations

import json
import logging
import os
from collections import Counter
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

if TYPE_CHECKING:
    from cube_planner.planner.planner_models import Plan

LOGGER = logging.getLogger(__name__)

ENV_PUSHGATEWAY_URL = "PROMETHEUS_PUSHGATEWAY_URL"
ENV_GROUPING_KEY = "PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON"

# name -> (documentation, label names)
PLAN_GAUGES: dict[str, tuple[str, tuple[str, ...]]] = {
    "cube_plan_steps": ("Steps in the compiled plan", ("cube", "mode")),
    "cube_plan_async_steps": ("Asynchronous steps in the compiled plan", ("cube", "mode")),
    "cube_plan_category_steps": ("Compiled steps per executor family", ("cube", "mode", "category")),
    "cube_plan_rejected": ("Set to 1 when compilation was rejected", ("cube", "mode", "error_type")),
}


class PrometheusMetricsClient:
    """Pushgateway client for plan compilations.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.
      Example: http://pushgateway.monitoring.svc.cluster.local:9091

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object of string values
      used as grouping key, e.g. {"scheduler": "nightly-build"}.

    Without a URL every method is a no-op. Delivery is a side effect: callers
    never fail a compilation because a push failed.
    """

    def __init__(self) -> None:
        self._pushgateway_url = os.environ.get(ENV_PUSHGATEWAY_URL)
        self._grouping_key = self._load_grouping_key()
        self._registry = CollectorRegistry()
        self._gauges = {
            name: Gauge(name, documentation=doc, labelnames=labels, registry=self._registry)
            for name, (doc, labels) in PLAN_GAUGES.items()
        }

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get(ENV_GROUPING_KEY)
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Invalid %s; ignoring", ENV_GROUPING_KEY)
            return {}

        if not isinstance(data, dict):
            return {}

        # non-string values would make grouping paths ambiguous
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def record_plan(self, plan: Plan) -> None:
        """Set the step gauges of ``plan``."""
        if not self.is_enabled():
            return

        cube, mode = plan.cube_name, plan.mode
        self._gauges["cube_plan_steps"].labels(cube, mode).set(len(plan.steps))
        self._gauges["cube_plan_async_steps"].labels(cube, mode).set(
            sum(1 for step in plan.steps if step.run_async)
        )

        per_category = Counter(step.category.value for step in plan.steps)
        for category, count in sorted(per_category.items()):
            self._gauges["cube_plan_category_steps"].labels(cube, mode, category).set(count)

    def record_rejection(self, *, cube_name: str | None, mode: str, error_type: str) -> None:
        if not self.is_enabled():
            return

        self._gauges["cube_plan_rejected"].labels(cube_name or "", mode, error_type).set(1)

    def push_all(self, *, job: str) -> None:
        if not self.is_enabled():
            return

        push_to_gateway(
            gateway=self._pushgateway_url,
            job=job,
            registry=self._registry,
            grouping_key=self._grouping_key,
        )

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
