"""
metrics.py - Prometheus counters for routed chat events.
"""
import os
from typing import Optional

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest


class DispatchMetrics:
    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self.outcomes = Counter(
            "dispatch_outcome_total",
            "Chat events routed by the dispatcher, by path and outcome",
            ["path", "outcome"], registry=self.registry
        )

    def record(self, path: str, outcome) -> None:
        self.outcomes.labels(path, getattr(outcome, "value", outcome)).inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)


# HTTP endpoint, optionally behind a shared key
async def metrics_handler(request):
    api_key = os.getenv("METRICS_AUTH_KEY")
    if api_key and request.headers.get("X-Metrics-Auth") != api_key:
        raise web.HTTPForbidden()
    metrics: DispatchMetrics = request.app["metrics"]
    return web.Response(body=metrics.render(), headers={"Content-Type": CONTENT_TYPE_LATEST})
