"""
Prometheus metrics endpoint.

Provides /metrics in Prometheus exposition format, plus the counters the
introspection server itself maintains.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    generate_latest,
)
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route


METRICS_PATH = "/metrics"

serve_failures_total = Counter(
    "introspection_serve_failures_total",
    "Times the introspection HTTP server stopped serving and was restarted",
)

snapshot_errors_total = Counter(
    "introspection_snapshot_errors_total",
    "Snapshot requests answered with 500, by path",
    ["path"],
)


def metrics_route(registry: CollectorRegistry = REGISTRY) -> Route:
    """
    Get the metrics route.

    Args:
        registry: Collector registry to expose

    Returns:
        Starlette Route serving `registry` at /metrics
    """

    def metrics_endpoint(request: Request) -> Response:
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return Route(METRICS_PATH, metrics_endpoint, methods=["GET"])
