"""
HTTP surface of the introspection server.

Provides:
- /v1/*: JSON snapshots
- /: list of available snapshot paths
- /metrics: Prometheus-format metrics
"""

from cni_introspect.http.metrics import METRICS_PATH, metrics_route
from cni_introspect.http.request_log import RequestLoggingMiddleware
from cni_introspect.http.routes import (
    AvailableCommands,
    create_app,
    encode_snapshot,
    snapshot_routes,
)

__all__ = [
    "METRICS_PATH",
    "metrics_route",
    "RequestLoggingMiddleware",
    "AvailableCommands",
    "create_app",
    "encode_snapshot",
    "snapshot_routes",
]
