"""
Introspection route table.

Maps each fixed path to a handler that serializes one provider's snapshot
to JSON. `/` and every unmatched path answer with the list of available
data paths; `/metrics` is delegated to prometheus_client.
"""

import dataclasses
import json
from http import HTTPStatus
from typing import Any, Callable, Mapping

from prometheus_client import REGISTRY, CollectorRegistry
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route, Router
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocketClose

from cni_introspect.http.metrics import METRICS_PATH, metrics_route, snapshot_errors_total
from cni_introspect.http.request_log import RequestLoggingMiddleware
from cni_introspect.providers import SnapshotProvider, SnapshotProviders
from cni_introspect.utils import get_logger

logger = get_logger(__name__)


ROOT_PATH = "/"
ENIS_PATH = "/v1/enis"
PODS_PATH = "/v1/pods"
NETWORKUTILS_ENV_SETTINGS_PATH = "/v1/networkutils-env-settings"
IPAMD_ENV_SETTINGS_PATH = "/v1/ipamd-env-settings"
ENI_CONFIGS_PATH = "/v1/eni-configs"

INTERNAL_ERROR_TEXT = HTTPStatus.INTERNAL_SERVER_ERROR.phrase
JSON_MEDIA_TYPE = "application/json"


def snapshot_routes(providers: SnapshotProviders) -> dict[str, SnapshotProvider]:
    """Return the fixed path -> provider mapping, in listing order."""
    return {
        ENIS_PATH: providers.enis,
        PODS_PATH: providers.pods,
        NETWORKUTILS_ENV_SETTINGS_PATH: providers.networkutils_env_settings,
        IPAMD_ENV_SETTINGS_PATH: providers.ipamd_env_settings,
        ENI_CONFIGS_PATH: providers.eni_configs,
    }


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_snapshot(value: Any) -> bytes:
    """
    Serialize a snapshot to a JSON document.

    Raises:
        TypeError: value contains something JSON cannot represent
        ValueError: value contains NaN/infinity or a reference cycle
    """
    return json.dumps(value, default=_jsonable, allow_nan=False).encode("utf-8")


def snapshot_endpoint(path: str, provider: SnapshotProvider) -> Callable[[Request], Response]:
    """
    Build the handler serving one provider's snapshot.

    The handler is synchronous so Starlette runs it in its threadpool; a slow
    provider only holds up its own request.
    """

    def endpoint(request: Request) -> Response:
        try:
            body = encode_snapshot(provider())
        except Exception:
            # Provider and serialization failures both end here; the client
            # only ever sees the status phrase.
            logger.exception(f"Failed to marshal snapshot for {path}")
            snapshot_errors_total.labels(path=path).inc()
            return PlainTextResponse(
                INTERNAL_ERROR_TEXT, status_code=HTTPStatus.INTERNAL_SERVER_ERROR
            )
        return Response(body, media_type=JSON_MEDIA_TYPE)

    return endpoint


class AvailableCommands:
    """
    Default ASGI handler listing the registered data paths.

    The document is encoded once; every request gets the same bytes
    regardless of method or query.
    """

    def __init__(self, paths: list[str]):
        self.paths = list(paths)
        self.body = json.dumps({"AvailableCommands": self.paths}).encode("utf-8")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await WebSocketClose()(scope, receive, send)
            return
        response = Response(self.body, media_type=JSON_MEDIA_TYPE)
        await response(scope, receive, send)


def _validate_paths(paths: list[str]) -> None:
    for path in paths:
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")
        if path in (ROOT_PATH, METRICS_PATH):
            raise ValueError(f"Route path {path!r} is reserved")


def create_app(
    routes: Mapping[str, SnapshotProvider],
    registry: CollectorRegistry = REGISTRY,
) -> ASGIApp:
    """
    Build the introspection ASGI app.

    Args:
        routes: Data path -> snapshot provider, see `snapshot_routes`
        registry: Prometheus registry exposed at /metrics

    Returns:
        The route table wrapped by the request logger

    Raises:
        ValueError: If a path is malformed or reserved
    """
    paths = list(routes)
    _validate_paths(paths)

    root = AvailableCommands(paths)

    table = [
        Route(path, snapshot_endpoint(path, provider), methods=["GET"])
        for path, provider in routes.items()
    ]
    # Registered after the listing is built, so /metrics is never advertised
    table.append(metrics_route(registry))

    router = Router(routes=table, default=root, redirect_slashes=False)

    # Log all requests and then pass through to the router
    return RequestLoggingMiddleware(router)
