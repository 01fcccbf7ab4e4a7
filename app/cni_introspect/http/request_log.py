"""
Request logging middleware.

Logs every inbound HTTP request before it reaches the route table.
"""

from starlette.types import ASGIApp, Receive, Scope, Send

from cni_introspect.utils import get_logger

logger = get_logger(__name__)


def _remote_addr(scope: Scope) -> str:
    client = scope.get("client")
    if not client:
        return "-"
    host, port = client
    return f"{host}:{port}"


def _request_uri(scope: Scope) -> str:
    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else scope.get("path", "/")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


class RequestLoggingMiddleware:
    """
    Log method, remote address and URI of every request, then delegate.

    One log record per request, unconditionally and before any response
    bytes are written. Exceptions from the wrapped app propagate unchanged.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            logger.info(
                f"Handling http request method={scope['method']} "
                f"from={_remote_addr(scope)} uri={_request_uri(scope)}"
            )
        await self.app(scope, receive, send)
