"""
Integration test fixtures.

Runs the introspection server in-process on a free local port.
"""

import socket
import time
from typing import Generator

import httpx
import pytest

from cni_introspect.config import BackoffSettings, ServerSettings
from cni_introspect.http import create_app, snapshot_routes
from cni_introspect.providers import StandaloneProviders, standalone_providers
from cni_introspect.server import IntrospectionServer

TEST_HOST = "127.0.0.1"
FAST_BACKOFF = BackoffSettings(minimum=0.05, maximum=0.2, multiple=2, jitter=0.2)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((TEST_HOST, 0))
        return sock.getsockname()[1]


def wait_for_http(url: str, timeout: float = 10.0) -> None:
    """Poll url until the server answers."""
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            httpx.get(url, timeout=1.0)
            return
        except httpx.RequestError:
            pass
        time.sleep(0.05)
    raise RuntimeError(f"Server at {url} did not come up within {timeout}s")


class RunningServer:
    """An introspection server bound to a test port."""

    def __init__(self, port: int):
        self.port = port
        self.url = f"http://{TEST_HOST}:{port}"
        self.stores: StandaloneProviders = standalone_providers()
        app = create_app(snapshot_routes(self.stores.bundle()))
        self.server = IntrospectionServer(
            app,
            ServerSettings(host=TEST_HOST, port=port, read_timeout=5, write_timeout=1),
            FAST_BACKOFF,
        )

    def start(self, wait: bool = True) -> None:
        self.server.start()
        if wait:
            wait_for_http(self.url)

    def stop(self) -> None:
        self.server.stop()
        if not self.server.join(timeout=10.0):
            raise RuntimeError("introspection server did not stop")


@pytest.fixture
def running_server() -> Generator[RunningServer, None, None]:
    """
    Start the introspection server for one test.

    Yields:
        RunningServer with started listener
    """
    server = RunningServer(free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def client(running_server: RunningServer) -> Generator[httpx.Client, None, None]:
    """
    Get HTTP client configured for the test server.

    Yields:
        httpx.Client instance
    """
    with httpx.Client(base_url=running_server.url, timeout=10.0) as client:
        yield client


@pytest.fixture
def make_server() -> Generator:
    """
    Factory for servers a test starts itself.

    Every server created is stopped at teardown.
    """
    created: list[RunningServer] = []

    def factory(port: int | None = None) -> RunningServer:
        server = RunningServer(port or free_port())
        created.append(server)
        return server

    yield factory
    for server in created:
        server.stop()
