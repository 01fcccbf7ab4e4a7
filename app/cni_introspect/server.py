"""
Introspection server lifecycle.

Runs the uvicorn listener on a background thread and restarts it with
exponential backoff whenever it stops serving, until `stop()` is called.
"""

import threading
from typing import Callable, Optional

import uvicorn
from starlette.types import ASGIApp

from cni_introspect.backoff import SimpleBackoff, retry_with_backoff
from cni_introspect.config import BackoffSettings, ServerSettings
from cni_introspect.http.metrics import serve_failures_total
from cni_introspect.utils import get_logger, once

logger = get_logger(__name__)


class ServeError(Exception):
    """Raised when a serve attempt ends without a stop request."""


class IntrospectionServer:
    """
    Keeps the introspection HTTP server available for the process lifetime.

    The uvicorn Config (address, app, timeouts) is built once; every serve
    attempt runs it in a fresh uvicorn.Server. A failed or unexpectedly
    finished attempt is logged once, counted, and retried after a backoff
    delay. There is no retry limit.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: ServerSettings,
        backoff: BackoffSettings,
        server_factory: Callable[[uvicorn.Config], uvicorn.Server] = uvicorn.Server,
    ):
        self.settings = settings
        self.backoff_settings = backoff
        self.config = uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            timeout_keep_alive=settings.read_timeout,
            timeout_graceful_shutdown=settings.write_timeout,
            lifespan="off",
            # Leave logging to the owning process
            log_config=None,
            access_log=False,
        )
        self._server_factory = server_factory
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._active: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> str:
        return f"{self.settings.host}:{self.settings.port}"

    def start(self) -> threading.Thread:
        """Run `serve_forever` on a daemon thread."""
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.serve_forever,
                name="introspection-server",
                daemon=True,
            )
            self._thread.start()
        return self._thread

    def serve_forever(self) -> None:
        """Serve, restarting with backoff on every failure, until stopped."""
        logger.info(f"Starting introspection server on {self.address}")
        while not self._stop.is_set():
            backoff = SimpleBackoff.from_settings(self.backoff_settings)
            retry_with_backoff(backoff, self._listen_and_serve, stop=self._stop)
        logger.info("Introspection server stopped")

    def stop(self) -> None:
        """Ask the active listener to exit and end the restart loop."""
        self._stop.set()
        with self._lock:
            if self._active is not None:
                self._active.should_exit = True

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the serving thread. Returns True if it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _listen_and_serve(self) -> None:
        # Fresh guard per attempt: one failure, one log record
        report = once(self._report_failure)

        server = self._server_factory(self.config)
        with self._lock:
            if self._stop.is_set():
                return
            self._active = server

        try:
            server.run()
        except (Exception, SystemExit) as e:
            # uvicorn exits with SystemExit when it cannot bind
            report(e)
            raise ServeError(f"http api on {self.address} failed") from e
        finally:
            with self._lock:
                self._active = None

        if not self._stop.is_set():
            report(None)
            raise ServeError(f"http api on {self.address} stopped serving")

    def _report_failure(self, error: Optional[BaseException]) -> None:
        serve_failures_total.inc()
        if error is None:
            logger.error(f"Error running http api on {self.address}: server exited")
        else:
            logger.error(f"Error running http api on {self.address}: {error!r}")
