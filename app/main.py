#!/usr/bin/env python3
"""
CNI Introspection Server - Entry Point

Serves read-only JSON snapshots of ENI, pod and configuration state, plus
Prometheus metrics, until interrupted.
"""

import argparse
import signal
import sys
from pathlib import Path

# Add app directory to path for imports when running directly
APP_DIR = Path(__file__).parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from pydantic import ValidationError

from cni_introspect import __version__
from cni_introspect.config import load_config
from cni_introspect.http import create_app, snapshot_routes
from cni_introspect.providers import standalone_providers
from cni_introspect.server import IntrospectionServer
from cni_introspect.utils import get_logger, setup_logging

logger = get_logger("cni_introspect.main")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="CNI introspection server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start on the default port
  python main.py

  # Listen on all interfaces, custom port
  python main.py --host 0.0.0.0 --port 9000

  # Use custom config directory
  python main.py --config-dir /path/to/config
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cni-introspect {__version__}",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        help="Configuration directory path (default: ~/.cni-introspect/)",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (overrides config)",
    )
    return parser.parse_args()


def setup_signal_handlers(server: IntrospectionServer) -> None:
    """Stop the server on SIGINT/SIGTERM."""

    def handle_stop(signum, frame):
        logger.info(f"Received signal {signum}, stopping")
        server.stop()

    signal.signal(signal.SIGINT, handle_stop)
    signal.signal(signal.SIGTERM, handle_stop)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    try:
        config = load_config(args.config_dir)
    except ValidationError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.log_level:
        config.server.log_level = args.log_level

    setup_logging(config.server.log_level)

    providers = standalone_providers()
    app = create_app(snapshot_routes(providers.bundle()))
    server = IntrospectionServer(app, config.server, config.backoff)

    setup_signal_handlers(server)

    logger.info(f"CNI introspection server v{__version__}")
    server.start()
    # join() with a timeout keeps the main thread responsive to signals
    while not server.join(timeout=1.0):
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
