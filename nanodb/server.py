#!/usr/bin/env python3
"""
NanoDB Server Entry Point

This is the main entry point for starting the NanoDB server.

Usage:
    AUTH_TOKEN=secret python -m nanodb.server              # Default settings (0.0.0.0:7878)
    python -m nanodb.server --auth-token secret --port 9000
    python -m nanodb.server --host 127.0.0.1               # Custom host
    python -m nanodb.server --debug                        # Enable debug logging

Environment Variables:
    AUTH_TOKEN              - Shared secret clients must send first (required)
    NANODB_HOST             - Server bind address
    NANODB_PORT             - Server port
    NANODB_SWEEP_INTERVAL   - Seconds between expiration sweeps
    NANODB_DEBUG            - Enable debug mode (true/false)
    NANODB_LOG_LEVEL        - Log level when debug mode is off
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from .cache.store import ExpiringStore
from .config.settings import settings
from .network.tcp_server import NanoDBServer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse and validate command line arguments."""
    parser = argparse.ArgumentParser(
        description="NanoDB: Networked In-Memory Key-Value Store",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--auth-token",
        type=str,
        default=settings.AUTH_TOKEN,
        help="Shared authentication token (defaults to $AUTH_TOKEN)",
    )

    parser.add_argument(
        "--sweep-interval",
        type=float,
        default=settings.SWEEP_INTERVAL,
        help="Seconds between expiration sweeps",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    if not args.auth_token:
        parser.error("AUTH_TOKEN must be set (environment variable or --auth-token)")
    if args.sweep_interval <= 0:
        parser.error("--sweep-interval must be positive")

    return args


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    store = ExpiringStore()
    server = NanoDBServer(
        host=args.host,
        port=args.port,
        auth_token=args.auth_token,
        store=store,
        sweep_interval=args.sweep_interval,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting NanoDB server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Sweep interval: {args.sweep_interval}s")
    logger.info(f"  Debug: {args.debug}")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except OSError as e:
        logger.error(f"Failed to start server: {e}")
        raise
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
