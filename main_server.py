#!/usr/bin/env python3
"""
LAN File Transfer Server - Main Entry Point

Serves download, upload and list requests from a sandboxed storage directory.

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           TCP port, 1-65535 (default: 9000)
    --backlog N           Pending connection queue length (default: 50)
    --storage-dir DIR     Storage root (default: Data)
    --logs-dir DIR        Transfer history directory (default: logs)
    --timeout SECONDS     Per-connection read timeout (default: 30)
    --debug               Verbose logging
"""

import argparse
import asyncio
import logging
import sys

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_BACKLOG, MIN_PORT, MAX_PORT,
    STORAGE_DIR, LOG_DIR, SOCKET_TIMEOUT
)


def port_number(value: str) -> int:
    """argparse type for a TCP port in 1-65535."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not MIN_PORT <= port <= MAX_PORT:
        raise argparse.ArgumentTypeError(f"port must be between {MIN_PORT} and {MAX_PORT}")
    return port


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError("must be positive")
    return number


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='LAN File Transfer Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=port_number, default=DEFAULT_PORT,
                        help=f'TCP port (default: {DEFAULT_PORT})')
    parser.add_argument('--backlog', type=positive_int, default=DEFAULT_BACKLOG,
                        help=f'Connection backlog (default: {DEFAULT_BACKLOG})')
    parser.add_argument('--storage-dir', type=str, default=STORAGE_DIR,
                        help=f'Storage root directory (default: {STORAGE_DIR})')
    parser.add_argument('--logs-dir', type=str, default=LOG_DIR,
                        help=f'Directory for the transfer history log (default: {LOG_DIR})')
    parser.add_argument('--timeout', type=float, default=SOCKET_TIMEOUT,
                        help=f'Per-connection read timeout in seconds (default: {SOCKET_TIMEOUT})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    from server.main_server import FileTransferServer
    from server.utils.config import ServerConfig
    from server.utils.logger import ServerLogger

    args = parse_args(argv)
    logger = ServerLogger(args.logs_dir, logging.DEBUG if args.debug else logging.INFO)

    try:
        config = ServerConfig(
            host=args.host,
            port=args.port,
            backlog=args.backlog,
            storage_dir=args.storage_dir,
            logs_dir=args.logs_dir,
            timeout=args.timeout
        )
        server = FileTransferServer(config, logger)
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Server shut down")
    except OSError as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
