#!/usr/bin/env python3
"""
LAN File Transfer Client - Main Entry Point

Interactive client for downloading, uploading and listing files on a
LAN File Transfer server.

Usage:
    python main_client.py [--host HOST] [--port PORT]

Optional arguments:
    --host HOST           Server host (default: localhost)
    --port PORT           Server port, 1-65535 (default: 9000)
    --download-dir DIR    Where downloads are saved (default: Client)
    --timeout SECONDS     Read timeout (default: 30)
    --debug               Verbose logging
"""

import argparse
import asyncio
import logging
import sys

from common.constants import DEFAULT_HOST, DEFAULT_PORT, DOWNLOAD_DIR, SOCKET_TIMEOUT
from main_server import port_number


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='LAN File Transfer Client')
    parser.add_argument('--host', type=str, default=DEFAULT_HOST,
                        help=f'Server host (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=port_number, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--download-dir', type=str, default=DOWNLOAD_DIR,
                        help=f'Directory for downloaded files (default: {DOWNLOAD_DIR})')
    parser.add_argument('--timeout', type=float, default=SOCKET_TIMEOUT,
                        help=f'Read timeout in seconds (default: {SOCKET_TIMEOUT})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    from client.main_client import FileTransferClient
    from client.utils.config import ClientConfig
    from client.utils.logger import ClientLogger

    args = parse_args(argv)
    logger = ClientLogger(logging.DEBUG if args.debug else logging.INFO)

    print("🌐 File Transfer Client")
    print("=" * 50)

    try:
        config = ClientConfig(args.host, args.port, args.download_dir, args.timeout)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(2)

    client = FileTransferClient(config, logger)
    try:
        if not asyncio.run(client.interactive_mode()):
            print(f"❌ Failed to connect to server {config.host}:{config.port}")
            sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Shutting down client...")

    print("\n👋 Client terminated.")


if __name__ == "__main__":
    main()
