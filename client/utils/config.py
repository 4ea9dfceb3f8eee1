"""
Client configuration module.

This module handles client-side configuration settings.
"""

from pathlib import Path

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, MIN_PORT, MAX_PORT, DOWNLOAD_DIR, CHUNK_SIZE,
    SOCKET_TIMEOUT, CONNECT_TIMEOUT, MAX_RETRY_ATTEMPTS, RETRY_DELAY_BASE
)


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 download_dir: str = DOWNLOAD_DIR, timeout: float = SOCKET_TIMEOUT):
        if not host or not host.strip():
            raise ValueError("Host cannot be empty")
        if not MIN_PORT <= port <= MAX_PORT:
            raise ValueError(f"Port must be between {MIN_PORT} and {MAX_PORT}")

        self.host = host.strip()
        self.port = port

        # File transfer settings
        self.download_dir = Path(download_dir)
        self.chunk_size = CHUNK_SIZE

        # Connection settings
        self.timeout = timeout
        self.connect_timeout = CONNECT_TIMEOUT
        self.retry_attempts = MAX_RETRY_ATTEMPTS
        self.retry_delay = RETRY_DELAY_BASE

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_file_settings(self):
        """Get file transfer settings."""
        return {
            'download_dir': str(self.download_dir),
            'chunk_size': self.chunk_size,
            'timeout': self.timeout
        }
