"""
Server configuration module.

This module handles server-side configuration settings.
"""

from pathlib import Path

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_BACKLOG, MAX_PORT, STORAGE_DIR, LOG_DIR,
    CHUNK_SIZE, SOCKET_TIMEOUT, SHUTDOWN_TIMEOUT
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 backlog: int = DEFAULT_BACKLOG, storage_dir: str = STORAGE_DIR,
                 logs_dir: str = LOG_DIR, timeout: float = SOCKET_TIMEOUT,
                 shutdown_timeout: float = SHUTDOWN_TIMEOUT):
        # Port 0 lets the OS pick a free port when embedding the server
        if not 0 <= port <= MAX_PORT:
            raise ValueError(f"Port must be between 0 and {MAX_PORT}")
        if backlog < 1:
            raise ValueError("Backlog must be positive")

        self.host = host
        self.port = port
        self.backlog = backlog

        # Storage root is fixed at start and always absolute
        self.storage_dir = Path(storage_dir).resolve()

        # Logging configuration
        self.logs_dir = logs_dir

        # File transfer settings
        self.chunk_size = CHUNK_SIZE

        # Connection settings
        self.timeout = timeout
        self.shutdown_timeout = shutdown_timeout

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'backlog': self.backlog
        }

    def get_file_settings(self):
        """Get file transfer settings."""
        return {
            'storage_dir': str(self.storage_dir),
            'chunk_size': self.chunk_size,
            'timeout': self.timeout
        }
