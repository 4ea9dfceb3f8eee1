"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.constants import TRANSFER_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: Optional[str] = 'logs', log_level: int = logging.INFO,
                 name: str = 'file_transfer_server'):
        # Set up main logger
        self.logger = logging.getLogger(name)
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Transfer history file, disabled when no logs_dir is given
        self.transfer_log_path = None
        if logs_dir:
            logs_path = Path(logs_dir)
            logs_path.mkdir(parents=True, exist_ok=True)
            self.transfer_log_path = logs_path / TRANSFER_LOG_FILE

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_startup(self, connection_info: dict, file_settings: dict):
        """Log server start."""
        self.info(f"Server listening on {connection_info['host']}:{connection_info['port']} "
                  f"(backlog: {connection_info['backlog']})")
        self.info(f"  Storage root: {file_settings['storage_dir']}")
        self.info(f"  Chunk size: {file_settings['chunk_size']} bytes, read timeout: {file_settings['timeout']}s")

    def log_connection(self, addr: tuple):
        """Log client connection."""
        self.info(f"New connection from {addr}")

    def log_disconnect(self, addr: tuple, bytes_transferred: int):
        """Log client disconnect."""
        self.info(f"Connection closed: {addr} ({bytes_transferred} bytes transferred)")

    def log_file_upload(self, filename: str, size: int, addr: tuple):
        """Log file upload."""
        self.info(f"✓ FILE UPLOAD SUCCESS: '{filename}' ({size} bytes) from {addr}")
        self._write_to_file(f"{datetime.now().isoformat()} | UPLOAD | {filename} | FROM: {addr} | SIZE: {size} bytes")

    def log_file_download(self, filename: str, size: int, addr: tuple):
        """Log file download."""
        self.info(f"✓ FILE DOWNLOAD SUCCESS: '{filename}' ({size} bytes) to {addr}")
        self._write_to_file(f"{datetime.now().isoformat()} | DOWNLOAD | {filename} | TO: {addr} | SIZE: {size} bytes")

    def log_rejected(self, operation: str, filename: str, addr: tuple, reason: str):
        """Log a rejected file operation."""
        self.warning(f"{operation} rejected for {addr}: {filename!r} ({reason})")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, content: str):
        """Append a line to the transfer history file."""
        if self.transfer_log_path is None:
            return
        try:
            with open(self.transfer_log_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {self.transfer_log_path}: {e}")
