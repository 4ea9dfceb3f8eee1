"""
Shared constants for the LAN File Transfer system.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 9000
DEFAULT_BACKLOG = 50
MIN_PORT = 1
MAX_PORT = 65535

# Buffer Sizes
CHUNK_SIZE = 8192
PROGRESS_LOG_INTERVAL = 1024 * 1024  # Log progress every 1MB
FRAME_HEADER_SIZE = 2  # bytes for control frame length header
MAX_FRAME_SIZE = 0xFFFF

# Payload end marker, scanned for in the raw byte stream
TERMINATOR = b'finish'

# Timeouts
SOCKET_TIMEOUT = 30  # seconds
SHUTDOWN_TIMEOUT = 5  # seconds
CONNECT_TIMEOUT = 10  # seconds

# Retry
MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_BASE = 1.0  # seconds
MAX_PROMPT_ATTEMPTS = 3
MAX_HANDSHAKE_ROUNDS = 3

# File Transfer
STORAGE_DIR = 'Data'
DOWNLOAD_DIR = 'Client'

# Logging
LOG_DIR = 'logs'
TRANSFER_LOG_FILE = 'file_transfers.log'


# Command codes (client to server)
class Commands:
    DOWNLOAD = '1'
    UPLOAD = '2'
    LIST = '3'
    DISCONNECT = '4'

    LABELS = {
        DOWNLOAD: 'Download',
        UPLOAD: 'Upload',
        LIST: 'List',
        DISCONNECT: 'Exit',
    }


# Handshake tokens and status prefixes
class Status:
    READY = 'READY'
    EXISTS = 'EXISTS'
    YES = 'YES'
    NO = 'NO'

    SUCCESS = 'SUCCESS:'
    ERROR = 'ERROR:'
    CANCELLED = 'CANCELLED:'
