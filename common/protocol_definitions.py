"""
Protocol definitions for the LAN File Transfer system.

This module defines the status strings and text formats exchanged as control
frames between client and server, plus the result structure returned by
client operations.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from common.constants import Commands, Status

_STORED_SIZE = re.compile(r"\((\d+) bytes\)$")


@dataclass
class TransferResult:
    """Outcome of one client-side operation."""
    ok: bool
    message: str
    size: int = 0
    path: Optional[str] = None


def create_success_message(size: int) -> str:
    """Create the upload success status."""
    return f"{Status.SUCCESS} File uploaded successfully ({size} bytes)"


def create_error_message(detail: str) -> str:
    """Create an error status."""
    return f"{Status.ERROR} {detail}"


def create_cancelled_message() -> str:
    """Create the upload cancellation status."""
    return f"{Status.CANCELLED} Upload cancelled by user"


def create_invalid_request_message(request: str) -> str:
    """Create the reply to an unrecognised command code."""
    valid = ', '.join(f"{code}({label})" for code, label in Commands.LABELS.items())
    return create_error_message(f"Invalid request: '{request}'. Valid requests: {valid}")


def format_file_listing(root_name: str, names: List[str]) -> str:
    """Format a 1-based numbered file listing with a trailing total."""
    lines = [f"Files in {root_name}:"]
    if not names:
        lines.append("(No files found)")
    else:
        for index, name in enumerate(names, start=1):
            lines.append(f"{index}. {name}")
    lines.append("")
    lines.append(f"Total: {len(names)} file(s)")
    return '\n'.join(lines)


def parse_stored_size(message: str) -> Optional[int]:
    """Byte count the server reports in an upload success status, if present."""
    match = _STORED_SIZE.search(message)
    return int(match.group(1)) if match else None


def is_success(message: str) -> bool:
    return message.startswith(Status.SUCCESS)


def is_error(message: str) -> bool:
    return message.startswith(Status.ERROR)


def is_cancelled(message: str) -> bool:
    return message.startswith(Status.CANCELLED)


def is_overwrite_confirmed(answer: str) -> bool:
    """Only a case-insensitive YES confirms an overwrite."""
    return answer.strip().upper() == Status.YES
