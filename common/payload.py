"""
Payload streamer.

File contents are streamed raw over the connection in fixed-size chunks and
closed by the TERMINATOR bytes. The receiver stops at the first occurrence of
the terminator, so a file that itself contains those bytes arrives truncated
at that point. Changing this would change the wire format.
"""

import logging
import time
from pathlib import Path
from typing import Union

from common.channel import FramedChannel
from common.constants import CHUNK_SIZE, PROGRESS_LOG_INTERVAL, TERMINATOR
from common.errors import TransferIncomplete

PathLike = Union[str, Path]

_default_logger = logging.getLogger(__name__)


async def send_payload(channel: FramedChannel, source_path: PathLike, chunk_size: int = CHUNK_SIZE,
                       logger=None) -> int:
    """Stream a file followed by the terminator. Returns bytes sent, marker excluded."""
    logger = logger or _default_logger
    path = Path(source_path)
    bytes_sent = 0
    next_progress = PROGRESS_LOG_INTERVAL
    start = time.monotonic()

    with open(path, 'rb') as f:
        while True:
            data = f.read(chunk_size)
            if not data:
                break

            await channel.write_raw(data)
            bytes_sent += len(data)

            if bytes_sent >= next_progress:
                logger.debug(f"Send progress [{path.name}]: {bytes_sent} bytes")
                next_progress += PROGRESS_LOG_INTERVAL

    await channel.write_raw(TERMINATOR)
    await channel.flush()

    _log_throughput(logger, 'Sent', path.name, bytes_sent, start)
    return bytes_sent


async def receive_payload(channel: FramedChannel, dest_path: PathLike, chunk_size: int = CHUNK_SIZE,
                          logger=None) -> int:
    """
    Write incoming raw bytes to dest_path until the terminator is seen.

    Only the bytes before the first terminator are kept; anything after it in
    the same read is discarded. The tail of each read that could be the start
    of a terminator is held back until the next read, so a terminator split
    across two reads is still found.

    Raises TransferIncomplete if the stream ends before the terminator.
    """
    logger = logger or _default_logger
    path = Path(dest_path)
    holdback = len(TERMINATOR) - 1
    pending = b''
    bytes_received = 0
    next_progress = PROGRESS_LOG_INTERVAL
    start = time.monotonic()

    with open(path, 'wb') as f:
        while True:
            chunk = await channel.read_raw(chunk_size)
            if not chunk:
                raise TransferIncomplete(
                    f"Stream ended before end of payload ({bytes_received + len(pending)} bytes received)"
                )

            data = pending + chunk
            index = data.find(TERMINATOR)
            if index >= 0:
                f.write(data[:index])
                bytes_received += index
                break

            flush_upto = len(data) - holdback
            if flush_upto > 0:
                f.write(data[:flush_upto])
                bytes_received += flush_upto
                pending = data[flush_upto:]
            else:
                pending = data

            if bytes_received >= next_progress:
                logger.debug(f"Receive progress [{path.name}]: {bytes_received} bytes")
                next_progress += PROGRESS_LOG_INTERVAL

    _log_throughput(logger, 'Received', path.name, bytes_received, start)
    return bytes_received


def _log_throughput(logger, verb: str, name: str, size: int, start: float):
    elapsed = time.monotonic() - start
    speed = size / (1024.0 * max(elapsed, 0.001))
    logger.info(f"{verb} {name}: {size} bytes in {elapsed * 1000:.0f} ms ({speed:.1f} KB/s)")
