"""
Framed message channel.

Control messages travel as length-prefixed UTF-8 frames: a 2-byte big-endian
length followed by that many bytes of text. Raw payload bytes share the same
stream but bypass the framing through read_raw/write_raw.
"""

import asyncio
import struct
from typing import Optional

from common.constants import FRAME_HEADER_SIZE, MAX_FRAME_SIZE, SOCKET_TIMEOUT
from common.errors import ChannelClosed, MalformedFrame, TransferTimeout

_HEADER = struct.Struct('>H')


class FramedChannel:
    """Length-prefixed text frames plus raw byte access over one stream."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 timeout: Optional[float] = SOCKET_TIMEOUT):
        self.reader = reader
        self.writer = writer
        self.timeout = timeout
        self._send_lock = asyncio.Lock()

    @property
    def peername(self):
        return self.writer.get_extra_info('peername')

    async def send(self, text: str):
        """Write one frame. Concurrent sends never interleave."""
        data = text.encode('utf-8')
        if len(data) > MAX_FRAME_SIZE:
            raise MalformedFrame(f"Frame too large ({len(data)} bytes, max {MAX_FRAME_SIZE})")

        async with self._send_lock:
            self.writer.write(_HEADER.pack(len(data)) + data)
            await self._drain()

    async def receive(self) -> str:
        """Block until one complete frame is available and return its text."""
        try:
            header = await self._wait(self.reader.readexactly(FRAME_HEADER_SIZE))
        except asyncio.IncompleteReadError as e:
            if not e.partial:
                raise ChannelClosed("Peer closed the connection") from None
            raise MalformedFrame("Stream ended inside a frame header") from None

        (length,) = _HEADER.unpack(header)
        try:
            body = await self._wait(self.reader.readexactly(length))
        except asyncio.IncompleteReadError as e:
            raise MalformedFrame(
                f"Frame declared {length} bytes but stream ended after {len(e.partial)}"
            ) from None

        try:
            return body.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedFrame(f"Frame is not valid UTF-8: {e}") from None

    async def read_raw(self, size: int) -> bytes:
        """Read up to size raw bytes. Returns b'' at end of stream."""
        return await self._wait(self.reader.read(size))

    async def write_raw(self, data: bytes):
        async with self._send_lock:
            self.writer.write(data)
            await self._drain()

    async def flush(self):
        async with self._send_lock:
            await self._drain()

    async def close(self):
        if not self.writer.is_closing():
            self.writer.close()
        try:
            await self.writer.wait_closed()
        except ConnectionError:
            # Peer already dropped the transport
            pass

    async def _drain(self):
        try:
            await self._wait(self.writer.drain())
        except ConnectionError as e:
            raise ChannelClosed(f"Connection lost while writing: {e}") from e

    async def _wait(self, awaitable):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise TransferTimeout(f"No data within {self.timeout}s") from None
        except ConnectionResetError as e:
            raise ChannelClosed(f"Connection reset by peer: {e}") from e
