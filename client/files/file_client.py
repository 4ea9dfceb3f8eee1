"""
File client module.

This module handles the client side of the download, upload, list and
disconnect exchanges. It does no terminal I/O itself: overwrite questions are
delegated to a confirm callback supplied by the caller.
"""

import asyncio
import re
from pathlib import Path, PurePosixPath
from typing import Awaitable, Callable, Optional

from common.channel import FramedChannel
from common.constants import Commands, Status, MAX_HANDSHAKE_ROUNDS
from common.errors import TransferError, MalformedFrame
from common.payload import send_payload, receive_payload
from common.protocol_definitions import TransferResult, is_success, parse_stored_size

ConfirmOverwrite = Callable[[str], Awaitable[bool]]

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9.-]')


def sanitize_file_name(name: str) -> str:
    """Keep the last path segment and replace anything outside [A-Za-z0-9.-] with '_'."""
    base = PurePosixPath(name.replace('\\', '/')).name
    return _UNSAFE_CHARS.sub('_', base)


class FileClient:
    """Client-side file transfer functionality."""

    def __init__(self, config, logger):
        self.config = config
        self.logger = logger
        self.channel: Optional[FramedChannel] = None

    @property
    def connected(self) -> bool:
        return self.channel is not None

    async def connect(self) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        attempts = self.config.retry_attempts

        for attempt in range(1, attempts + 1):
            try:
                reader, writer = await asyncio.wait_for(
                    asyncio.open_connection(self.config.host, self.config.port),
                    timeout=self.config.connect_timeout
                )
            except (OSError, asyncio.TimeoutError) as e:
                self.logger.log_connection(self.config.get_connection_info(), False)
                self.logger.log_error("connection", e)
                if attempt < attempts:
                    delay = self.config.retry_delay * (2 ** (attempt - 1))
                    self.logger.info(f"Retrying connection in {delay}s (attempt {attempt}/{attempts})...")
                    await asyncio.sleep(delay)
                continue

            self.channel = FramedChannel(reader, writer, self.config.timeout)
            self.config.download_dir.mkdir(parents=True, exist_ok=True)
            self.logger.log_connection(self.config.get_connection_info(), True)
            self.logger.debug(f"Transfer settings: {self.config.get_file_settings()}")
            return True

        self.logger.error(f"Failed to connect after {attempts} attempts")
        return False

    async def download_file(self, name: str, confirm_overwrite: ConfirmOverwrite) -> TransferResult:
        """Download a file from the server into the download directory."""
        channel = self._require_channel()

        safe_name = sanitize_file_name(name.strip())
        if safe_name in ('', '.', '..'):
            return TransferResult(False, f"Invalid file name: {name!r}")

        dest = self.config.download_dir / safe_name
        if dest.exists():
            if not dest.is_file():
                return TransferResult(False, f"Not a regular file: {dest}")
            if not await confirm_overwrite(safe_name):
                return TransferResult(False, "Download cancelled", path=str(dest))

        await channel.send(Commands.DOWNLOAD)
        await channel.send(safe_name)

        response = await channel.receive()
        if response != Status.READY:
            return TransferResult(False, response)

        try:
            size = await receive_payload(channel, dest, self.config.chunk_size, self.logger)
        except (TransferError, OSError):
            dest.unlink(missing_ok=True)
            raise

        self.logger.log_file_download(safe_name, size)
        return TransferResult(True, f"File downloaded successfully: {safe_name} ({size} bytes)",
                              size, str(dest))

    async def upload_file(self, file_path: str, confirm_overwrite: ConfirmOverwrite) -> TransferResult:
        """Upload a local file to the server."""
        channel = self._require_channel()

        file_path = file_path.strip()
        if not file_path:
            return TransferResult(False, "File path cannot be empty")

        source = Path(file_path)
        if not source.exists():
            return TransferResult(False, f"File does not exist: {file_path}")
        if not source.is_file():
            return TransferResult(False, f"Not a regular file: {file_path}")

        await channel.send(Commands.UPLOAD)
        await channel.send(source.name)

        # The server asks at most once about overwriting, then answers READY or a status
        for _ in range(MAX_HANDSHAKE_ROUNDS):
            response = await channel.receive()
            if response == Status.READY:
                break
            if response == Status.EXISTS:
                confirmed = await confirm_overwrite(source.name)
                await channel.send(Status.YES if confirmed else Status.NO)
                continue
            return TransferResult(False, response)
        else:
            raise MalformedFrame("Upload handshake did not reach READY")

        sent = await send_payload(channel, source, self.config.chunk_size, self.logger)
        status = await channel.receive()
        if not is_success(status):
            return TransferResult(False, status, path=str(source))

        # The server stops at the first terminator, so it may store less than was sent
        size = parse_stored_size(status)
        if size is None:
            size = sent
        elif size != sent:
            self.logger.warning(f"Server stored {size} of {sent} bytes sent for '{source.name}'")

        self.logger.log_file_upload(source.name, size)
        return TransferResult(True, status, size, str(source))

    async def list_files(self) -> str:
        """Request the formatted file listing."""
        channel = self._require_channel()
        await channel.send(Commands.LIST)
        return await channel.receive()

    async def disconnect(self):
        """Tell the server the session is over and close the connection."""
        if self.channel is None:
            return
        try:
            await self.channel.send(Commands.DISCONNECT)
        finally:
            await self.close()

    async def close(self):
        if self.channel is None:
            return
        channel, self.channel = self.channel, None
        await channel.close()

    def _require_channel(self) -> FramedChannel:
        if self.channel is None:
            raise ConnectionError("Not connected to server")
        return self.channel
