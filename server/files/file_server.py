"""
File server module.

This module handles the server side of the upload, download and list
exchanges. Every client supplied file name is resolved through the
PathSandbox before it touches the file system.
"""

import asyncio
import os
import stat
from pathlib import Path
from typing import Optional

from common.constants import Status, CHUNK_SIZE
from common.errors import TransferError, InvalidPath, NotFound, MalformedFrame
from common.payload import send_payload, receive_payload
from common.protocol_definitions import (
    create_success_message, create_error_message, create_cancelled_message,
    format_file_listing, is_overwrite_confirmed
)
from server.files.sandbox import PathSandbox


class FileServer:
    """Server-side file transfer functionality."""

    def __init__(self, sandbox: PathSandbox, logger, chunk_size: int = CHUNK_SIZE):
        self.sandbox = sandbox
        self.logger = logger
        self.chunk_size = chunk_size

    async def handle_upload(self, session):
        """Receive a file from the client into the storage root."""
        channel = session.channel
        filename = await channel.receive()

        try:
            file_path = self.sandbox.resolve(filename)
        except InvalidPath as e:
            self.logger.log_rejected("Upload", filename, session.peer, str(e))
            await channel.send(create_error_message("Invalid file name"))
            return

        try:
            existing = _stat_or_none(file_path)
        except OSError as e:
            self.logger.log_rejected("Upload", filename, session.peer, str(e))
            await channel.send(create_error_message(f"Cannot access file - {e.strerror or e}"))
            return

        if existing is not None:
            if not stat.S_ISREG(existing.st_mode):
                self.logger.log_rejected("Upload", filename, session.peer, "not a regular file")
                await channel.send(create_error_message(f"Not a regular file - {file_path.name}"))
                return

            await channel.send(Status.EXISTS)
            answer = await channel.receive()
            session.overwrite = is_overwrite_confirmed(answer)
            if not session.overwrite:
                self.logger.info(f"Upload of '{file_path.name}' cancelled by {session.peer}")
                await channel.send(create_cancelled_message())
                return

        await channel.send(Status.READY)

        try:
            size = await receive_payload(channel, file_path, self.chunk_size, self.logger)
        except asyncio.CancelledError:
            file_path.unlink(missing_ok=True)
            raise
        except (TransferError, OSError) as e:
            self.logger.log_error(f"upload of '{file_path.name}'", e)
            file_path.unlink(missing_ok=True)
            await self._send_failure(channel, f"Upload failed - {e}")
            raise

        session.bytes_transferred += size
        self.logger.log_file_upload(file_path.name, size, session.peer)
        await channel.send(create_success_message(size))

    async def handle_download(self, session):
        """Stream a file from the storage root to the client."""
        channel = session.channel
        filename = await channel.receive()

        try:
            file_path = self._locate(filename)
        except InvalidPath as e:
            self.logger.log_rejected("Download", filename, session.peer, str(e))
            await channel.send(create_error_message("Invalid file path"))
            return
        except NotFound as e:
            self.logger.log_rejected("Download", filename, session.peer, str(e))
            await channel.send(create_error_message(f"File not found - {filename}"))
            return
        except OSError as e:
            self.logger.log_rejected("Download", filename, session.peer, str(e))
            await channel.send(create_error_message(f"Cannot access file - {e.strerror or e}"))
            return

        await channel.send(Status.READY)

        try:
            size = await send_payload(channel, file_path, self.chunk_size, self.logger)
        except (TransferError, OSError) as e:
            # Mid-payload there is no way to send a status frame the client can parse
            self.logger.log_error(f"download of '{file_path.name}'", e)
            raise

        session.bytes_transferred += size
        self.logger.log_file_download(file_path.name, size, session.peer)

    async def handle_list(self, session):
        """Send the numbered listing of the storage root."""
        channel = session.channel

        try:
            names = self.sandbox.list_files()
        except OSError as e:
            self.logger.log_error("list", e)
            await channel.send(create_error_message(f"Cannot list files - {e}"))
            return

        try:
            await channel.send(format_file_listing(self.sandbox.name, names))
        except MalformedFrame as e:
            self.logger.log_error("list", e)
            await channel.send(create_error_message(f"Listing too large ({len(names)} files)"))
            return

        self.logger.debug(f"Listed {len(names)} files for {session.peer}")

    def _locate(self, filename: str) -> Path:
        file_path = self.sandbox.resolve(filename)
        existing = _stat_or_none(file_path)
        if existing is None or not stat.S_ISREG(existing.st_mode):
            raise NotFound(f"No regular file named {file_path.name!r}")
        return file_path

    async def _send_failure(self, channel, detail: str):
        """Report a failure to the peer if the connection still allows it."""
        try:
            await channel.send(create_error_message(detail))
        except TransferError as e:
            self.logger.debug(f"Could not deliver error status: {e}")


def _stat_or_none(path: Path) -> Optional[os.stat_result]:
    """stat() the path, None if it does not exist. Other OS errors propagate."""
    try:
        return path.stat()
    except FileNotFoundError:
        return None
