"""
Request dispatcher.

One dispatcher loop runs per connection. It reads a command code frame,
routes it to the matching FileServer handler and returns to idle, until the
client disconnects, the stream closes, or a protocol error ends the session.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from common.channel import FramedChannel
from common.constants import Commands
from common.errors import TransferError, ChannelClosed, MalformedFrame, TransferTimeout
from common.protocol_definitions import create_invalid_request_message
from server.files.file_server import FileServer


class SessionState(Enum):
    IDLE = 'idle'
    DISPATCH = 'dispatch'
    UPLOADING = 'uploading'
    DOWNLOADING = 'downloading'
    LISTING = 'listing'
    CLOSED = 'closed'


@dataclass
class TransferSession:
    """Per-connection state, discarded when the connection ends."""
    channel: FramedChannel
    peer: tuple
    state: SessionState = SessionState.IDLE
    overwrite: bool = False
    bytes_transferred: int = 0


class RequestDispatcher:
    """Routes command codes to file operations for one session at a time."""

    def __init__(self, file_server: FileServer, logger,
                 should_continue: Optional[Callable[[], bool]] = None):
        self.logger = logger
        self.should_continue = should_continue or (lambda: True)
        self.handlers = {
            Commands.UPLOAD: (SessionState.UPLOADING, file_server.handle_upload),
            Commands.DOWNLOAD: (SessionState.DOWNLOADING, file_server.handle_download),
            Commands.LIST: (SessionState.LISTING, file_server.handle_list),
        }

    async def run(self, session: TransferSession):
        """Serve commands until the session closes. Never raises TransferError."""
        try:
            while session.state is not SessionState.CLOSED:
                if not self.should_continue():
                    self.logger.info(f"Server stopping, ending session with {session.peer}")
                    break
                command = await session.channel.receive()
                await self.dispatch(session, command)
        except ChannelClosed:
            self.logger.debug(f"Client {session.peer} closed the connection")
        except (MalformedFrame, TransferTimeout) as e:
            self.logger.warning(f"Ending session with {session.peer}: {e}")
        except (TransferError, OSError) as e:
            self.logger.log_error(f"session with {session.peer}", e)
        finally:
            session.state = SessionState.CLOSED

    async def dispatch(self, session: TransferSession, command: str):
        """Handle one command code."""
        session.state = SessionState.DISPATCH

        if command == Commands.DISCONNECT:
            self.logger.info(f"Client {session.peer} requested disconnection")
            session.state = SessionState.CLOSED
            return

        entry = self.handlers.get(command)
        if entry is None:
            self.logger.warning(f"Invalid request from {session.peer}: {command!r}")
            await session.channel.send(create_invalid_request_message(command))
            session.state = SessionState.IDLE
            return

        state, handler = entry
        session.state = state
        session.overwrite = False
        await handler(session)
        session.state = SessionState.IDLE
