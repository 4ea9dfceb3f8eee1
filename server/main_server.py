#!/usr/bin/env python3
"""
LAN File Transfer Server

Accepts TCP connections and runs one dispatcher task per connection. Each
task serves download, upload, list and disconnect commands against the
storage root until its client goes away.
"""

import asyncio
import socket
import time
from typing import Dict, Optional

from common.channel import FramedChannel
from server.dispatcher import RequestDispatcher, TransferSession, SessionState
from server.files.file_server import FileServer
from server.files.sandbox import PathSandbox
from server.utils.config import ServerConfig
from server.utils.logger import ServerLogger


class FileTransferServer:
    """Main server class: accept loop, per-connection sessions, shutdown."""

    def __init__(self, config: ServerConfig, logger: ServerLogger):
        self.config = config
        self.logger = logger
        self.sandbox = PathSandbox(config.storage_dir)
        self.file_server = FileServer(self.sandbox, logger, config.chunk_size)
        self.dispatcher = RequestDispatcher(self.file_server, logger, self.is_running)
        self.sessions: Dict[asyncio.Task, TransferSession] = {}  # task -> session
        self.server: Optional[asyncio.AbstractServer] = None
        self.running = False
        self.started_at = None

    def is_running(self) -> bool:
        return self.running

    @property
    def port(self) -> int:
        """Port actually bound, useful when configured with port 0."""
        if self.server is None or not self.server.sockets:
            return self.config.port
        return self.server.sockets[0].getsockname()[1]

    async def start(self):
        """Create the storage root and start listening."""
        if self.running:
            raise RuntimeError(f"Server is already running on port {self.port}")

        self.sandbox.ensure_root()
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            backlog=self.config.backlog
        )
        self.running = True
        self.started_at = time.monotonic()
        connection_info = self.config.get_connection_info()
        connection_info['port'] = self.port
        self.logger.log_startup(connection_info, self.config.get_file_settings())

    async def serve_forever(self):
        """Start the server and run until cancelled, then shut down."""
        await self.start()
        try:
            await self.server.serve_forever()
        finally:
            await self.stop()

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        self._configure_socket(writer)
        channel = FramedChannel(reader, writer, self.config.timeout)
        session = TransferSession(channel, channel.peername)
        task = asyncio.current_task()
        self.sessions[task] = session

        self.logger.log_connection(session.peer)

        try:
            await self.dispatcher.run(session)
        except asyncio.CancelledError:
            self.logger.info(f"Connection cancelled for {session.peer}")
            # Only cancellations from outside stop() propagate to the stream callback
            if self.running:
                raise
        except Exception as e:
            self.logger.log_error(f"connection {session.peer}", e)
        finally:
            self.sessions.pop(task, None)
            await channel.close()
            self.logger.log_disconnect(session.peer, session.bytes_transferred)

    async def stop(self, timeout: Optional[float] = None):
        """
        Stop accepting connections and end all sessions.

        Sessions waiting for their next command are ended at once. Sessions in
        the middle of a transfer get up to timeout seconds to finish before
        their connections are closed and their tasks cancelled.
        """
        if not self.running:
            return
        self.running = False
        grace = self.config.shutdown_timeout if timeout is None else timeout

        self.logger.info(f"Stopping server on port {self.port}...")
        self.server.close()

        # Closing the connection ends an idle session's pending read with ChannelClosed
        for session in list(self.sessions.values()):
            if session.state is SessionState.IDLE:
                session.channel.writer.close()

        pending = set(self.sessions)
        if pending:
            _, pending = await asyncio.wait(pending, timeout=grace)

        if pending:
            self.logger.warning(f"{len(pending)} session(s) did not finish within {grace}s, forcing shutdown")
            for task in pending:
                session = self.sessions.get(task)
                if session is not None:
                    session.channel.writer.close()
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        await self.server.wait_closed()

        uptime = time.monotonic() - self.started_at
        self.logger.info(f"Server stopped. Uptime: {uptime:.0f} seconds")

    def _configure_socket(self, writer: asyncio.StreamWriter):
        sock = writer.get_extra_info('socket')
        if sock is None:
            return
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as e:
            self.logger.debug(f"Could not set socket options: {e}")
