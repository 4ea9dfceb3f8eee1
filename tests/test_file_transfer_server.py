#!/usr/bin/env python3
"""
End-to-end tests: a real server on the loopback interface driven by FileClient
and by raw framed channels.

Covers:
- Listing an empty and a populated storage root
- Upload / download round trip
- Overwrite confirmation and cancellation
- Missing files and rejected names keep the session alive
- Invalid commands, disconnect, incomplete uploads
- Concurrent sessions and shutdown
"""

import asyncio
import logging
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock

sys.path.insert(0, str(Path(__file__).parent.parent))

from client.files.file_client import FileClient
from client.utils.config import ClientConfig
from client.utils.logger import ClientLogger
from common.channel import FramedChannel
from common.constants import Commands, Status, TERMINATOR
from common.errors import ChannelClosed
from server.main_server import FileTransferServer
from server.utils.config import ServerConfig
from server.utils.logger import ServerLogger


class ServerTestCase(unittest.IsolatedAsyncioTestCase):
    """Starts a server on an ephemeral port with temporary directories."""

    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        base = Path(self.tmp.name)
        self.storage = base / 'Data'
        self.downloads = base / 'Client'
        self.local = base / 'local'
        self.local.mkdir()

        config = ServerConfig(host='127.0.0.1', port=0, storage_dir=str(self.storage),
                              logs_dir=None, timeout=5, shutdown_timeout=1)
        self.server = FileTransferServer(config, ServerLogger(None, logging.CRITICAL, name='test_server'))
        await self.server.start()

        self.client = await self.make_client()

    async def asyncTearDown(self):
        await self.client.close()
        await self.server.stop()
        self.tmp.cleanup()

    async def make_client(self) -> FileClient:
        config = ClientConfig('127.0.0.1', self.server.port, str(self.downloads), timeout=5)
        client = FileClient(config, ClientLogger(logging.CRITICAL, name='test_client'))
        self.assertTrue(await client.connect())
        return client

    async def open_raw_channel(self) -> FramedChannel:
        reader, writer = await asyncio.open_connection('127.0.0.1', self.server.port)
        channel = FramedChannel(reader, writer, timeout=5)
        self.addAsyncCleanup(channel.close)
        return channel

    def local_file(self, name: str, content: bytes) -> Path:
        path = self.local / name
        path.write_bytes(content)
        return path

    async def wait_for_no_sessions(self, timeout: float = 2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while self.server.sessions and loop.time() < deadline:
            await asyncio.sleep(0.02)


class TestListing(ServerTestCase):

    async def test_storage_root_created_on_start(self):
        self.assertTrue(self.storage.is_dir())

    async def test_empty_storage_root(self):
        listing = await self.client.list_files()
        self.assertEqual(listing, "Files in Data:\n(No files found)\n\nTotal: 0 file(s)")

    async def test_listing_is_idempotent(self):
        (self.storage / 'b.txt').write_text('b')
        (self.storage / 'a.txt').write_text('a')

        first = await self.client.list_files()
        second = await self.client.list_files()

        self.assertEqual(first, second)
        self.assertEqual(first, "Files in Data:\n1. a.txt\n2. b.txt\n\nTotal: 2 file(s)")


class TestUploadDownload(ServerTestCase):

    async def test_round_trip(self):
        content = bytes(range(256)) * 300
        source = self.local_file('report.bin', content)
        confirm = AsyncMock(return_value=True)

        uploaded = await self.client.upload_file(str(source), confirm)
        self.assertTrue(uploaded.ok, uploaded.message)
        self.assertEqual(uploaded.size, len(content))
        self.assertEqual(uploaded.message, f"SUCCESS: File uploaded successfully ({len(content)} bytes)")
        self.assertEqual((self.storage / 'report.bin').read_bytes(), content)

        downloaded = await self.client.download_file('report.bin', confirm)
        self.assertTrue(downloaded.ok, downloaded.message)
        self.assertEqual(downloaded.size, len(content))
        self.assertEqual((self.downloads / 'report.bin').read_bytes(), content)
        confirm.assert_not_awaited()

    async def test_zero_byte_upload(self):
        source = self.local_file('empty.txt', b'')

        result = await self.client.upload_file(str(source), AsyncMock(return_value=True))

        self.assertTrue(result.ok, result.message)
        self.assertEqual(result.size, 0)
        self.assertEqual((self.storage / 'empty.txt').read_bytes(), b'')

    async def test_overwrite_declined_keeps_original(self):
        (self.storage / 'notes.txt').write_bytes(b'original')
        source = self.local_file('notes.txt', b'replacement content')
        confirm = AsyncMock(return_value=False)

        result = await self.client.upload_file(str(source), confirm)

        self.assertFalse(result.ok)
        self.assertTrue(result.message.startswith(Status.CANCELLED), result.message)
        confirm.assert_awaited_once_with('notes.txt')
        self.assertEqual((self.storage / 'notes.txt').read_bytes(), b'original')

        # Session is still usable
        self.assertIn("1. notes.txt", await self.client.list_files())

    async def test_overwrite_confirmed_replaces_file(self):
        (self.storage / 'notes.txt').write_bytes(b'original')
        source = self.local_file('notes.txt', b'replacement content')

        result = await self.client.upload_file(str(source), AsyncMock(return_value=True))

        self.assertTrue(result.ok, result.message)
        self.assertEqual((self.storage / 'notes.txt').read_bytes(), b'replacement content')

    async def test_local_overwrite_declined_sends_nothing(self):
        (self.storage / 'data.csv').write_bytes(b'server copy')
        self.downloads.mkdir(exist_ok=True)
        (self.downloads / 'data.csv').write_bytes(b'local copy')
        confirm = AsyncMock(return_value=False)

        result = await self.client.download_file('data.csv', confirm)

        self.assertFalse(result.ok)
        confirm.assert_awaited_once_with('data.csv')
        self.assertEqual((self.downloads / 'data.csv').read_bytes(), b'local copy')
        self.assertIn("1. data.csv", await self.client.list_files())

    async def test_download_sanitizes_local_name(self):
        (self.storage / 'my_file.txt').write_bytes(b'payload')

        result = await self.client.download_file('my file.txt', AsyncMock(return_value=True))

        self.assertTrue(result.ok, result.message)
        self.assertEqual((self.downloads / 'my_file.txt').read_bytes(), b'payload')

    async def test_embedded_terminator_truncates_upload(self):
        """Known protocol limitation: content stops at the first terminator."""
        source = self.local_file('embedded.txt', b'header' + TERMINATOR + b'trailer')

        result = await self.client.upload_file(str(source), AsyncMock(return_value=True))

        self.assertTrue(result.ok, result.message)
        self.assertEqual(result.size, 6)
        self.assertEqual((self.storage / 'embedded.txt').read_bytes(), b'header')

    async def test_missing_local_file_not_uploaded(self):
        result = await self.client.upload_file(str(self.local / 'nope.txt'), AsyncMock())

        self.assertFalse(result.ok)
        self.assertIn("does not exist", result.message)
        self.assertIn("(No files found)", await self.client.list_files())


class TestRejectedRequests(ServerTestCase):

    async def test_download_missing_file(self):
        result = await self.client.download_file('missing.txt', AsyncMock())

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "ERROR: File not found - missing.txt")
        self.assertFalse((self.downloads / 'missing.txt').exists())

    async def test_download_missing_sends_no_payload(self):
        """The next frame after the error status is the reply to the next command."""
        channel = await self.open_raw_channel()

        await channel.send(Commands.DOWNLOAD)
        await channel.send('missing.txt')
        self.assertEqual(await channel.receive(), "ERROR: File not found - missing.txt")

        await channel.send(Commands.LIST)
        self.assertTrue((await channel.receive()).startswith("Files in Data:"))

    async def test_download_invalid_path(self):
        channel = await self.open_raw_channel()

        await channel.send(Commands.DOWNLOAD)
        await channel.send('..')

        self.assertEqual(await channel.receive(), "ERROR: Invalid file path")

    async def test_download_directory_is_not_found(self):
        (self.storage / 'folder').mkdir()
        channel = await self.open_raw_channel()

        await channel.send(Commands.DOWNLOAD)
        await channel.send('folder')

        self.assertEqual(await channel.receive(), "ERROR: File not found - folder")

    async def test_download_traversal_stays_in_root(self):
        (self.storage / 'passwd').write_bytes(b'inside root')
        channel = await self.open_raw_channel()

        await channel.send(Commands.DOWNLOAD)
        await channel.send('../../etc/passwd')
        self.assertEqual(await channel.receive(), Status.READY)

        payload = b''
        while not payload.endswith(TERMINATOR):
            payload += await channel.read_raw(1024)
        self.assertEqual(payload, b'inside root' + TERMINATOR)

    async def test_upload_invalid_name(self):
        channel = await self.open_raw_channel()

        await channel.send(Commands.UPLOAD)
        await channel.send('   ')
        self.assertEqual(await channel.receive(), "ERROR: Invalid file name")

        await channel.send(Commands.LIST)
        self.assertTrue((await channel.receive()).startswith("Files in Data:"))

    async def test_download_name_too_long_keeps_session(self):
        channel = await self.open_raw_channel()

        await channel.send(Commands.DOWNLOAD)
        await channel.send('a' * 300)
        reply = await channel.receive()
        self.assertTrue(reply.startswith(Status.ERROR), reply)

        await channel.send(Commands.LIST)
        self.assertTrue((await channel.receive()).startswith("Files in Data:"))

    async def test_upload_name_too_long_keeps_session(self):
        channel = await self.open_raw_channel()

        await channel.send(Commands.UPLOAD)
        await channel.send('b' * 300)
        reply = await channel.receive()
        self.assertTrue(reply.startswith(Status.ERROR), reply)

        await channel.send(Commands.LIST)
        self.assertTrue((await channel.receive()).startswith("Files in Data:"))

    async def test_invalid_command_keeps_session(self):
        channel = await self.open_raw_channel()

        await channel.send('9')
        reply = await channel.receive()
        self.assertTrue(reply.startswith("ERROR: Invalid request: '9'"), reply)

        await channel.send(Commands.LIST)
        self.assertTrue((await channel.receive()).startswith("Files in Data:"))

    async def test_disconnect_closes_without_reply(self):
        channel = await self.open_raw_channel()

        await channel.send(Commands.DISCONNECT)

        with self.assertRaises(ChannelClosed):
            await channel.receive()

    async def test_incomplete_upload_removes_partial_file(self):
        channel = await self.open_raw_channel()

        await channel.send(Commands.UPLOAD)
        await channel.send('partial.bin')
        self.assertEqual(await channel.receive(), Status.READY)
        await channel.write_raw(b'half of a file')
        await channel.close()

        await self.wait_for_no_sessions()
        self.assertFalse((self.storage / 'partial.bin').exists())


class TestSessions(ServerTestCase):

    async def test_concurrent_uploads(self):
        other = await self.make_client()
        self.addAsyncCleanup(other.close)
        first = self.local_file('first.bin', b'1' * 50000)
        second = self.local_file('second.bin', b'2' * 70000)
        confirm = AsyncMock(return_value=True)

        results = await asyncio.gather(
            self.client.upload_file(str(first), confirm),
            other.upload_file(str(second), confirm),
        )

        self.assertTrue(all(result.ok for result in results))
        self.assertEqual((self.storage / 'first.bin').read_bytes(), b'1' * 50000)
        self.assertEqual((self.storage / 'second.bin').read_bytes(), b'2' * 70000)

    async def test_failed_session_does_not_affect_others(self):
        channel = await self.open_raw_channel()
        channel.writer.write(b'\x00\x10abc')
        channel.writer.write_eof()

        await asyncio.sleep(0.05)
        self.assertIn("Total: 0 file(s)", await self.client.list_files())

    async def test_stop_ends_idle_sessions(self):
        await self.client.list_files()

        await self.server.stop(timeout=1)

        self.assertFalse(self.server.is_running())
        self.assertEqual(self.server.sessions, {})
        with self.assertRaises(ChannelClosed):
            await self.client.channel.receive()

    async def test_stop_lets_session_tasks_finish(self):
        """Shutdown ends sessions without cancelling the tasks the stream server owns."""
        await self.client.list_files()
        tasks = list(self.server.sessions)

        await self.server.stop(timeout=1)

        self.assertEqual(len(tasks), 1)
        self.assertTrue(all(task.done() and not task.cancelled() for task in tasks))

    async def test_stop_forces_close_after_grace_period(self):
        channel = await self.open_raw_channel()
        await channel.send(Commands.UPLOAD)
        await channel.send('slow.bin')
        self.assertEqual(await channel.receive(), Status.READY)
        await channel.write_raw(b'first part of a file that never ends')
        await asyncio.sleep(0.1)
        tasks = list(self.server.sessions)

        loop = asyncio.get_running_loop()
        started = loop.time()
        await self.server.stop(timeout=0.5)
        elapsed = loop.time() - started

        self.assertGreaterEqual(elapsed, 0.4)
        self.assertLess(elapsed, 3)
        self.assertEqual(self.server.sessions, {})
        self.assertFalse((self.storage / 'slow.bin').exists())
        self.assertTrue(all(not task.cancelled() for task in tasks))

    async def test_start_twice_rejected(self):
        with self.assertRaises(RuntimeError):
            await self.server.start()


if __name__ == '__main__':
    unittest.main()
