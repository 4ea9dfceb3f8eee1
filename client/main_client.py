#!/usr/bin/env python3
"""
LAN File Transfer Client - interactive session

Presents the download / upload / list / exit menu and drives the matching
protocol exchange through FileClient. Each operation runs to completion
before the menu is shown again.
"""

import asyncio
from typing import Callable, Optional

from client.files.file_client import FileClient
from client.utils.config import ClientConfig
from client.utils.logger import ClientLogger
from common.constants import Commands, MAX_PROMPT_ATTEMPTS
from common.errors import TransferError, ChannelClosed, TransferTimeout
from common.protocol_definitions import TransferResult

MENU = """
╔════════════════════════════════╗
║           * MENU *             ║
╠════════════════════════════════╣
║  1. Download File              ║
║  2. Upload File                ║
║  3. List Remote Files          ║
║  4. Exit                       ║
╚════════════════════════════════╝"""


class FileTransferClient:
    """Interactive menu client."""

    def __init__(self, config: ClientConfig, logger: ClientLogger,
                 input_func: Callable[[str], str] = input):
        self.config = config
        self.logger = logger
        self.file_client = FileClient(config, logger)
        self.running = False
        self._input = input_func

    async def prompt(self, text: str) -> Optional[str]:
        """Read one line without blocking the event loop. Returns None on EOF."""
        loop = asyncio.get_running_loop()
        try:
            line = await loop.run_in_executor(None, self._input, text)
        except EOFError:
            return None
        return line.strip()

    async def ask_yes_no(self, question: str) -> bool:
        """Ask until the answer is yes or no, at most MAX_PROMPT_ATTEMPTS times."""
        for _ in range(MAX_PROMPT_ATTEMPTS):
            answer = await self.prompt(f"{question} (yes/no): ")
            if answer is None:
                return False
            answer = answer.lower()
            if answer in ('yes', 'y'):
                return True
            if answer in ('no', 'n'):
                return False
            print("Please answer 'yes' or 'no'.")
        return False

    async def confirm_overwrite(self, name: str) -> bool:
        print(f"⚠️  File '{name}' already exists.")
        return await self.ask_yes_no("Do you want to overwrite?")

    async def interactive_mode(self) -> bool:
        """Connect and run the menu loop until exit or connection loss."""
        if not await self.file_client.connect():
            return False

        self.running = True
        try:
            while self.running:
                print(MENU)
                choice = await self.prompt("Enter choice (1-4): ")
                if choice is None:
                    break
                if not choice:
                    print("Please enter a valid choice.")
                    continue

                try:
                    await self.handle_choice(choice)
                except ChannelClosed:
                    print("⚠️  Server closed the connection.")
                    break
                except TransferTimeout:
                    print("⚠️  Connection timeout.")
                    break
                except (TransferError, OSError) as e:
                    self.logger.log_error("session", e)
                    print(f"⚠️  Connection error: {e}")
                    break
        finally:
            self.running = False
            await self._shutdown()

        return True

    async def handle_choice(self, choice: str):
        if choice == Commands.DOWNLOAD:
            await self.download()
        elif choice == Commands.UPLOAD:
            await self.upload()
        elif choice == Commands.LIST:
            await self.list_files()
        elif choice == Commands.DISCONNECT:
            print("Goodbye!")
            self.running = False
            await self.file_client.disconnect()
        else:
            print("❌ Invalid choice. Please enter 1-4.")

    async def download(self):
        name = await self.prompt("📁 Enter filename to download: ")
        if not name:
            print("❌ Filename cannot be empty.")
            return
        print(f"⬇️  Downloading {name}...")
        self.show_result(await self.file_client.download_file(name, self.confirm_overwrite))

    async def upload(self):
        path = await self.prompt("📂 Enter file path to upload: ")
        if not path:
            print("❌ File path cannot be empty.")
            return
        print(f"⬆️  Uploading {path}...")
        self.show_result(await self.file_client.upload_file(path, self.confirm_overwrite))

    async def list_files(self):
        print("\n📋 Requesting file list from server...")
        listing = await self.file_client.list_files()
        print("\n" + "=" * 50)
        print(listing)
        print("=" * 50)

    @staticmethod
    def show_result(result: TransferResult):
        marker = "✅" if result.ok else "❌"
        print(f"{marker} {result.message}")

    async def _shutdown(self):
        if self.file_client.connected:
            try:
                await self.file_client.disconnect()
            except (TransferError, OSError) as e:
                self.logger.debug(f"Disconnect failed: {e}")
        self.logger.info("Disconnected from server")
