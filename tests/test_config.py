#!/usr/bin/env python3
"""
Unit tests for configuration and command line validation.
"""

import argparse
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from client.utils.config import ClientConfig
from main_server import parse_args, port_number
from server.utils.config import ServerConfig


class TestServerConfig(unittest.TestCase):

    def test_defaults(self):
        config = ServerConfig()
        self.assertEqual(config.port, 9000)
        self.assertEqual(config.backlog, 50)
        self.assertTrue(config.storage_dir.is_absolute())
        self.assertEqual(config.storage_dir.name, 'Data')

    def test_invalid_port_rejected(self):
        with self.assertRaisesRegex(ValueError, "between 0 and 65535"):
            ServerConfig(port=70000)
        with self.assertRaisesRegex(ValueError, "between 0 and 65535"):
            ServerConfig(port=-1)

    def test_port_zero_accepted(self):
        self.assertEqual(ServerConfig(port=0).port, 0)

    def test_accessors(self):
        config = ServerConfig(host='127.0.0.1', port=2121, backlog=5, storage_dir='store', timeout=7)
        self.assertEqual(config.get_connection_info(), {'host': '127.0.0.1', 'port': 2121, 'backlog': 5})
        settings = config.get_file_settings()
        self.assertEqual(settings['storage_dir'], str(Path('store').resolve()))
        self.assertEqual(settings['chunk_size'], 8192)
        self.assertEqual(settings['timeout'], 7)

    def test_invalid_backlog_rejected(self):
        with self.assertRaises(ValueError):
            ServerConfig(backlog=0)


class TestClientConfig(unittest.TestCase):

    def test_host_trimmed(self):
        self.assertEqual(ClientConfig(host='  example.lan ').host, 'example.lan')

    def test_empty_host_rejected(self):
        with self.assertRaises(ValueError):
            ClientConfig(host='  ')

    def test_port_zero_rejected(self):
        with self.assertRaises(ValueError):
            ClientConfig(port=0)

    def test_accessors(self):
        config = ClientConfig('server.lan', 2121, 'downloads', timeout=3)
        self.assertEqual(config.get_connection_info(), {'host': 'server.lan', 'port': 2121})
        self.assertEqual(config.get_file_settings(),
                         {'download_dir': 'downloads', 'chunk_size': 8192, 'timeout': 3})


class TestServerArguments(unittest.TestCase):

    def test_port_number_range(self):
        self.assertEqual(port_number('1'), 1)
        self.assertEqual(port_number('65535'), 65535)
        for value in ('0', '65536', 'abc'):
            with self.subTest(value=value):
                with self.assertRaises(argparse.ArgumentTypeError):
                    port_number(value)

    def test_parse_args(self):
        args = parse_args(['--port', '2121', '--backlog', '10', '--storage-dir', 'store'])
        self.assertEqual(args.port, 2121)
        self.assertEqual(args.backlog, 10)
        self.assertEqual(args.storage_dir, 'store')


if __name__ == '__main__':
    unittest.main()
